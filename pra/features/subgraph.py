"""
Subgraph Discovery Module.

For a node pair, we explore a bounded neighborhood around each endpoint
and record every edge-type path that reaches each node. Paths from the
source and paths from the target that meet at a common node combine into
a path connecting the pair; these connecting paths are what feature
extractors turn into features.

Key Concept:
    With a maximum path length L, the source side walks ceil(L / 2) steps
    and the target side floor(L / 2) steps. A target-side path is reversed
    and each of its edges inverted before it is appended to a source-side
    path, so every connecting path reads from source to target.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Set, Tuple

from ..data.dataset import NodePairInstance
from ..graphs.graph import Graph, inverse_edge_name

Path = Tuple[str, ...]


def path_to_string(path: Path) -> str:
    """Render a path as "-rel1-_rel2-"."""
    return "-" + "-".join(path) + "-"


def string_to_path(feature: str) -> Path:
    """
    Parse "-rel1-_rel2-" back into a path.

    Raises:
        ValueError: if the string is not a path feature
    """
    if len(feature) < 3 or not feature.startswith("-") or not feature.endswith("-"):
        raise ValueError(f"Not a path feature: {feature!r}")
    parts = feature[1:-1].split("-")
    if any(not part for part in parts):
        raise ValueError(f"Not a path feature: {feature!r}")
    return tuple(parts)


def reverse_path(path: Path) -> Path:
    """The same path walked from the other end."""
    return tuple(inverse_edge_name(edge) for edge in reversed(path))


@dataclass
class Subgraph:
    """
    Paths discovered around one node pair.

    Attributes:
        instance: The node pair this subgraph was computed for
        source_paths: node id -> paths from the source that end there
        target_paths: node id -> paths from the target that end there
    """
    instance: NodePairInstance
    source_paths: Dict[int, Set[Path]] = field(default_factory=dict)
    target_paths: Dict[int, Set[Path]] = field(default_factory=dict)

    def connecting_path_counts(self) -> Counter:
        """
        Count the ways each source-to-target path is realized.

        A path is counted once per (meeting node, source half, target half)
        combination that produces it, so the count grows with the number of
        distinct intermediate routes.
        """
        counts: Counter = Counter()
        shared = self.source_paths.keys() & self.target_paths.keys()
        for node in shared:
            for source_half in self.source_paths[node]:
                for target_half in self.target_paths[node]:
                    path = source_half + reverse_path(target_half)
                    if path:
                        counts[path] += 1
        return counts

    def connecting_paths(self) -> FrozenSet[Path]:
        """All non-empty source-to-target paths through a shared node."""
        return frozenset(self.connecting_path_counts())

    @property
    def num_nodes(self) -> int:
        return len(self.source_paths.keys() | self.target_paths.keys())


class SubgraphFinder:
    """
    Breadth-first path enumeration around node pairs.

    Edges of the relation being predicted between the pair itself (and their
    inverses, and the relation's declared inverse) are skipped, so a known
    instance cannot be explained by its own edge.

    Example:
        >>> finder = SubgraphFinder(graph, relation="works_for", max_path_length=3)
        >>> subgraph = finder.find(NodePairInstance(0, 2))
        >>> sorted(subgraph.connecting_paths())
    """

    def __init__(
        self,
        graph: Graph,
        relation: str = "",
        max_path_length: int = 3,
        max_fan_out: int = 100,
        max_paths_per_node: int = 50,
        inverse_relation: str = ""
    ):
        """
        Initialize finder.

        Args:
            graph: Graph to walk
            relation: Relation being predicted (its edges between the pair are skipped)
            max_path_length: Maximum number of edges in a connecting path
            max_fan_out: Nodes with more outgoing edges than this are not expanded
            max_paths_per_node: Cap on distinct paths kept per reached node
            inverse_relation: Name of the relation's inverse, if it has one
        """
        if max_path_length < 1:
            raise ValueError(f"max_path_length must be positive, got {max_path_length}")
        self.graph = graph
        self.max_path_length = max_path_length
        self.max_fan_out = max_fan_out
        self.max_paths_per_node = max_paths_per_node

        excluded = set()
        for name in (relation, inverse_relation):
            if name:
                excluded.add(name)
                excluded.add(inverse_edge_name(name))
        self.excluded_edge_types = frozenset(
            graph.get_edge_index(name) for name in excluded if graph.has_edge_type(name)
        )

    def find(self, instance: NodePairInstance) -> Subgraph:
        """
        Compute the subgraph for one instance.

        Args:
            instance: Node pair

        Returns:
            Subgraph with the paths reaching each node from either endpoint
        """
        source_steps = (self.max_path_length + 1) // 2
        target_steps = self.max_path_length // 2
        pair = {instance.source, instance.target}
        return Subgraph(
            instance=instance,
            source_paths=self._walk(instance.source, source_steps, pair),
            target_paths=self._walk(instance.target, target_steps, pair),
        )

    def _walk(self, start: int, num_steps: int, pair: Set[int]) -> Dict[int, Set[Path]]:
        paths: Dict[int, Set[Path]] = defaultdict(set)
        paths[start].add(())
        frontier: Dict[int, Set[Path]] = {start: {()}}

        for _ in range(num_steps):
            next_frontier: Dict[int, Set[Path]] = defaultdict(set)
            for node, node_paths in frontier.items():
                if node != start and self.graph.degree(node) > self.max_fan_out:
                    continue
                for edge_type, neighbor in self.graph.neighbors(node):
                    if (edge_type in self.excluded_edge_types
                            and node in pair and neighbor in pair):
                        continue
                    reached = paths[neighbor]
                    for path in node_paths:
                        if len(reached) >= self.max_paths_per_node:
                            break
                        extended = path + (self.graph.get_edge_name(edge_type),)
                        if extended not in reached:
                            reached.add(extended)
                            next_frontier[neighbor].add(extended)
            frontier = next_frontier
            if not frontier:
                break

        return dict(paths)
