"""
Graph Module.

This module defines the graph interface the feature pipeline walks over,
and an in-memory implementation backed by NetworkX.

Nodes and edge types have both string names and dense integer ids. Every
triple (source, relation, target) is stored twice: as ``source -relation->
target`` and as ``target -_relation-> source``, so walks can follow edges
in either direction and path features record the direction with a leading
underscore.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

import networkx as nx

INVERSE_PREFIX = "_"


def inverse_edge_name(edge_name: str) -> str:
    """Name of the edge type that walks the other way."""
    if edge_name.startswith(INVERSE_PREFIX):
        return edge_name[len(INVERSE_PREFIX):]
    return INVERSE_PREFIX + edge_name


class Graph(ABC):
    """
    Graph interface used by feature generation and feature matching.

    Implementations map node and edge-type names to integer ids and expose
    the outgoing edges of each node, including inverse edges.
    """

    @abstractmethod
    def get_node_index(self, name: str) -> int:
        """Id for a node name. Raises KeyError for unknown nodes."""

    @abstractmethod
    def get_node_name(self, node_id: int) -> str:
        """Name for a node id."""

    @abstractmethod
    def has_node(self, name: str) -> bool:
        """Whether the graph has a node with this name."""

    @abstractmethod
    def get_edge_index(self, name: str) -> int:
        """Id for an edge type name. Raises KeyError for unknown types."""

    @abstractmethod
    def get_edge_name(self, edge_id: int) -> str:
        """Name for an edge type id."""

    @abstractmethod
    def has_edge_type(self, name: str) -> bool:
        """Whether the graph has an edge type with this name."""

    @abstractmethod
    def neighbors(self, node_id: int) -> Iterator[Tuple[int, int]]:
        """Yield (edge_type_id, neighbor_id) for every outgoing edge of a node."""

    @abstractmethod
    def degree(self, node_id: int) -> int:
        """Number of outgoing edges (inverse edges included)."""

    @property
    @abstractmethod
    def num_nodes(self) -> int:
        """Number of nodes."""

    @property
    @abstractmethod
    def num_edge_types(self) -> int:
        """Number of edge types (inverse types included)."""


class NetworkXGraph(Graph):
    """
    In-memory graph stored in a NetworkX MultiDiGraph.

    Node ids are NetworkX node keys; each edge carries its type id in the
    ``edge_type`` attribute.

    Example:
        >>> graph = NetworkXGraph.from_triples([
        ...     ("alice", "works_for", "acme"),
        ...     ("bob", "works_for", "acme"),
        ... ])
        >>> acme = graph.get_node_index("acme")
        >>> sorted(graph.get_node_name(n) for _, n in graph.neighbors(acme))
        ['alice', 'bob']
    """

    def __init__(self):
        """Initialize an empty graph."""
        self.graph = nx.MultiDiGraph()

        self._node_ids: Dict[str, int] = {}
        self._node_names: List[str] = []
        self._edge_ids: Dict[str, int] = {}
        self._edge_names: List[str] = []

    @classmethod
    def from_triples(cls, triples: Iterable[Tuple[str, str, str]]) -> 'NetworkXGraph':
        """
        Build a graph from (source, relation, target) name triples.

        Args:
            triples: Iterable of name triples

        Returns:
            NetworkXGraph
        """
        graph = cls()
        for source, relation, target in triples:
            graph.add_triple(source, relation, target)
        return graph

    @classmethod
    def from_tsv_file(cls, path: Union[str, Path]) -> 'NetworkXGraph':
        """
        Load a graph from a ``source<TAB>relation<TAB>target`` file.

        Args:
            path: Path to edge file

        Returns:
            NetworkXGraph
        """
        def read_triples():
            with open(path, 'r') as f:
                for line_number, line in enumerate(f, start=1):
                    line = line.rstrip('\r\n')
                    if not line:
                        continue
                    fields = line.split('\t')
                    if len(fields) != 3:
                        raise ValueError(
                            f"{path}, line {line_number}: expected 3 tab-separated "
                            f"fields, got {len(fields)}"
                        )
                    yield fields[0], fields[1], fields[2]

        return cls.from_triples(read_triples())

    def _intern_node(self, name: str) -> int:
        node_id = self._node_ids.get(name)
        if node_id is None:
            node_id = len(self._node_names)
            self._node_ids[name] = node_id
            self._node_names.append(name)
            self.graph.add_node(node_id, name=name)
        return node_id

    def _intern_edge_type(self, name: str) -> int:
        edge_id = self._edge_ids.get(name)
        if edge_id is None:
            edge_id = len(self._edge_names)
            self._edge_ids[name] = edge_id
            self._edge_names.append(name)
        return edge_id

    def add_triple(self, source: str, relation: str, target: str) -> None:
        """Add an edge and its inverse."""
        source_id = self._intern_node(source)
        target_id = self._intern_node(target)
        forward = self._intern_edge_type(relation)
        inverse = self._intern_edge_type(inverse_edge_name(relation))
        self.graph.add_edge(source_id, target_id, edge_type=forward)
        self.graph.add_edge(target_id, source_id, edge_type=inverse)

    def get_node_index(self, name: str) -> int:
        return self._node_ids[name]

    def get_node_name(self, node_id: int) -> str:
        return self._node_names[node_id]

    def has_node(self, name: str) -> bool:
        return name in self._node_ids

    def get_edge_index(self, name: str) -> int:
        return self._edge_ids[name]

    def get_edge_name(self, edge_id: int) -> str:
        return self._edge_names[edge_id]

    def has_edge_type(self, name: str) -> bool:
        return name in self._edge_ids

    def find_edge_index(self, name: str) -> Optional[int]:
        """Id for an edge type name, or None if unknown."""
        return self._edge_ids.get(name)

    def neighbors(self, node_id: int) -> Iterator[Tuple[int, int]]:
        if node_id not in self.graph:
            return
        for _, neighbor, edge_type in self.graph.out_edges(node_id, data='edge_type'):
            yield edge_type, neighbor

    def degree(self, node_id: int) -> int:
        if node_id not in self.graph:
            return 0
        return self.graph.out_degree(node_id)

    @property
    def num_nodes(self) -> int:
        return len(self._node_names)

    @property
    def num_edge_types(self) -> int:
        return len(self._edge_names)

    def get_statistics(self) -> Dict:
        """
        Get basic graph statistics.

        Returns:
            Dictionary with node, edge and edge-type counts
        """
        return {
            'num_nodes': self.num_nodes,
            'num_edges': self.graph.number_of_edges() // 2,
            'num_edge_types': self.num_edge_types // 2,
        }
