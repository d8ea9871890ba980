"""
Graph Explorer Module.

Finds the paths that connect each instance of a dataset, with counts, so
one can see which structural patterns a relation's examples share before
building any feature matrices.
"""

from collections import Counter
from typing import Any, Dict, Optional

from tqdm import tqdm

from ..data.dataset import Dataset, NodePairInstance
from ..experiments.outputter import Outputter
from ..experiments.relation_metadata import RelationMetadata
from ..features.subgraph import SubgraphFinder, path_to_string
from ..utils.params import as_params, ensure_no_extras, extract_with_default
from .graph import Graph


class GraphExplorer:
    """
    Path discovery over a dataset.

    Example:
        >>> explorer = GraphExplorer({'max path length': 2}, 'works_for',
        ...                          RelationMetadata.empty(), outputter, graph)
        >>> path_counts = explorer.find_connecting_paths(dataset)
        >>> path_counts[instance].most_common(3)
    """

    param_keys = ['max path length', 'max fan out', 'max paths per node']

    def __init__(
        self,
        params: Optional[Any],
        relation: str,
        relation_metadata: RelationMetadata,
        outputter: Outputter,
        graph: Graph
    ):
        """
        Initialize explorer.

        Args:
            params: The ``explore`` configuration block
            relation: Relation whose own edges are hidden between each pair
            relation_metadata: Used to find the relation's inverse
            outputter: Sink for progress messages
            graph: Graph to explore
        """
        params = as_params(params, 'explore')
        ensure_no_extras(params, 'operation -> explore', self.param_keys)
        self.relation = relation
        self.outputter = outputter
        self.finder = SubgraphFinder(
            graph,
            relation=relation,
            max_path_length=int(extract_with_default(params, 'max path length', 3)),
            max_fan_out=int(extract_with_default(params, 'max fan out', 100)),
            max_paths_per_node=int(extract_with_default(params, 'max paths per node', 50)),
            inverse_relation=relation_metadata.get_inverse(relation) or ""
        )

    def find_connecting_paths(self, dataset: Dataset) -> Dict[NodePairInstance, Counter]:
        """
        Count connecting paths for every instance.

        Args:
            dataset: Instances to explore

        Returns:
            instance -> Counter of path strings (empty for disconnected pairs)
        """
        self.outputter.info(
            f"Exploring paths for {len(dataset)} instances of {self.relation}"
        )
        path_counts: Dict[NodePairInstance, Counter] = {}
        for instance in tqdm(dataset.instances, desc="Exploring", disable=None, leave=False):
            counts = self.finder.find(instance).connecting_path_counts()
            path_counts[instance] = Counter(
                {path_to_string(path): count for path, count in counts.items()}
            )
        return path_counts
