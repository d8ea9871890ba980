"""
Feature Generator Module.

The feature generator turns instances into matrix rows. The subgraph
generator does this by discovering the paths around each node pair and
handing them to its configured feature extractors.

It also runs the other way: get_related_nodes asks every extractor for a
matcher for each feature, walks the graph from a node under each matcher,
and unions what the walks reach. This answers "which nodes does this
feature universe relate to this node".
"""

import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from tqdm import tqdm

from ..data.dataset import Dataset, NodePairInstance
from ..errors import ConfigurationError
from ..experiments.outputter import Outputter
from ..experiments.relation_metadata import RelationMetadata
from ..graphs.graph import Graph
from ..utils.params import (
    as_params, ensure_no_extras, extract_with_default, get_sub_params
)
from .extractors import FeatureExtractor, create_extractors
from .matchers import FeatureMatcher
from .matrix import FeatureMatrix, MatrixRow
from .subgraph import Subgraph, SubgraphFinder

BIAS_FEATURE = "bias"


class FeatureGenerator(ABC):
    """Contract the operations use to get feature rows."""

    @abstractmethod
    def create_training_matrix(self, dataset: Dataset) -> FeatureMatrix:
        """Rows for a training dataset; may add new features."""

    @abstractmethod
    def create_test_matrix(self, dataset: Dataset) -> FeatureMatrix:
        """Rows for a testing dataset, restricted to known features."""

    @abstractmethod
    def construct_matrix_row(self, instance: NodePairInstance) -> Optional[MatrixRow]:
        """Row for one instance, or None if it has no features."""

    @abstractmethod
    def get_feature_names(self) -> List[str]:
        """Feature names, indexed by column."""


class NodePairSubgraphFeatureGenerator(FeatureGenerator):
    """
    Feature generator over path subgraphs of node pairs.

    Feature indices are assigned the first time a feature is seen; the
    index dictionary is shared by all worker threads and guarded by a lock.

    Example:
        >>> generator = NodePairSubgraphFeatureGenerator(
        ...     {'feature extractors': ['PraFeatureExtractor']},
        ...     relation='works_for',
        ...     relation_metadata=RelationMetadata.empty(),
        ...     outputter=Outputter.just_logger(),
        ...     graph=graph
        ... )
        >>> matrix = generator.create_training_matrix(training_data)
        >>> generator.get_related_nodes('alice', generator.get_feature_names(), graph)
    """

    param_keys = ['type', 'path finder', 'feature extractors', 'include bias', 'max matcher steps']
    path_finder_keys = ['max path length', 'max fan out', 'max paths per node']

    def __init__(
        self,
        params: Optional[Dict[str, Any]],
        relation: str,
        relation_metadata: RelationMetadata,
        outputter: Outputter,
        graph: Optional[Graph] = None
    ):
        """
        Initialize generator.

        Args:
            params: The ``features`` configuration block
            relation: Relation being predicted
            relation_metadata: Used to find the relation's inverse
            outputter: Sink for progress and failure messages
            graph: Graph to extract features from (needed for matrices)
        """
        params = as_params(params, 'features')
        ensure_no_extras(params, 'operation -> features', self.param_keys)
        finder_params = get_sub_params(params, 'path finder')
        ensure_no_extras(finder_params, 'operation -> features -> path finder',
                         self.path_finder_keys)

        self.relation = relation
        self.relation_metadata = relation_metadata
        self.outputter = outputter
        self.graph = graph

        self.include_bias = bool(extract_with_default(params, 'include bias', False))
        self.max_matcher_steps = int(extract_with_default(params, 'max matcher steps', 10))
        self.max_path_length = int(extract_with_default(finder_params, 'max path length', 3))
        self.max_fan_out = int(extract_with_default(finder_params, 'max fan out', 100))
        self.max_paths_per_node = int(extract_with_default(finder_params, 'max paths per node', 50))

        self.extractors = self.create_extractors(params.get('feature extractors'))

        self._feature_indices: Dict[str, int] = {}
        self._feature_names: List[str] = []
        self._feature_lock = threading.Lock()
        self._finder: Optional[SubgraphFinder] = None

    def create_extractors(self, names: Optional[Any]) -> Sequence[FeatureExtractor]:
        return create_extractors(names)

    # ------------------------------------------------------------------
    # Feature dictionary
    # ------------------------------------------------------------------

    def get_feature_index(self, feature: str, grow: bool = True) -> Optional[int]:
        """
        Column index for a feature name.

        Args:
            feature: Feature name
            grow: Assign a new index if the feature is unseen

        Returns:
            Index, or None if the feature is unseen and grow is False
        """
        index = self._feature_indices.get(feature)
        if index is not None or not grow:
            return index
        with self._feature_lock:
            index = self._feature_indices.get(feature)
            if index is None:
                index = len(self._feature_names)
                self._feature_names.append(feature)
                self._feature_indices[feature] = index
            return index

    def get_feature_names(self) -> List[str]:
        with self._feature_lock:
            return list(self._feature_names)

    # ------------------------------------------------------------------
    # Forward direction: instances to rows
    # ------------------------------------------------------------------

    def _get_finder(self) -> SubgraphFinder:
        if self.graph is None:
            raise ConfigurationError(
                f"Feature generation for relation {self.relation!r} requires a graph"
            )
        if self._finder is None:
            self._finder = SubgraphFinder(
                self.graph,
                relation=self.relation,
                max_path_length=self.max_path_length,
                max_fan_out=self.max_fan_out,
                max_paths_per_node=self.max_paths_per_node,
                inverse_relation=self.relation_metadata.get_inverse(self.relation) or ""
            )
        return self._finder

    def compute_subgraph(self, instance: NodePairInstance) -> Subgraph:
        return self._get_finder().find(instance)

    def extract_features(self, instance: NodePairInstance) -> List[str]:
        """All extractors' features for one instance."""
        subgraph = self.compute_subgraph(instance)
        features: List[str] = []
        for extractor in self.extractors:
            features.extend(extractor.extract_features(instance, subgraph))
        return features

    def construct_matrix_row(
        self,
        instance: NodePairInstance,
        grow_features: bool = True
    ) -> Optional[MatrixRow]:
        """
        Row for one instance.

        Extraction errors are reported and turned into None, so one bad
        instance never aborts a parallel pass over a dataset.

        Args:
            instance: Node pair
            grow_features: Whether unseen features get new columns

        Returns:
            MatrixRow, or None if the instance has no (known) features
        """
        self._get_finder()
        try:
            features = self.extract_features(instance)
        except Exception as e:
            self.outputter.info(
                f"Feature extraction failed for {instance} ({self.relation}): "
                f"{type(e).__name__}: {e}"
            )
            return None

        indices = set()
        for feature in features:
            index = self.get_feature_index(feature, grow=grow_features)
            if index is not None:
                indices.add(index)
        if not indices:
            return None
        if self.include_bias:
            indices.add(self.get_feature_index(BIAS_FEATURE))

        ordered = tuple(sorted(indices))
        return MatrixRow(instance, ordered, tuple(1.0 for _ in ordered))

    def _create_matrix(self, dataset: Dataset, grow_features: bool, description: str) -> FeatureMatrix:
        instances = dataset.instances
        rows = []
        for instance in tqdm(instances, desc=description, disable=None, leave=False):
            row = self.construct_matrix_row(instance, grow_features=grow_features)
            if row is not None:
                rows.append(row)
        self.outputter.info(
            f"{description}: {len(rows)} of {len(instances)} instances have features "
            f"({len(self._feature_names)} features total)"
        )
        return FeatureMatrix(rows)

    def create_training_matrix(self, dataset: Dataset) -> FeatureMatrix:
        return self._create_matrix(dataset, True, "Training matrix")

    def create_test_matrix(self, dataset: Dataset) -> FeatureMatrix:
        return self._create_matrix(dataset, False, "Test matrix")

    # ------------------------------------------------------------------
    # Reverse direction: features to related nodes
    # ------------------------------------------------------------------

    def get_related_nodes(self, node: str, features: Iterable[str], graph: Graph) -> Set[str]:
        """
        Nodes related to a node under any of the given features.

        Every extractor is asked for a matcher for every feature; extractors
        with no matcher contribute nothing. Each distinct matcher object is
        walked once (matchers are compared by identity, since they have no
        structural equality), and the reached node sets are unioned.

        Args:
            node: Starting node name
            features: Feature strings
            graph: Graph to walk

        Returns:
            Set of node names (empty if no extractor yields a matcher)
        """
        matchers: Dict[int, FeatureMatcher] = {}
        for feature in features:
            for extractor in self.extractors:
                matcher = extractor.get_feature_matcher(feature, graph)
                if matcher is not None:
                    matchers.setdefault(id(matcher), matcher)

        related: Set[str] = set()
        for matcher in matchers.values():
            related |= self.find_matching_nodes(node, matcher, graph)
        return related

    def find_matching_nodes(self, node: str, matcher: FeatureMatcher, graph: Graph) -> Set[str]:
        """Names of the nodes a matcher-guided walk from node ends at."""
        if not graph.has_node(node):
            return set()
        node_ids = self.find_matching_node_ids(graph.get_node_index(node), matcher, graph)
        return {graph.get_node_name(node_id) for node_id in node_ids}

    def find_matching_node_ids(self, node_id: int, matcher: FeatureMatcher, graph: Graph) -> Set[int]:
        """
        Walk breadth-first from node_id under a matcher.

        The frontier advances one step at a time over edges and nodes the
        matcher accepts until the matcher reports it is finished. A walk
        that runs out of nodes or exceeds max matcher steps matches nothing.
        """
        current = {node_id}
        steps_taken = 0
        while not matcher.is_finished(steps_taken):
            if steps_taken >= self.max_matcher_steps:
                return set()
            next_nodes = set()
            for current_node in current:
                for edge_type, neighbor in graph.neighbors(current_node):
                    if (matcher.edge_ok(edge_type, steps_taken)
                            and matcher.node_ok(neighbor, steps_taken)):
                        next_nodes.add(neighbor)
            if not next_nodes:
                return set()
            current = next_nodes
            steps_taken += 1
        return current


FEATURE_GENERATOR_TYPES = ['subgraphs']


def create_feature_generator(
    params: Optional[Any],
    graph: Optional[Graph],
    relation: str,
    relation_metadata: RelationMetadata,
    outputter: Outputter
) -> FeatureGenerator:
    """
    Build the feature generator named by ``params['type']``.

    Raises:
        ConfigurationError: for an unknown generator type
    """
    params = as_params(params, 'features')
    generator_type = extract_with_default(params, 'type', 'subgraphs')
    if generator_type == 'subgraphs':
        return NodePairSubgraphFeatureGenerator(
            params, relation, relation_metadata, outputter, graph=graph
        )
    raise ConfigurationError(
        f"Unrecognized feature generator type {generator_type!r}; "
        f"expected one of {FEATURE_GENERATOR_TYPES}"
    )
