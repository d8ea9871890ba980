"""
Feature Extractor Module.

Feature extractors turn the connecting paths of a node pair into textual
features. Some extractors can also run in reverse: given one of their
feature strings, they build a FeatureMatcher that lets a graph walk recover
every node connected to a starting node by that feature. Extractors that
cannot reconstruct a feature return None from get_feature_matcher.

Extractor families:
    PraFeatureExtractor: the full path, e.g. "-works_for-_works_for-"
    AnyRelFeatureExtractor: the path with one edge wildcarded
    PathBigramsFeatureExtractor: consecutive edge pairs of each path
    ConnectedAtOneFeatureExtractor: whether a single edge connects the pair
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Type

from ..data.dataset import NodePairInstance
from ..errors import ConfigurationError
from ..graphs.graph import Graph
from .matchers import EmptyFeatureMatcher, FeatureMatcher, PathFeatureMatcher
from .subgraph import Path, Subgraph, path_to_string, string_to_path

ANY_REL = "@ANY_REL@"


class FeatureExtractor(ABC):
    """Capability contract for one family of features."""

    @abstractmethod
    def extract_features(self, instance: NodePairInstance, subgraph: Subgraph) -> List[str]:
        """Features for one instance, given its subgraph."""

    def get_feature_matcher(self, feature: str, graph: Graph) -> Optional[FeatureMatcher]:
        """
        Matcher that reconstructs this feature, or None if this extractor
        cannot (or does not own the feature).
        """
        return None


def _edge_pattern(path: Sequence[str], graph: Graph) -> Optional[List[Optional[int]]]:
    pattern: List[Optional[int]] = []
    for edge in path:
        if edge == ANY_REL:
            pattern.append(None)
        elif graph.has_edge_type(edge):
            pattern.append(graph.get_edge_index(edge))
        else:
            return None
    return pattern


class PraFeatureExtractor(FeatureExtractor):
    """One feature per connecting path."""

    def extract_features(self, instance: NodePairInstance, subgraph: Subgraph) -> List[str]:
        return sorted(path_to_string(path) for path in subgraph.connecting_paths())

    def get_feature_matcher(self, feature: str, graph: Graph) -> Optional[FeatureMatcher]:
        try:
            path = string_to_path(feature)
        except ValueError:
            return None
        if ANY_REL in path:
            return None
        pattern = _edge_pattern(path, graph)
        # A well-formed path over edge types this graph lacks matches nothing.
        if pattern is None:
            return EmptyFeatureMatcher()
        return PathFeatureMatcher(pattern)


class AnyRelFeatureExtractor(FeatureExtractor):
    """
    Paths with one edge replaced by a wildcard.

    Only paths of two or more edges are generalized; wildcarding the single
    edge of a length-one path would connect every neighbor.
    """

    prefix = "ANYREL:"

    def extract_features(self, instance: NodePairInstance, subgraph: Subgraph) -> List[str]:
        features = set()
        for path in subgraph.connecting_paths():
            if len(path) < 2:
                continue
            for i in range(len(path)):
                generalized: Path = path[:i] + (ANY_REL,) + path[i + 1:]
                features.add(self.prefix + path_to_string(generalized))
        return sorted(features)

    def get_feature_matcher(self, feature: str, graph: Graph) -> Optional[FeatureMatcher]:
        if not feature.startswith(self.prefix):
            return None
        try:
            path = string_to_path(feature[len(self.prefix):])
        except ValueError:
            return None
        pattern = _edge_pattern(path, graph)
        if pattern is None:
            return EmptyFeatureMatcher()
        return PathFeatureMatcher(pattern)


class PathBigramsFeatureExtractor(FeatureExtractor):
    """Bigrams of consecutive edges, with start and end markers."""

    prefix = "BIGRAM:"

    def extract_features(self, instance: NodePairInstance, subgraph: Subgraph) -> List[str]:
        features = set()
        for path in subgraph.connecting_paths():
            padded = ("@START@",) + path + ("@END@",)
            for first, second in zip(padded, padded[1:]):
                features.add(f"{self.prefix}{first}-{second}")
        return sorted(features)


class ConnectedAtOneFeatureExtractor(FeatureExtractor):
    """A single feature when the pair is joined by one edge."""

    feature = "CONNECTED"

    def extract_features(self, instance: NodePairInstance, subgraph: Subgraph) -> List[str]:
        if any(len(path) == 1 for path in subgraph.connecting_paths()):
            return [self.feature]
        return []


EXTRACTOR_REGISTRY: Dict[str, Type[FeatureExtractor]] = {
    'PraFeatureExtractor': PraFeatureExtractor,
    'AnyRelFeatureExtractor': AnyRelFeatureExtractor,
    'PathBigramsFeatureExtractor': PathBigramsFeatureExtractor,
    'ConnectedAtOneFeatureExtractor': ConnectedAtOneFeatureExtractor,
}

DEFAULT_EXTRACTORS = ['PraFeatureExtractor']


def create_extractors(names: Optional[Any]) -> List[FeatureExtractor]:
    """
    Build extractors from configuration.

    Args:
        names: List of extractor names (a single name is also accepted);
            None selects the default

    Returns:
        List of extractor instances, in configuration order

    Raises:
        ConfigurationError: for an unknown extractor name
    """
    if names is None:
        names = DEFAULT_EXTRACTORS
    elif isinstance(names, str):
        names = [names]

    extractors = []
    for name in names:
        extractor_class = EXTRACTOR_REGISTRY.get(name)
        if extractor_class is None:
            raise ConfigurationError(
                f"Unrecognized feature extractor {name!r} in 'feature extractors'; "
                f"expected one of {sorted(EXTRACTOR_REGISTRY)}"
            )
        extractors.append(extractor_class())
    return extractors
