"""
Features Module.

This module turns node pairs into sparse feature rows, and feature strings
back into the nodes they relate:

1. SubgraphFinder discovers the paths around a node pair
2. Feature extractors turn connecting paths into feature strings
3. The feature generator assigns columns and builds matrix rows
4. Feature matchers guide reverse walks for get_related_nodes

Example:
    >>> from pra.features import create_feature_generator
    >>> generator = create_feature_generator(params, graph, relation, metadata, outputter)
    >>> row = generator.construct_matrix_row(instance)
"""

from .matchers import FeatureMatcher, PathFeatureMatcher, EmptyFeatureMatcher
from .subgraph import Subgraph, SubgraphFinder
from .extractors import (
    FeatureExtractor,
    PraFeatureExtractor,
    AnyRelFeatureExtractor,
    PathBigramsFeatureExtractor,
    ConnectedAtOneFeatureExtractor,
    create_extractors,
)
from .matrix import MatrixRow, FeatureMatrix
from .cache import FeatureVectorCache
from .generator import (
    FeatureGenerator,
    NodePairSubgraphFeatureGenerator,
    create_feature_generator,
)

__all__ = [
    'FeatureMatcher',
    'PathFeatureMatcher',
    'EmptyFeatureMatcher',
    'Subgraph',
    'SubgraphFinder',
    'FeatureExtractor',
    'PraFeatureExtractor',
    'AnyRelFeatureExtractor',
    'PathBigramsFeatureExtractor',
    'ConnectedAtOneFeatureExtractor',
    'create_extractors',
    'MatrixRow',
    'FeatureMatrix',
    'FeatureVectorCache',
    'FeatureGenerator',
    'NodePairSubgraphFeatureGenerator',
    'create_feature_generator',
]
