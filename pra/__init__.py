"""
Path Ranking relation prediction.

This package predicts relations between graph entities from the path
patterns that connect them: it discovers paths around labeled node pairs,
turns them into sparse features, and trains batch or online classifiers to
score unseen pairs.

Submodules:
    - data: Labeled node-pair datasets and train / test splits
    - graphs: Graph interface, NetworkX-backed graph, path exploration
    - features: Subgraphs, feature extractors, matchers, feature generation
    - models: Batch (scikit-learn) and online (SGD) classifiers
    - operations: Pipeline variants dispatched by configuration
    - experiments: Output sink, relation metadata, multi-relation driver
    - utils: Configuration access helpers and ranking metrics

Example:
    >>> from pra.data import Dataset
    >>> from pra.graphs import NetworkXGraph
    >>> from pra.operations import create_operation
"""

__version__ = "1.0.0"
