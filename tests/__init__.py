"""
Test Suite for PRA Relation Prediction.

This package contains tests for all modules:
- test_data.py: Dataset parsing, splitting, merging and split directories
- test_graphs.py: NetworkX graph, subgraph discovery and path exploration
- test_features.py: Extractors, matchers, related-node search, feature cache
- test_models.py: Batch and online models, ranking metrics
- test_operations.py: Operation dispatch, validation, end-to-end runs and the driver
- test_config.py: Configuration loading and command line parsing
"""
