"""
Data Module.

Classes:
    NodePairInstance: One labeled (source, target) query
    Dataset: Parallel positive / negative source and target sequences
    DatasetSplit: Per-relation training and testing datasets on disk

Example:
    >>> from pra.data import Dataset
    >>> data = Dataset.read_from_file('training.tsv')
    >>> training, testing = data.split_data(0.8)
"""

from .dataset import Dataset, NodePairInstance
from .split import DatasetSplit

__all__ = [
    'Dataset',
    'NodePairInstance',
    'DatasetSplit',
]
