"""
Operations Module.

Pipeline variants, selected by the ``type`` of the operation block:

    'no op': NoOp
    'train and test': TrainAndTest (default)
    'explore graph': ExploreGraph
    'create matrices': CreateMatrices
    'sgd train and test': SgdTrainAndTest

Example:
    >>> from pra.operations import create_operation
    >>> operation = create_operation(config['operation'], graph, split,
    ...                              relation_metadata, outputter)
    >>> operation.run_relation('concept:athleteplaysforteam')
"""

from .base import Operation
from .batch import NoOp, TrainAndTest, ExploreGraph, CreateMatrices
from .sgd import SgdTrainAndTest
from .factory import create_operation, OPERATIONS

__all__ = [
    'Operation',
    'NoOp',
    'TrainAndTest',
    'ExploreGraph',
    'CreateMatrices',
    'SgdTrainAndTest',
    'create_operation',
    'OPERATIONS',
]
