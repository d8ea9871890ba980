"""
Operation Factory.

Maps the ``type`` tag of an operation block to its class.
"""

from typing import Any, Dict, Optional, Type

from ..data.split import DatasetSplit
from ..errors import ConfigurationError
from ..experiments.outputter import Outputter
from ..experiments.relation_metadata import RelationMetadata
from ..graphs.graph import Graph
from ..utils.params import as_params, extract_with_default
from .base import Operation
from .batch import CreateMatrices, ExploreGraph, NoOp, TrainAndTest
from .sgd import SgdTrainAndTest

OPERATIONS: Dict[str, Type[Operation]] = {
    'no op': NoOp,
    'train and test': TrainAndTest,
    'explore graph': ExploreGraph,
    'create matrices': CreateMatrices,
    'sgd train and test': SgdTrainAndTest,
}

DEFAULT_OPERATION = 'train and test'


def create_operation(
    params: Optional[Any],
    graph: Optional[Graph],
    split: Optional[DatasetSplit],
    relation_metadata: RelationMetadata,
    outputter: Outputter
) -> Operation:
    """
    Build the operation named by ``params['type']``.

    Args:
        params: The ``operation`` configuration block
        graph: Graph (may be None for operations that do not need one)
        split: Source of training / testing data
        relation_metadata: Relation lookups
        outputter: Sink for results and messages

    Returns:
        Operation, with its configuration already validated

    Raises:
        ConfigurationError: for an unknown type or unrecognized keys
    """
    params = as_params(params, 'operation')
    operation_type = extract_with_default(params, 'type', DEFAULT_OPERATION)
    operation_class = OPERATIONS.get(operation_type)
    if operation_class is None:
        raise ConfigurationError(
            f"Unrecognized operation: {operation_type!r}; expected one of {sorted(OPERATIONS)}"
        )
    return operation_class(params, graph, split, relation_metadata, outputter)
