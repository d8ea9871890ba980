"""
Operation Base Module.

An operation is one pipeline variant run for a relation: train and test a
model, explore paths, dump matrices, and so on. Operations validate their
configuration block in the constructor, so a bad key fails before any
relation is processed.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

from ..data.dataset import Dataset
from ..data.split import DatasetSplit
from ..errors import MissingDataError
from ..experiments.outputter import Outputter
from ..experiments.relation_metadata import RelationMetadata
from ..graphs.graph import Graph
from ..utils.params import as_params, ensure_no_extras

DATA_OPTIONS = ['both', 'training', 'testing']


class Operation(ABC):
    """
    One pipeline variant.

    Subclasses list their recognized configuration keys in param_keys.
    """

    param_keys: Sequence[str] = ('type',)

    def __init__(
        self,
        params: Optional[Dict[str, Any]],
        graph: Optional[Graph],
        split: Optional[DatasetSplit],
        relation_metadata: RelationMetadata,
        outputter: Outputter
    ):
        """
        Initialize operation.

        Args:
            params: The ``operation`` configuration block
            graph: Graph to extract features from (None if not needed)
            split: Source of training / testing data
            relation_metadata: Relation lookups
            outputter: Sink for results and messages

        Raises:
            ConfigurationError: for keys outside param_keys
        """
        self.params = as_params(params, 'operation')
        ensure_no_extras(self.params, 'operation', self.param_keys)
        self.graph = graph
        self.split = split
        self.relation_metadata = relation_metadata
        self.outputter = outputter

    @abstractmethod
    def run_relation(self, relation: str) -> None:
        """Run this operation for one relation."""

    def get_training_data(self, relation: str, required: bool = True) -> Optional[Dataset]:
        return self._get_data(relation, 'training', required)

    def get_testing_data(self, relation: str, required: bool = True) -> Optional[Dataset]:
        return self._get_data(relation, 'testing', required)

    def _get_data(self, relation: str, which: str, required: bool) -> Optional[Dataset]:
        data = None
        if self.split is not None:
            if which == 'training':
                data = self.split.get_training_data(relation, self.graph)
            else:
                data = self.split.get_testing_data(relation, self.graph)
        if data is None and required:
            raise MissingDataError(f"No {which} data exists for relation {relation}", relation)
        return data
