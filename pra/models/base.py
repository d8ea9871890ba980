"""
Model Contracts.

Operations only depend on these two interfaces:

    BatchModel: trained once on a whole feature matrix
    OnlineModel: trained one row at a time over several iterations, and
        safe to update from many threads at once without locking
"""

from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple

from ..data.dataset import Dataset, NodePairInstance
from ..features.matrix import FeatureMatrix, MatrixRow


class BatchModel(ABC):
    """Model trained on a complete feature matrix."""

    @abstractmethod
    def train(self, matrix: FeatureMatrix, dataset: Dataset, feature_names: Sequence[str]) -> None:
        """Fit the model."""

    @abstractmethod
    def classify_instances(self, matrix: FeatureMatrix) -> List[Tuple[NodePairInstance, float]]:
        """Score every row of a matrix."""

    @abstractmethod
    def get_weights(self) -> List[float]:
        """Learned weight per feature column."""


class OnlineModel(ABC):
    """
    Model trained by per-row updates.

    Attributes:
        iterations: Number of passes over the training data
    """

    iterations: int

    @abstractmethod
    def next_iteration(self) -> None:
        """Advance to the next pass (e.g. to decay the learning rate)."""

    @abstractmethod
    def update_weights(self, row: MatrixRow) -> None:
        """Take one gradient step on a row."""

    @abstractmethod
    def classify_instance(self, row: MatrixRow) -> float:
        """Score one row."""

    @abstractmethod
    def get_weights(self) -> List[float]:
        """Learned weight per feature column."""
