"""
Online Models.

SgdLogisticRegressionModel keeps its weights in a single torch tensor and
updates it in place, one row at a time.

Concurrency:
    update_weights is called from many worker threads with no lock around
    the read-compute-write of the weights (Hogwild-style asynchronous SGD).
    Concurrent updates to the same feature can overwrite each other, which
    makes results slightly nondeterministic under parallel training. This
    is the intended throughput/consistency tradeoff; serializing the
    updates would serialize training. Only growth of the weight vector,
    which replaces the tensor, takes a lock.
"""

import math
import threading
from typing import Any, Dict, List

import torch

from ..experiments.outputter import Outputter
from ..features.matrix import MatrixRow
from ..utils.params import ensure_no_extras, extract_with_default
from .base import OnlineModel


def _sigmoid(score: float) -> float:
    if score >= 0:
        return 1.0 / (1.0 + math.exp(-score))
    z = math.exp(score)
    return z / (1.0 + z)


class SgdLogisticRegressionModel(OnlineModel):
    """
    Logistic regression trained by stochastic gradient ascent.

    The learning rate for iteration t is ``learning_rate / sqrt(t)``; L2
    regularization is applied lazily to the features active in each row.

    Example:
        >>> model = SgdLogisticRegressionModel({'iterations': 5}, outputter)
        >>> for _ in range(model.iterations):
        ...     model.next_iteration()
        ...     for row in rows:
        ...         model.update_weights(row)
        >>> model.classify_instance(rows[0])
    """

    param_keys = ['type', 'iterations', 'learning rate', 'l2 weight', 'initial capacity']

    def __init__(self, params: Dict[str, Any], outputter: Outputter):
        """
        Initialize model.

        Args:
            params: The ``learning`` configuration block
            outputter: Sink for progress messages
        """
        ensure_no_extras(params, 'operation -> learning', self.param_keys)
        self.outputter = outputter
        self.iterations = int(extract_with_default(params, 'iterations', 10))
        self.learning_rate = float(extract_with_default(params, 'learning rate', 0.1))
        self.l2_weight = float(extract_with_default(params, 'l2 weight', 0.0))
        capacity = int(extract_with_default(params, 'initial capacity', 1024))

        self.iteration = 0
        self.current_learning_rate = self.learning_rate
        self._weights = torch.zeros(max(capacity, 1), dtype=torch.float64)
        self._growth_lock = threading.Lock()

    def next_iteration(self) -> None:
        self.iteration += 1
        self.current_learning_rate = self.learning_rate / math.sqrt(self.iteration)

    def _ensure_capacity(self, max_index: int) -> torch.Tensor:
        weights = self._weights
        if max_index < weights.shape[0]:
            return weights
        with self._growth_lock:
            weights = self._weights
            if max_index >= weights.shape[0]:
                grown = torch.zeros(max(max_index + 1, 2 * weights.shape[0]), dtype=torch.float64)
                grown[:weights.shape[0]] = weights
                self._weights = grown
                weights = grown
        return weights

    def _score(self, weights: torch.Tensor, indices: torch.Tensor, values: torch.Tensor) -> float:
        return float(torch.dot(weights[indices], values))

    def update_weights(self, row: MatrixRow) -> None:
        if not row.feature_indices:
            return
        weights = self._ensure_capacity(max(row.feature_indices))
        indices = torch.tensor(row.feature_indices, dtype=torch.long)
        values = torch.tensor(row.values, dtype=torch.float64)

        # Unsynchronized read-modify-write; see module docstring.
        probability = _sigmoid(self._score(weights, indices, values))
        label = 1.0 if row.instance.is_positive else 0.0
        gradient = (label - probability) * values - self.l2_weight * weights[indices]
        weights.index_add_(0, indices, self.current_learning_rate * gradient)

    def classify_instance(self, row: MatrixRow) -> float:
        weights = self._weights
        known = [(i, v) for i, v in zip(row.feature_indices, row.values) if i < weights.shape[0]]
        if not known:
            return _sigmoid(0.0)
        indices = torch.tensor([i for i, _ in known], dtype=torch.long)
        values = torch.tensor([v for _, v in known], dtype=torch.float64)
        return _sigmoid(self._score(weights, indices, values))

    def get_weights(self) -> List[float]:
        return self._weights.tolist()
