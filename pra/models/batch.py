"""
Batch Models.

Linear classifiers from scikit-learn over the sparse feature matrix:

    LogisticRegressionModel: L1 / L2 / elastic-net regularized logistic regression
    SvmModel: linear SVM, scored by signed distance to the margin
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from sklearn.linear_model import LogisticRegression
from sklearn.svm import LinearSVC

from ..data.dataset import Dataset, NodePairInstance
from ..experiments.outputter import Outputter
from ..features.matrix import FeatureMatrix
from ..utils.params import ensure_no_extras, extract_with_default
from .base import BatchModel


class SklearnBatchModel(BatchModel):
    """Shared fit / score plumbing for scikit-learn estimators."""

    def __init__(self, outputter: Outputter):
        self.outputter = outputter
        self.estimator = None
        self.num_features = 0

    def build_estimator(self):
        raise NotImplementedError

    def score_matrix(self, X) -> np.ndarray:
        raise NotImplementedError

    def train(self, matrix: FeatureMatrix, dataset: Dataset, feature_names: Sequence[str]) -> None:
        self.num_features = len(feature_names)
        X = matrix.to_csr(self.num_features)
        y = matrix.labels()
        if len(set(y.tolist())) < 2:
            raise ValueError(
                f"Training matrix needs both positive and negative rows "
                f"({len(matrix)} rows, {int(y.sum())} positive)"
            )
        self.outputter.info(
            f"Training {type(self).__name__} on {X.shape[0]} rows x {X.shape[1]} features"
        )
        self.estimator = self.build_estimator()
        self.estimator.fit(X, y)

    def classify_instances(self, matrix: FeatureMatrix) -> List[Tuple[NodePairInstance, float]]:
        if self.estimator is None:
            raise RuntimeError("Model must be trained before classifying")
        if len(matrix) == 0:
            return []
        # Columns the model never saw carry no weight.
        X = matrix.to_csr(self.num_features)[:, :self.num_features]
        scores = self.score_matrix(X)
        return [(row.instance, float(score)) for row, score in zip(matrix, scores)]

    def get_weights(self) -> List[float]:
        if self.estimator is None:
            return []
        return self.estimator.coef_.ravel().tolist()


class LogisticRegressionModel(SklearnBatchModel):
    """
    Regularized logistic regression.

    Example:
        >>> model = LogisticRegressionModel({'l2 weight': 1.0}, outputter)
        >>> model.train(training_matrix, training_data, feature_names)
        >>> scores = model.classify_instances(test_matrix)
    """

    param_keys = ['type', 'l1 weight', 'l2 weight', 'max iterations']

    def __init__(self, params: Dict[str, Any], outputter: Outputter):
        super().__init__(outputter)
        ensure_no_extras(params, 'operation -> learning', self.param_keys)
        self.l1_weight = float(extract_with_default(params, 'l1 weight', 0.0))
        self.l2_weight = float(extract_with_default(params, 'l2 weight', 1.0))
        self.max_iterations = int(extract_with_default(params, 'max iterations', 1000))

    def build_estimator(self) -> LogisticRegression:
        l1, l2 = self.l1_weight, self.l2_weight
        if l1 > 0 and l2 > 0:
            return LogisticRegression(penalty='elasticnet', solver='saga', C=1.0 / (l1 + l2),
                                      l1_ratio=l1 / (l1 + l2), max_iter=self.max_iterations)
        if l1 > 0:
            return LogisticRegression(penalty='l1', solver='liblinear', C=1.0 / l1,
                                      max_iter=self.max_iterations)
        if l2 > 0:
            return LogisticRegression(C=1.0 / l2, max_iter=self.max_iterations)
        return LogisticRegression(penalty=None, max_iter=self.max_iterations)

    def score_matrix(self, X) -> np.ndarray:
        return self.estimator.predict_proba(X)[:, 1]


class SvmModel(SklearnBatchModel):
    """Linear SVM; scores are decision function values."""

    param_keys = ['type', 'l2 weight', 'max iterations']

    def __init__(self, params: Dict[str, Any], outputter: Outputter):
        super().__init__(outputter)
        ensure_no_extras(params, 'operation -> learning', self.param_keys)
        self.l2_weight = float(extract_with_default(params, 'l2 weight', 1.0))
        self.max_iterations = int(extract_with_default(params, 'max iterations', 1000))

    def build_estimator(self) -> LinearSVC:
        return LinearSVC(C=1.0 / self.l2_weight if self.l2_weight > 0 else 1.0,
                         max_iter=self.max_iterations)

    def score_matrix(self, X) -> np.ndarray:
        return self.estimator.decision_function(X)
