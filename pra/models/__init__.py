"""
Models Module.

Batch and online classifiers that operations train and query through the
BatchModel and OnlineModel contracts.

Classes:
    LogisticRegressionModel: scikit-learn logistic regression (batch)
    SvmModel: scikit-learn linear SVM (batch)
    SgdLogisticRegressionModel: Hogwild-style SGD logistic regression (online)

Example:
    >>> from pra.models import create_batch_model, create_online_model
    >>> model = create_online_model({'type': 'sgd logistic regression'}, outputter)
"""

from typing import Any, Optional

from ..errors import ConfigurationError
from ..experiments.outputter import Outputter
from ..utils.params import as_params, extract_with_default
from .base import BatchModel, OnlineModel
from .batch import LogisticRegressionModel, SvmModel
from .online import SgdLogisticRegressionModel

BATCH_MODELS = {
    'logistic regression': LogisticRegressionModel,
    'svm': SvmModel,
}

ONLINE_MODELS = {
    'sgd logistic regression': SgdLogisticRegressionModel,
}


def create_batch_model(params: Optional[Any], outputter: Outputter) -> BatchModel:
    """Build the batch model named by ``params['type']`` (default logistic regression)."""
    params = as_params(params, 'learning')
    model_type = extract_with_default(params, 'type', 'logistic regression')
    if model_type not in BATCH_MODELS:
        raise ConfigurationError(
            f"Unrecognized batch model type {model_type!r} in 'learning'; "
            f"expected one of {sorted(BATCH_MODELS)}"
        )
    return BATCH_MODELS[model_type](params, outputter)


def create_online_model(params: Optional[Any], outputter: Outputter) -> OnlineModel:
    """Build the online model named by ``params['type']`` (default SGD logistic regression)."""
    params = as_params(params, 'learning')
    model_type = extract_with_default(params, 'type', 'sgd logistic regression')
    if model_type not in ONLINE_MODELS:
        raise ConfigurationError(
            f"Unrecognized online model type {model_type!r} in 'learning'; "
            f"expected one of {sorted(ONLINE_MODELS)}"
        )
    return ONLINE_MODELS[model_type](params, outputter)


__all__ = [
    'BatchModel',
    'OnlineModel',
    'LogisticRegressionModel',
    'SvmModel',
    'SgdLogisticRegressionModel',
    'create_batch_model',
    'create_online_model',
]
