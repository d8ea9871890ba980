"""
Utilities Module.

Components:
    params: Whitelisted access to configuration blocks
    metrics: Ranking metrics over scored instances
"""

from .params import (
    as_params,
    ensure_no_extras,
    extract_with_default,
    extract_option_with_default,
    get_sub_params
)
from .metrics import compute_score_metrics, compute_reciprocal_rank

__all__ = [
    'as_params',
    'ensure_no_extras',
    'extract_with_default',
    'extract_option_with_default',
    'get_sub_params',
    'compute_score_metrics',
    'compute_reciprocal_rank',
]
