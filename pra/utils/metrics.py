"""
Evaluation Metrics Module.

This module provides ranking metrics over scored instances:
- Average precision over all scored instances
- Mean average precision over per-source rankings
- Mean reciprocal rank of the first correct target per source
"""

from collections import defaultdict
from typing import Dict, List, Sequence, Tuple

import numpy as np
from sklearn.metrics import average_precision_score


def _ranked_labels(scored: List[Tuple[float, bool]]) -> List[bool]:
    return [label for _, label in sorted(scored, key=lambda pair: -pair[0])]


def compute_reciprocal_rank(labels_in_rank_order: Sequence[bool]) -> float:
    """1 / rank of the first positive, or 0.0 if there is none."""
    for rank, label in enumerate(labels_in_rank_order, start=1):
        if label:
            return 1.0 / rank
    return 0.0


def compute_score_metrics(scores: Sequence[Tuple[object, float]]) -> Dict[str, float]:
    """
    Compute ranking metrics for (instance, score) pairs.

    Instances must expose ``source`` and ``is_positive``. Sources with no
    positive instance are left out of MAP and MRR.

    Args:
        scores: Sequence of (instance, score)

    Returns:
        Dictionary with average_precision, mean_average_precision, mrr and
        num_queries; empty if there are no positive instances
    """
    labels = np.asarray([1 if instance.is_positive else 0 for instance, _ in scores])
    if labels.sum() == 0:
        return {}
    values = np.asarray([score for _, score in scores], dtype=np.float64)

    by_source: Dict[object, List[Tuple[float, bool]]] = defaultdict(list)
    for instance, score in scores:
        by_source[instance.source].append((score, instance.is_positive))

    average_precisions = []
    reciprocal_ranks = []
    for scored in by_source.values():
        query_labels = [label for _, label in scored]
        if not any(query_labels):
            continue
        query_scores = [score for score, _ in scored]
        average_precisions.append(
            average_precision_score([int(label) for label in query_labels], query_scores)
        )
        reciprocal_ranks.append(compute_reciprocal_rank(_ranked_labels(scored)))

    return {
        'average_precision': float(average_precision_score(labels, values)),
        'mean_average_precision': float(np.mean(average_precisions)),
        'mrr': float(np.mean(reciprocal_ranks)),
        'num_queries': len(average_precisions),
    }
