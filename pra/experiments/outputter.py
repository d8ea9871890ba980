"""
Outputter Module.

The outputter is the pipeline's single sink: progress messages, feature
matrices, scores, learned weights and path-count reports all go through it.
Messages are printed with a timestamp and appended to ``log.txt``; result
files are written as TSV into the outputter's directory. An outputter
created with just_logger() only prints.
"""

import threading
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..data.dataset import Dataset, NodePairInstance
from ..graphs.graph import Graph
from ..utils.metrics import compute_score_metrics

if TYPE_CHECKING:
    from ..features.matrix import FeatureMatrix

Scores = Sequence[Tuple[NodePairInstance, float]]


class Outputter:
    """
    Write pipeline results and log messages.

    Example:
        >>> outputter = Outputter('results', graph=graph).for_relation('works_for')
        >>> outputter.info('Starting learning')
        >>> outputter.output_scores(scores, training_data)
    """

    def __init__(
        self,
        output_dir: Optional[Union[str, Path]] = None,
        graph: Optional[Graph] = None,
        verbose: bool = True
    ):
        """
        Initialize outputter.

        Args:
            output_dir: Directory for result files (None = log only)
            graph: Graph used to print node names instead of ids
            verbose: Whether to print messages to stdout
        """
        self.output_dir = Path(output_dir) if output_dir is not None else None
        self.graph = graph
        self.verbose = verbose
        self._lock = threading.Lock()

        if self.output_dir is not None:
            self.output_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def just_logger(cls, verbose: bool = True) -> 'Outputter':
        return cls(output_dir=None, verbose=verbose)

    def for_relation(self, relation: str) -> 'Outputter':
        """Outputter writing into a subdirectory named after the relation."""
        if self.output_dir is None:
            return Outputter(None, self.graph, self.verbose)
        safe_name = relation.replace('/', '_')
        return Outputter(self.output_dir / safe_name, self.graph, self.verbose)

    def info(self, message: str) -> None:
        """Log a progress message."""
        line = f"[{datetime.now().strftime('%H:%M:%S')}] {message}"
        with self._lock:
            if self.verbose:
                print(line)
            if self.output_dir is not None:
                with open(self.output_dir / 'log.txt', 'a') as f:
                    f.write(line + '\n')

    def _node_name(self, node_id: int) -> str:
        if self.graph is None:
            return str(node_id)
        return self.graph.get_node_name(node_id)

    def _write_lines(self, filename: str, lines: List[str]) -> Optional[Path]:
        if self.output_dir is None:
            return None
        path = self.output_dir / filename
        with open(path, 'w') as f:
            for line in lines:
                f.write(line + '\n')
        return path

    def output_feature_matrix(
        self,
        is_training: bool,
        matrix: 'FeatureMatrix',
        feature_names: Sequence[str]
    ) -> None:
        """
        Write a feature matrix as ``source  target  label  name,value -#- ...``.
        """
        lines = []
        for row in matrix:
            features = ' -#- '.join(
                f"{feature_names[i]},{value}" for i, value in zip(row.feature_indices, row.values)
            )
            label = 1 if row.instance.is_positive else -1
            lines.append(
                f"{self._node_name(row.instance.source)}\t"
                f"{self._node_name(row.instance.target)}\t{label}\t{features}"
            )
        filename = 'training_matrix.tsv' if is_training else 'test_matrix.tsv'
        path = self._write_lines(filename, lines)
        if path is not None:
            self.info(f"Wrote {len(matrix)} rows to {path}")

    def output_scores(self, scores: Scores, training_data: Optional[Dataset] = None) -> None:
        """
        Write scores grouped by source, highest score first.

        Positive instances are marked with ``*``; pairs that were positive in
        training are marked with ``^`` so they can be ignored when ranking.
        """
        known = training_data.positive_instances_as_set() if training_data is not None else set()
        by_source: Dict[int, List[Tuple[NodePairInstance, float]]] = {}
        for instance, score in scores:
            by_source.setdefault(instance.source, []).append((instance, score))

        lines = []
        for source in sorted(by_source):
            ranked = sorted(by_source[source], key=lambda pair: -pair[1])
            for instance, score in ranked:
                mark = '*' if instance.is_positive else ''
                if instance.as_string() in known:
                    mark += '^'
                lines.append(
                    f"{self._node_name(instance.source)}\t"
                    f"{self._node_name(instance.target)}\t{score}\t{mark}"
                )
            lines.append('')
        self._write_lines('scores.tsv', lines)

        metrics = compute_score_metrics(scores)
        if metrics:
            self.info(
                f"Scored {len(scores)} instances: AP {metrics['average_precision']:.4f}, "
                f"MAP {metrics['mean_average_precision']:.4f}, MRR {metrics['mrr']:.4f}"
            )

    def output_weights(self, weights: Sequence[float], feature_names: Sequence[str]) -> None:
        """Write learned weights, largest magnitude first."""
        pairs = sorted(zip(feature_names, weights), key=lambda pair: -abs(pair[1]))
        self._write_lines('weights.tsv', [f"{name}\t{weight}" for name, weight in pairs])

    def output_path_count_map(
        self,
        path_count_map: Mapping[NodePairInstance, Mapping[str, int]],
        dataset: Dataset
    ) -> None:
        """Write, per instance, every connecting path and how often it was found."""
        lines = []
        for instance in dataset.instances:
            counts = path_count_map.get(instance, {})
            label = '+' if instance.is_positive else '-'
            lines.append(
                f"{self._node_name(instance.source)}\t{self._node_name(instance.target)}\t{label}"
            )
            for path, count in sorted(counts.items(), key=lambda pair: (-pair[1], pair[0])):
                lines.append(f"\t{path}\t{count}")
        self._write_lines('path_counts.tsv', lines)
        self.info(f"Found paths for {sum(1 for c in path_count_map.values() if c)} "
                  f"of {len(dataset)} instances")
