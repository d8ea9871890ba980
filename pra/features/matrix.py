"""
Feature Matrix Module.

A MatrixRow is the sparse feature vector of one instance; a FeatureMatrix
is an ordered collection of rows. Rows only exist for instances that
produced at least one feature: "no features" is represented by the
absence of a row, never by an all-zero row.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Tuple

import numpy as np
from scipy import sparse

from ..data.dataset import NodePairInstance


@dataclass(frozen=True)
class MatrixRow:
    """
    Sparse feature vector for one instance.

    Attributes:
        instance: The node pair this row describes
        feature_indices: Column indices of the non-zero features
        values: Feature values, parallel to feature_indices
    """
    instance: NodePairInstance
    feature_indices: Tuple[int, ...]
    values: Tuple[float, ...]

    def __post_init__(self):
        if len(self.feature_indices) != len(self.values):
            raise ValueError(
                f"Row for {self.instance} has {len(self.feature_indices)} indices "
                f"but {len(self.values)} values"
            )

    @property
    def num_features(self) -> int:
        return len(self.feature_indices)


class FeatureMatrix:
    """
    Ordered collection of matrix rows.

    Example:
        >>> matrix = FeatureMatrix(rows)
        >>> X = matrix.to_csr(num_columns=len(feature_names))
        >>> y = matrix.labels()
    """

    def __init__(self, rows: Iterable[MatrixRow]):
        self.rows: List[MatrixRow] = list(rows)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[MatrixRow]:
        return iter(self.rows)

    @property
    def instances(self) -> List[NodePairInstance]:
        return [row.instance for row in self.rows]

    def num_columns(self) -> int:
        """Smallest column count that holds every row."""
        largest = -1
        for row in self.rows:
            if row.feature_indices:
                largest = max(largest, max(row.feature_indices))
        return largest + 1

    def to_csr(self, num_columns: int = 0) -> sparse.csr_matrix:
        """
        Convert to a SciPy CSR matrix.

        Args:
            num_columns: Column count; widened if a row needs more

        Returns:
            csr_matrix of shape [num_rows, num_columns]
        """
        num_columns = max(num_columns, self.num_columns())
        indptr = [0]
        indices: List[int] = []
        data: List[float] = []
        for row in self.rows:
            indices.extend(row.feature_indices)
            data.extend(row.values)
            indptr.append(len(indices))
        return sparse.csr_matrix(
            (np.asarray(data, dtype=np.float64),
             np.asarray(indices, dtype=np.int64),
             np.asarray(indptr, dtype=np.int64)),
            shape=(len(self.rows), num_columns)
        )

    def labels(self) -> np.ndarray:
        """1 for positive instances, 0 for negative ones."""
        return np.asarray([1 if row.instance.is_positive else 0 for row in self.rows],
                          dtype=np.int64)
