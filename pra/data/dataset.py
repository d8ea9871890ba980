"""
Dataset Module.

This module holds the labeled (source, target) node pairs that a relation
is trained and tested on.

Key Concept:
    A dataset is four parallel sequences of node ids. ``positive_sources[i]``
    pairs with ``positive_targets[i]`` (and likewise for negatives), so any
    operation that reorders instances rebuilds both sequences from the same
    permutation.

    Negative sequences can be *absent* (``None``), which is different from
    *empty*: absent means no negative examples were ever specified, and
    operations that sample their own negatives branch on it.
"""

from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

import numpy as np

from ..errors import ConfigurationError, DatasetParseError


@dataclass(frozen=True)
class NodePairInstance:
    """
    One (source, target) query under a relation.

    Instances are used as cache keys, so equality and hashing are by value.

    Attributes:
        source: Source node id
        target: Target node id
        is_positive: Whether this pair is a known instance of the relation
    """
    source: int
    target: int
    is_positive: bool = True

    def as_string(self) -> str:
        """Render as the "<source> <target>" membership key."""
        return f"{self.source} {self.target}"


RandomSource = Optional[Union[int, np.random.Generator]]

SOURCE_MAP_VARIANTS = ('positive', 'negative', 'combined')


def _as_generator(rng: RandomSource) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def _parse_int(field: str, line_number: int, source: Optional[str]) -> int:
    try:
        return int(field)
    except ValueError:
        raise DatasetParseError(f"Node id is not an integer: {field!r}", line_number, source)


class Dataset:
    """
    Immutable collection of positive and negative (source, target) pairs.

    Example:
        >>> data = Dataset.read_from_lines(["1\\t2", "3\\t4\\t-1"])
        >>> data.positive_instances
        [(1, 2)]
        >>> training, testing = data.split_data(0.5, rng=0)
    """

    def __init__(
        self,
        positive_sources: Sequence[int],
        positive_targets: Sequence[int],
        negative_sources: Optional[Sequence[int]] = None,
        negative_targets: Optional[Sequence[int]] = None
    ):
        """
        Initialize dataset from already-paired sequences.

        Args:
            positive_sources: Source ids of positive pairs
            positive_targets: Target ids of positive pairs (same length)
            negative_sources: Source ids of negative pairs, or None if absent
            negative_targets: Target ids of negative pairs, or None if absent

        Raises:
            ValueError: if a source sequence and its target sequence differ in length
        """
        if len(positive_sources) != len(positive_targets):
            raise ValueError(
                f"Positive sources ({len(positive_sources)}) and targets "
                f"({len(positive_targets)}) have different lengths"
            )
        # Absent negative targets means there are no negatives to speak of.
        if negative_targets is None:
            negative_sources = None
        if negative_sources is None:
            negative_targets = None
        if negative_sources is not None and len(negative_sources) != len(negative_targets):
            raise ValueError(
                f"Negative sources ({len(negative_sources)}) and targets "
                f"({len(negative_targets)}) have different lengths"
            )

        self._positive_sources = tuple(positive_sources)
        self._positive_targets = tuple(positive_targets)
        self._negative_sources = None if negative_sources is None else tuple(negative_sources)
        self._negative_targets = None if negative_targets is None else tuple(negative_targets)

    @classmethod
    def from_instances(
        cls,
        positives: Iterable[Tuple[int, int]],
        negatives: Optional[Iterable[Tuple[int, int]]] = None
    ) -> 'Dataset':
        """
        Create a dataset from lists of (source, target) pairs.

        Args:
            positives: Positive pairs
            negatives: Negative pairs, or None if absent

        Returns:
            Dataset
        """
        positives = list(positives)
        negative_sources = negative_targets = None
        if negatives is not None:
            negatives = list(negatives)
            negative_sources = [s for s, _ in negatives]
            negative_targets = [t for _, t in negatives]
        return cls(
            [s for s, _ in positives],
            [t for _, t in positives],
            negative_sources,
            negative_targets
        )

    @classmethod
    def read_from_file(cls, path: Union[str, Path]) -> 'Dataset':
        """
        Read a dataset from a TSV file.

        See read_from_lines for the format.
        """
        with open(path, 'r') as f:
            return cls.read_from_lines(f, source=str(path))

    @classmethod
    def read_from_lines(cls, lines: Iterable[str], source: Optional[str] = None) -> 'Dataset':
        """
        Parse a dataset from TSV records.

        Each line is either ``source<TAB>target`` (a positive example) or
        ``source<TAB>target<TAB>label`` with label ``1`` (positive) or ``-1``
        (negative). If no negative record is seen, the negatives are absent.

        Args:
            lines: Iterable of lines (trailing newlines allowed)
            source: Description of the input for error messages

        Returns:
            Dataset

        Raises:
            DatasetParseError: on the first malformed line; nothing is skipped
        """
        positive_sources: List[int] = []
        positive_targets: List[int] = []
        negative_sources: List[int] = []
        negative_targets: List[int] = []

        for line_number, line in enumerate(lines, start=1):
            line = line.rstrip('\r\n')
            if not line.strip():
                continue
            fields = line.split('\t')
            if len(fields) == 2:
                positive = True
            elif len(fields) == 3:
                label = fields[2].strip()
                if label not in ('1', '-1'):
                    raise DatasetParseError(
                        f"Label must be 1 or -1, got {fields[2]!r}", line_number, source
                    )
                positive = label == '1'
            else:
                raise DatasetParseError(
                    f"Expected 2 or 3 tab-separated fields, got {len(fields)}",
                    line_number, source
                )

            node_source = _parse_int(fields[0].strip(), line_number, source)
            node_target = _parse_int(fields[1].strip(), line_number, source)
            if positive:
                positive_sources.append(node_source)
                positive_targets.append(node_target)
            else:
                negative_sources.append(node_source)
                negative_targets.append(node_target)

        if not negative_sources:
            return cls(positive_sources, positive_targets)
        return cls(positive_sources, positive_targets, negative_sources, negative_targets)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def positive_sources(self) -> Tuple[int, ...]:
        return self._positive_sources

    @property
    def positive_targets(self) -> Tuple[int, ...]:
        return self._positive_targets

    @property
    def negative_sources(self) -> Optional[Tuple[int, ...]]:
        return self._negative_sources

    @property
    def negative_targets(self) -> Optional[Tuple[int, ...]]:
        return self._negative_targets

    @property
    def has_negatives(self) -> bool:
        """Whether negatives were specified at all (they may still be empty)."""
        return self._negative_sources is not None

    @property
    def positive_instances(self) -> List[Tuple[int, int]]:
        return list(zip(self._positive_sources, self._positive_targets))

    @property
    def negative_instances(self) -> Optional[List[Tuple[int, int]]]:
        """Negative pairs, or None if negatives are absent."""
        if self._negative_sources is None:
            return None
        return list(zip(self._negative_sources, self._negative_targets))

    @property
    def instances(self) -> List[NodePairInstance]:
        """All instances, positives first, as labeled NodePairInstance objects."""
        result = [NodePairInstance(s, t, True) for s, t in self.positive_instances]
        for s, t in self.negative_instances or []:
            result.append(NodePairInstance(s, t, False))
        return result

    @property
    def all_sources(self) -> List[int]:
        return list(self._positive_sources) + list(self._negative_sources or ())

    @property
    def all_targets(self) -> List[int]:
        return list(self._positive_targets) + list(self._negative_targets or ())

    def __len__(self) -> int:
        return len(self._positive_sources) + len(self._negative_sources or ())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Dataset):
            return NotImplemented
        return (
            self._positive_sources == other._positive_sources
            and self._positive_targets == other._positive_targets
            and self._negative_sources == other._negative_sources
            and self._negative_targets == other._negative_targets
        )

    def __hash__(self) -> int:
        return hash((self._positive_sources, self._positive_targets,
                     self._negative_sources, self._negative_targets))

    def __repr__(self) -> str:
        negatives = 'absent' if not self.has_negatives else len(self._negative_sources)
        return f"Dataset(positives={len(self._positive_sources)}, negatives={negatives})"

    # ------------------------------------------------------------------
    # Derived datasets
    # ------------------------------------------------------------------

    def split_data(self, fraction: float, rng: RandomSource = None) -> Tuple['Dataset', 'Dataset']:
        """
        Split into (training, testing) datasets.

        Positives and negatives are shuffled independently and each is cut at
        ``floor(fraction * n)``, so modulo rounding both halves keep the
        original positive/negative ratio. If negatives are absent here they
        are absent in both halves.

        Args:
            fraction: Fraction of each class that goes to training
            rng: numpy Generator or seed, for reproducible splits

        Returns:
            Tuple of (training, testing)
        """
        if not 0.0 <= fraction <= 1.0:
            raise ValueError(f"Split fraction must be in [0, 1], got {fraction}")
        rng = _as_generator(rng)

        train_pos, test_pos = self._split_pairs(self.positive_instances, fraction, rng)
        negatives = self.negative_instances
        if negatives is None:
            train_neg = test_neg = None
        else:
            train_neg, test_neg = self._split_pairs(negatives, fraction, rng)

        return (
            Dataset.from_instances(train_pos, train_neg),
            Dataset.from_instances(test_pos, test_neg),
        )

    @staticmethod
    def _split_pairs(
        pairs: List[Tuple[int, int]],
        fraction: float,
        rng: np.random.Generator
    ) -> Tuple[List[Tuple[int, int]], List[Tuple[int, int]]]:
        # Pairs are permuted as units, keeping sources and targets aligned.
        num_training = int(fraction * len(pairs))
        order = rng.permutation(len(pairs))
        shuffled = [pairs[i] for i in order]
        return shuffled[:num_training], shuffled[num_training:]

    def merge(self, other: 'Dataset') -> 'Dataset':
        """
        Concatenate two datasets positionally.

        Negatives are absent in the result only if they are absent in both.
        """
        if not self.has_negatives and not other.has_negatives:
            negative_sources = negative_targets = None
        else:
            negative_sources = list(self._negative_sources or ()) + list(other._negative_sources or ())
            negative_targets = list(self._negative_targets or ()) + list(other._negative_targets or ())
        return Dataset(
            list(self._positive_sources) + list(other._positive_sources),
            list(self._positive_targets) + list(other._positive_targets),
            negative_sources,
            negative_targets
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    # The string sets are for quick membership tests when sampling
    # candidate negatives.
    def positive_instances_as_set(self) -> Set[str]:
        return {f"{s} {t}" for s, t in self.positive_instances}

    def negative_instances_as_set(self) -> Set[str]:
        return {f"{s} {t}" for s, t in self.negative_instances or []}

    def source_map(self, variant: str = 'positive') -> Dict[int, Set[int]]:
        """
        Map each source id to the set of targets seen with it.

        Args:
            variant: 'positive', 'negative' or 'combined'

        Returns:
            Dictionary source -> set of targets (empty if the view has no pairs)
        """
        if variant == 'positive':
            sources, targets = self._positive_sources, self._positive_targets
        elif variant == 'negative':
            sources, targets = self._negative_sources or (), self._negative_targets or ()
        elif variant == 'combined':
            sources, targets = self.all_sources, self.all_targets
        else:
            raise ConfigurationError(
                f"Unrecognized source map variant {variant!r}; "
                f"expected one of {list(SOURCE_MAP_VARIANTS)}"
            )

        grouped: Dict[int, Set[int]] = defaultdict(set)
        for s, t in zip(sources, targets):
            grouped[s].add(t)
        return dict(grouped)

    def get_positive_source_map(self) -> Dict[int, Set[int]]:
        return self.source_map('positive')

    def get_negative_source_map(self) -> Dict[int, Set[int]]:
        return self.source_map('negative')

    def get_combined_source_map(self) -> Dict[int, Set[int]]:
        return self.source_map('combined')

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_lines(self) -> List[str]:
        """Render as labeled TSV lines (no trailing newlines)."""
        lines = [f"{s}\t{t}\t1" for s, t in self.positive_instances]
        lines.extend(f"{s}\t{t}\t-1" for s, t in self.negative_instances or [])
        return lines

    def write_to_file(self, path: Union[str, Path]) -> None:
        """Write the dataset as labeled TSV."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            for line in self.to_lines():
                f.write(line + '\n')
