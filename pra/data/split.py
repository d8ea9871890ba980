"""
Split Module.

A split supplies the training and testing datasets of each relation. On
disk a split is a directory with one subdirectory per relation holding
``training.tsv`` and/or ``testing.tsv``; either file may be missing.
"""

from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union

from ..graphs.graph import Graph
from .dataset import Dataset, RandomSource

TRAINING_FILE = 'training.tsv'
TESTING_FILE = 'testing.tsv'


def _relation_dir_name(relation: str) -> str:
    return relation.replace('/', '_')


class DatasetSplit:
    """
    Training / testing datasets read from a split directory.

    Loaded datasets are memoized, so repeated requests for a relation read
    the file once.

    Example:
        >>> split = DatasetSplit('data/splits/nell')
        >>> training = split.get_training_data('concept:athleteplaysforteam')
        >>> testing = split.get_testing_data('concept:athleteplaysforteam')
    """

    def __init__(self, split_dir: Union[str, Path]):
        self.split_dir = Path(split_dir)
        self._loaded: Dict[Tuple[str, str], Optional[Dataset]] = {}

    @classmethod
    def create(
        cls,
        split_dir: Union[str, Path],
        relation_data: Dict[str, Dataset],
        training_fraction: float,
        rng: RandomSource = None
    ) -> 'DatasetSplit':
        """
        Create a split directory by splitting each relation's dataset.

        Args:
            split_dir: Directory to write into
            relation_data: relation -> full labeled dataset
            training_fraction: Fraction of each class used for training
            rng: numpy Generator or seed

        Returns:
            DatasetSplit over the written directory
        """
        split = cls(split_dir)
        for relation, dataset in relation_data.items():
            training, testing = dataset.split_data(training_fraction, rng=rng)
            relation_dir = split.relation_dir(relation)
            training.write_to_file(relation_dir / TRAINING_FILE)
            testing.write_to_file(relation_dir / TESTING_FILE)
        return split

    def relation_dir(self, relation: str) -> Path:
        return self.split_dir / _relation_dir_name(relation)

    def relations(self) -> Iterable[str]:
        """Names of the relation directories in this split."""
        if not self.split_dir.is_dir():
            return []
        return sorted(p.name for p in self.split_dir.iterdir() if p.is_dir())

    def _load(self, relation: str, filename: str) -> Optional[Dataset]:
        key = (relation, filename)
        if key not in self._loaded:
            path = self.relation_dir(relation) / filename
            self._loaded[key] = Dataset.read_from_file(path) if path.is_file() else None
        return self._loaded[key]

    def get_training_data(self, relation: str, graph: Optional[Graph] = None) -> Optional[Dataset]:
        """Training dataset, or None if the relation has no training file."""
        return self._load(relation, TRAINING_FILE)

    def get_testing_data(self, relation: str, graph: Optional[Graph] = None) -> Optional[Dataset]:
        """Testing dataset, or None if the relation has no testing file."""
        return self._load(relation, TESTING_FILE)
