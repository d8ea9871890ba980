"""
SGD Train-and-Test Operation.

Online training with parallel, cached feature extraction.

Each iteration shuffles the training instances and fans them out over a
thread pool. A worker reuses the instance's cached row if there is one,
otherwise asks the feature generator for it (and caches the result, None
included, when caching is on), then applies one SGD update to the shared
model.

Concurrency:
    The feature cache is a lock-striped concurrent map. The model's weights
    are NOT locked: concurrent updates race, Hogwild-style, trading exact
    consistency for throughput. Outputs of a parallel run therefore vary
    slightly from run to run; ``threads: 1`` gives a deterministic
    sequential run (with a fixed ``seed``).

    TODO: review whether the unsynchronized updates need bounding (e.g.
    per-feature striping) for relations with very dense shared features.
"""

import os
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

import numpy as np

from ..data.dataset import NodePairInstance
from ..errors import ConfigurationError
from ..features.cache import FeatureVectorCache
from ..features.generator import FeatureGenerator, create_feature_generator
from ..features.matrix import FeatureMatrix, MatrixRow
from ..models import create_online_model
from ..models.base import OnlineModel
from ..utils.params import extract_with_default, get_sub_params
from .base import Operation

T = TypeVar('T')
R = TypeVar('R')


def default_num_threads() -> int:
    return min(os.cpu_count() or 1, 8)


class SgdTrainAndTest(Operation):
    """
    Parallel online training followed by parallel test-time scoring.

    Example:
        >>> operation = SgdTrainAndTest(
        ...     {'type': 'sgd train and test', 'threads': 1, 'seed': 0},
        ...     graph, split, RelationMetadata.empty(), outputter
        ... )
        >>> operation.run_relation('works_for')
    """

    param_keys = ('type', 'learning', 'features', 'cache feature vectors', 'threads', 'seed')

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.cache_feature_vectors = bool(
            extract_with_default(self.params, 'cache feature vectors', True)
        )
        self.num_threads = int(extract_with_default(self.params, 'threads', default_num_threads()))
        if self.num_threads < 1:
            raise ConfigurationError(
                f"'threads' in 'operation' must be at least 1, got {self.num_threads}"
            )
        self.random = np.random.default_rng(self.params.get('seed'))
        self.feature_params = get_sub_params(self.params, 'features')
        self.learning_params = get_sub_params(self.params, 'learning')

        # Bad feature or learning keys fail here, before any relation runs.
        create_feature_generator(self.feature_params, None, '', self.relation_metadata, self.outputter)
        create_online_model(self.learning_params, self.outputter)

        self.feature_vectors = FeatureVectorCache()

    def _map(self, executor: Optional[ThreadPoolExecutor], func: Callable[[T], R],
             items: Sequence[T]) -> List[R]:
        if executor is None:
            return [func(item) for item in items]
        return list(executor.map(func, items))

    def _get_row(self, generator: FeatureGenerator, instance: NodePairInstance) -> Optional[MatrixRow]:
        found, row = self.feature_vectors.lookup(instance)
        if found:
            return row
        row = generator.construct_matrix_row(instance)
        if self.cache_feature_vectors:
            self.feature_vectors.put(instance, row)
        return row

    def _train(self, model: OnlineModel, generator: FeatureGenerator,
               instances: List[NodePairInstance],
               executor: Optional[ThreadPoolExecutor]) -> None:
        def train_instance(instance: NodePairInstance) -> bool:
            row = self._get_row(generator, instance)
            if row is None:
                return False
            model.update_weights(row)
            return True

        for iteration in range(1, model.iterations + 1):
            self.outputter.info(f"Iteration {iteration}")
            model.next_iteration()
            order = self.random.permutation(len(instances))
            shuffled = [instances[i] for i in order]
            updated = self._map(executor, train_instance, shuffled)
            skipped = len(updated) - sum(updated)
            if skipped:
                self.outputter.info(f"  {skipped} training instances had no features")

    def _test(self, model: OnlineModel, generator: FeatureGenerator,
              instances: List[NodePairInstance],
              executor: Optional[ThreadPoolExecutor]) -> List[Tuple[NodePairInstance, float]]:
        def score_instance(instance: NodePairInstance) -> Tuple[NodePairInstance, float, bool]:
            row = generator.construct_matrix_row(instance)
            if self.cache_feature_vectors:
                self.feature_vectors.put(instance, row)
            if row is None:
                return instance, 0.0, False
            return instance, model.classify_instance(row), True

        results = self._map(executor, score_instance, instances)
        missing = sum(1 for _, _, has_row in results if not has_row)
        if missing:
            self.outputter.info(
                f"{missing} of {len(results)} testing instances had no features; scored 0.0"
            )
        return [(instance, score) for instance, score, _ in results]

    def run_relation(self, relation: str) -> None:
        self.feature_vectors.clear()
        model = create_online_model(self.learning_params, self.outputter)
        generator = create_feature_generator(
            self.feature_params, self.graph, relation, self.relation_metadata, self.outputter
        )
        training_data = self.get_training_data(relation)

        executor = ThreadPoolExecutor(max_workers=self.num_threads) if self.num_threads > 1 else None
        try:
            self.outputter.info("Starting learning")
            start = time.time()
            self._train(model, generator, training_data.instances, executor)
            self.outputter.info(f"Learning took {time.time() - start:.1f} seconds")

            feature_names = generator.get_feature_names()
            self.outputter.output_weights(model.get_weights(), feature_names)
            # Row order follows the cache, not the dataset.
            training_matrix = FeatureMatrix(self.feature_vectors.rows())
            self.outputter.output_feature_matrix(True, training_matrix, feature_names)

            self.feature_vectors.clear()

            # Now we test the model.
            testing_data = self.get_testing_data(relation)
            scores = self._test(model, generator, testing_data.instances, executor)
            self.outputter.output_scores(scores, training_data)

            testing_matrix = FeatureMatrix(self.feature_vectors.rows())
            self.outputter.output_feature_matrix(False, testing_matrix, generator.get_feature_names())
        finally:
            if executor is not None:
                executor.shutdown(wait=True)
