"""
Batch Operations.

    NoOp: does nothing (validates configuration only)
    TrainAndTest: build matrices, train a batch model, score the test set
    ExploreGraph: report connecting path counts for a dataset
    CreateMatrices: build and write feature matrices only
"""

from typing import Optional

from ..data.dataset import Dataset
from ..errors import MissingDataError
from ..features.generator import create_feature_generator
from ..graphs.explorer import GraphExplorer
from ..models import create_batch_model
from ..utils.params import extract_option_with_default, get_sub_params
from .base import DATA_OPTIONS, Operation


class NoOp(Operation):
    """Operation that does nothing."""

    param_keys = ('type',)

    def run_relation(self, relation: str) -> None:
        pass


class TrainAndTest(Operation):
    """Train a batch model on the training matrix and score the testing matrix."""

    param_keys = ('type', 'features', 'learning')

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.feature_params = get_sub_params(self.params, 'features')
        self.learning_params = get_sub_params(self.params, 'learning')
        # Bad feature or learning keys fail here, before any relation runs.
        create_feature_generator(self.feature_params, None, '', self.relation_metadata, self.outputter)
        create_batch_model(self.learning_params, self.outputter)

    def run_relation(self, relation: str) -> None:
        # First we get features.
        generator = create_feature_generator(
            self.feature_params, self.graph, relation, self.relation_metadata, self.outputter
        )
        training_data = self.get_training_data(relation)
        training_matrix = generator.create_training_matrix(training_data)
        feature_names = generator.get_feature_names()
        self.outputter.output_feature_matrix(True, training_matrix, feature_names)

        # Then we train a model.
        model = create_batch_model(self.learning_params, self.outputter)
        model.train(training_matrix, training_data, feature_names)
        self.outputter.output_weights(model.get_weights(), feature_names)

        # Then we test the model.
        testing_data = self.get_testing_data(relation)
        testing_matrix = generator.create_test_matrix(testing_data)
        self.outputter.output_feature_matrix(False, testing_matrix, generator.get_feature_names())
        scores = model.classify_instances(testing_matrix)
        self.outputter.output_scores(scores, training_data)


class ExploreGraph(Operation):
    """Find and report the paths connecting each instance."""

    param_keys = ('type', 'explore', 'data')

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.data_to_use = extract_option_with_default(self.params, 'data', DATA_OPTIONS, 'both')
        self.explore_params = get_sub_params(self.params, 'explore')

    def resolve_data(self, relation: str) -> Dataset:
        """
        Dataset selected by the ``data`` option.

        With ``both``, training and testing are merged when both exist and
        whichever exists is used otherwise.

        Raises:
            MissingDataError: if the selected data does not exist
        """
        if self.data_to_use == 'both':
            training_data = self.get_training_data(relation, required=False)
            testing_data = self.get_testing_data(relation, required=False)
            if training_data is None and testing_data is None:
                raise MissingDataError(
                    f"Neither training file nor testing file exists for relation {relation}",
                    relation
                )
            if training_data is None:
                return testing_data
            if testing_data is None:
                return training_data
            return training_data.merge(testing_data)
        if self.data_to_use == 'training':
            return self.get_training_data(relation)
        return self.get_testing_data(relation)

    def run_relation(self, relation: str) -> None:
        data = self.resolve_data(relation)
        if self.graph is None:
            raise MissingDataError(f"Exploring relation {relation} requires a graph", relation)
        explorer = GraphExplorer(
            self.explore_params, relation, self.relation_metadata, self.outputter, self.graph
        )
        path_count_map = explorer.find_connecting_paths(data)
        self.outputter.output_path_count_map(path_count_map, data)


class CreateMatrices(Operation):
    """Build feature matrices without training anything."""

    param_keys = ('type', 'features', 'data')

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.data_to_use = extract_option_with_default(self.params, 'data', DATA_OPTIONS, 'both')
        self.feature_params = get_sub_params(self.params, 'features')
        create_feature_generator(self.feature_params, None, '', self.relation_metadata, self.outputter)

    def run_relation(self, relation: str) -> None:
        self.outputter.info(
            f"Creating feature matrices for relation {relation}; using data: {self.data_to_use}"
        )
        generator = create_feature_generator(
            self.feature_params, self.graph, relation, self.relation_metadata, self.outputter
        )

        if self.data_to_use in ('training', 'both'):
            training_data = self.get_training_data(relation)
            training_matrix = generator.create_training_matrix(training_data)
            self.outputter.output_feature_matrix(True, training_matrix, generator.get_feature_names())
        if self.data_to_use in ('testing', 'both'):
            testing_data = self.get_testing_data(relation)
            testing_matrix = generator.create_test_matrix(testing_data)
            self.outputter.output_feature_matrix(False, testing_matrix, generator.get_feature_names())
