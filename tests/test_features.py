"""
Tests for Features Module.

Tests feature extractors, matchers, related-node search, matrix rows and
the feature vector cache.
"""

import pytest
import threading
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from pra.data import Dataset, NodePairInstance
from pra.errors import ConfigurationError
from pra.experiments import Outputter, RelationMetadata
from pra.features import (
    AnyRelFeatureExtractor,
    ConnectedAtOneFeatureExtractor,
    EmptyFeatureMatcher,
    FeatureExtractor,
    FeatureMatrix,
    FeatureVectorCache,
    MatrixRow,
    NodePairSubgraphFeatureGenerator,
    PathBigramsFeatureExtractor,
    PathFeatureMatcher,
    PraFeatureExtractor,
    SubgraphFinder,
    create_extractors,
    create_feature_generator,
)


def pair(graph, source, target, is_positive=True):
    return NodePairInstance(graph.get_node_index(source), graph.get_node_index(target), is_positive)


class FixedMatcherExtractor(FeatureExtractor):
    """Extractor that hands out a preset matcher for every feature."""

    def __init__(self, matcher):
        self.matcher = matcher

    def extract_features(self, instance, subgraph):
        return []

    def get_feature_matcher(self, feature, graph):
        return self.matcher


class StubbedGenerator(NodePairSubgraphFeatureGenerator):
    """Generator with injected extractors and canned matcher walks."""

    def __init__(self, extractors, matches):
        self._stub_extractors = extractors
        self.matches = matches
        self.walked = []
        super().__init__({}, 'rel', RelationMetadata.empty(), Outputter.just_logger(verbose=False))

    def create_extractors(self, names):
        return self._stub_extractors

    def find_matching_nodes(self, node, matcher, graph):
        self.walked.append(matcher)
        return self.matches[id(matcher)]


@pytest.fixture
def generator(graph, quiet_outputter):
    """Subgraph feature generator over the employment graph."""
    params = {
        'path finder': {'max path length': 3},
        'feature extractors': ['PraFeatureExtractor', 'AnyRelFeatureExtractor'],
    }
    return NodePairSubgraphFeatureGenerator(
        params, 'works_for', RelationMetadata.empty(), quiet_outputter, graph=graph
    )


class TestGetRelatedNodes:
    """Tests for the union over extractor matchers."""

    def test_union_of_matchers(self):
        """Test that every extractor's matcher contributes its nodes."""
        first = PathFeatureMatcher([0])
        second = PathFeatureMatcher([1])
        extractors = [
            FixedMatcherExtractor(first),
            FixedMatcherExtractor(second),
            FixedMatcherExtractor(None),
        ]
        generator = StubbedGenerator(extractors, {
            id(first): {"node 1", "node 2"},
            id(second): {"node 2", "node 3"},
        })

        related = generator.get_related_nodes("node", ["feature"], graph=None)

        assert related == {"node 1", "node 2", "node 3"}
        assert len(generator.walked) == 2

    def test_same_matcher_walked_once(self):
        """Test that one matcher object returned twice is walked once."""
        shared = PathFeatureMatcher([0])
        generator = StubbedGenerator([FixedMatcherExtractor(shared)], {id(shared): {"node 1"}})

        related = generator.get_related_nodes("node", ["feature a", "feature b"], graph=None)

        assert related == {"node 1"}
        assert generator.walked == [shared]

    def test_no_matchers(self):
        """Test that extractors with no matchers relate nothing."""
        generator = StubbedGenerator([FixedMatcherExtractor(None)], {})
        assert generator.get_related_nodes("node", ["feature"], graph=None) == set()
        assert generator.walked == []

    def test_path_features_on_graph(self, generator, graph):
        """Test walking real path features from a node."""
        related = generator.get_related_nodes("alice", ["-works_for-partner-"], graph)
        assert related == {"globex"}

    def test_union_over_features(self, generator, graph):
        """Test that several features union their endpoints."""
        related = generator.get_related_nodes(
            "alice", ["-colleague-", "-works_for-partner-"], graph
        )
        assert related == {"bob", "globex"}

    def test_unknown_start_node(self, generator, graph):
        """Test that a node the graph lacks relates to nothing."""
        assert generator.get_related_nodes("zed", ["-colleague-"], graph) == set()


class TestFeatureMatchers:
    """Tests for matcher-guided walks."""

    def test_path_walk(self, generator, graph):
        """Test following a two-step path."""
        matcher = PraFeatureExtractor().get_feature_matcher("-works_for-_works_for-", graph)
        assert generator.find_matching_nodes("alice", matcher, graph) == {"alice", "bob"}

    def test_wildcard_walk(self, generator, graph):
        """Test that a wildcard step accepts any edge type."""
        matcher = AnyRelFeatureExtractor().get_feature_matcher(
            "ANYREL:-@ANY_REL@-works_for-", graph
        )
        assert generator.find_matching_nodes("alice", matcher, graph) == {"acme"}

    def test_dead_end(self, generator, graph):
        """Test that a walk with no next node matches nothing."""
        matcher = PraFeatureExtractor().get_feature_matcher("-partner-partner-", graph)
        assert generator.find_matching_nodes("acme", matcher, graph) == set()

    def test_step_bound(self, graph, quiet_outputter):
        """Test that walks longer than max matcher steps match nothing."""
        bounded = NodePairSubgraphFeatureGenerator(
            {'max matcher steps': 1}, 'works_for', RelationMetadata.empty(),
            quiet_outputter, graph=graph
        )
        matcher = PathFeatureMatcher([graph.get_edge_index("colleague"),
                                      graph.get_edge_index("works_for")])
        assert bounded.find_matching_nodes("alice", matcher, graph) == set()

    def test_empty_matcher(self, generator, graph):
        """Test that the empty matcher accepts nothing."""
        matcher = EmptyFeatureMatcher()
        assert not matcher.edge_ok(0, 0)
        assert not matcher.node_ok(0, 0)
        assert not matcher.is_finished(0)
        assert generator.find_matching_nodes("alice", matcher, graph) == set()

    def test_path_matcher_steps(self):
        """Test per-step edge checks."""
        matcher = PathFeatureMatcher([3, None])
        assert matcher.edge_ok(3, 0)
        assert not matcher.edge_ok(4, 0)
        assert matcher.edge_ok(4, 1)
        assert not matcher.edge_ok(3, 2)
        assert not matcher.is_finished(1)
        assert matcher.is_finished(2)


class TestFeatureExtractors:
    """Tests for extractor families."""

    @pytest.fixture
    def subgraph(self, graph):
        finder = SubgraphFinder(graph, relation="works_for", max_path_length=2)
        return finder.find(pair(graph, "bob", "acme"))

    def test_pra_features(self, subgraph):
        """Test one feature per connecting path."""
        features = PraFeatureExtractor().extract_features(subgraph.instance, subgraph)
        assert features == ["-_colleague-works_for-"]

    def test_any_rel_features(self, subgraph):
        """Test one wildcard per edge position."""
        features = AnyRelFeatureExtractor().extract_features(subgraph.instance, subgraph)
        assert features == [
            "ANYREL:-@ANY_REL@-works_for-",
            "ANYREL:-_colleague-@ANY_REL@-",
        ]

    def test_bigram_features(self, subgraph):
        """Test start and end padded edge bigrams."""
        features = PathBigramsFeatureExtractor().extract_features(subgraph.instance, subgraph)
        assert set(features) == {
            "BIGRAM:@START@-_colleague",
            "BIGRAM:_colleague-works_for",
            "BIGRAM:works_for-@END@",
        }

    def test_connected_at_one(self, graph):
        """Test the single-edge feature."""
        subgraph = SubgraphFinder(graph, max_path_length=1).find(pair(graph, "bob", "acme"))
        extractor = ConnectedAtOneFeatureExtractor()
        assert extractor.extract_features(subgraph.instance, subgraph) == ["CONNECTED"]
        assert extractor.get_feature_matcher("CONNECTED", None) is None

    def test_pra_matcher_ownership(self, graph):
        """Test which strings the path extractor can reconstruct."""
        extractor = PraFeatureExtractor()
        assert isinstance(extractor.get_feature_matcher("-colleague-", graph), PathFeatureMatcher)
        assert isinstance(extractor.get_feature_matcher("-founded-", graph), EmptyFeatureMatcher)
        assert extractor.get_feature_matcher("bias", graph) is None
        assert extractor.get_feature_matcher("ANYREL:-@ANY_REL@-colleague-", graph) is None

    def test_any_rel_matcher_ownership(self, graph):
        """Test that the wildcard extractor only owns prefixed features."""
        extractor = AnyRelFeatureExtractor()
        assert extractor.get_feature_matcher("-colleague-", graph) is None
        matcher = extractor.get_feature_matcher("ANYREL:-@ANY_REL@-colleague-", graph)
        assert matcher.edge_pattern == (None, graph.get_edge_index("colleague"))

    def test_create_extractors(self):
        """Test building extractors by name."""
        extractors = create_extractors(['PraFeatureExtractor', 'PathBigramsFeatureExtractor'])
        assert [type(e) for e in extractors] == [PraFeatureExtractor, PathBigramsFeatureExtractor]
        assert [type(e) for e in create_extractors(None)] == [PraFeatureExtractor]

    def test_unknown_extractor(self):
        """Test that unknown extractor names are configuration errors."""
        with pytest.raises(ConfigurationError) as info:
            create_extractors(['MysteryFeatureExtractor'])
        assert 'MysteryFeatureExtractor' in str(info.value)


class TestFeatureGenerator:
    """Tests for building matrix rows."""

    def test_training_matrix(self, generator, graph):
        """Test that rows exist only for instances with features."""
        data = Dataset.from_instances(
            [(graph.get_node_index("bob"), graph.get_node_index("acme"))],
            [(graph.get_node_index("bob"), 99)]
        )
        matrix = generator.create_training_matrix(data)

        assert len(matrix) == 1
        names = generator.get_feature_names()
        row_features = {names[i] for i in matrix.rows[0].feature_indices}
        assert "-_colleague-works_for-" in row_features
        assert all(value == 1.0 for value in matrix.rows[0].values)

    def test_test_matrix_does_not_grow(self, generator, graph):
        """Test that unseen features are dropped at test time."""
        generator.create_training_matrix(Dataset.from_instances([
            (graph.get_node_index("bob"), graph.get_node_index("acme"))
        ]))
        num_features = len(generator.get_feature_names())

        generator.create_test_matrix(Dataset.from_instances([
            (graph.get_node_index("dave"), graph.get_node_index("acme"))
        ]))

        assert len(generator.get_feature_names()) == num_features

    def test_bias_feature(self, graph, quiet_outputter):
        """Test that the bias feature joins every non-empty row."""
        with_bias = NodePairSubgraphFeatureGenerator(
            {'include bias': True}, 'works_for', RelationMetadata.empty(),
            quiet_outputter, graph=graph
        )
        row = with_bias.construct_matrix_row(pair(graph, "bob", "acme"))
        names = with_bias.get_feature_names()
        assert "bias" in {names[i] for i in row.feature_indices}
        # Node 99 is not in the graph, so nothing connects to it.
        assert with_bias.construct_matrix_row(NodePairInstance(graph.get_node_index("bob"), 99)) is None

    def test_extraction_failure_becomes_none(self, graph):
        """Test that an extractor error is reported and yields no row."""
        messages = []

        class RecordingOutputter(Outputter):
            def info(self, message):
                messages.append(message)

        class BrokenExtractor(FeatureExtractor):
            def extract_features(self, instance, subgraph):
                raise RuntimeError("boom")

        class BrokenGenerator(NodePairSubgraphFeatureGenerator):
            def create_extractors(self, names):
                return [BrokenExtractor()]

        broken = BrokenGenerator({}, 'works_for', RelationMetadata.empty(),
                                 RecordingOutputter(verbose=False), graph=graph)

        assert broken.construct_matrix_row(pair(graph, "bob", "acme")) is None
        assert any("boom" in message for message in messages)

    def test_requires_graph(self, quiet_outputter):
        """Test that building rows without a graph is a configuration error."""
        no_graph = NodePairSubgraphFeatureGenerator(
            {}, 'works_for', RelationMetadata.empty(), quiet_outputter
        )
        with pytest.raises(ConfigurationError):
            no_graph.construct_matrix_row(NodePairInstance(0, 1))

    def test_unknown_keys(self, quiet_outputter):
        """Test that feature and path finder keys are whitelisted."""
        with pytest.raises(ConfigurationError):
            create_feature_generator({'max path length': 3}, None, 'works_for',
                                     RelationMetadata.empty(), quiet_outputter)
        with pytest.raises(ConfigurationError):
            create_feature_generator({'path finder': {'depth': 3}}, None, 'works_for',
                                     RelationMetadata.empty(), quiet_outputter)
        with pytest.raises(ConfigurationError):
            create_feature_generator({'type': 'pca'}, None, 'works_for',
                                     RelationMetadata.empty(), quiet_outputter)

    def test_concurrent_feature_indices(self, generator):
        """Test that racing threads agree on one index per feature."""
        results = []

        def assign():
            results.append([generator.get_feature_index(f"f{i}") for i in range(200)])

        threads = [threading.Thread(target=assign) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert all(result == results[0] for result in results)
        assert sorted(results[0]) == list(range(200))


class TestFeatureMatrix:
    """Tests for MatrixRow and FeatureMatrix."""

    def test_row_lengths_must_match(self):
        """Test index / value alignment."""
        with pytest.raises(ValueError):
            MatrixRow(NodePairInstance(0, 1), (0, 1), (1.0,))

    def test_to_csr(self):
        """Test sparse conversion and labels."""
        matrix = FeatureMatrix([
            MatrixRow(NodePairInstance(0, 1, True), (0, 2), (1.0, 1.0)),
            MatrixRow(NodePairInstance(0, 2, False), (1,), (1.0,)),
        ])
        X = matrix.to_csr(num_columns=5)

        assert X.shape == (2, 5)
        assert X[0, 2] == 1.0
        assert X[1, 0] == 0.0
        assert matrix.labels().tolist() == [1, 0]
        assert matrix.num_columns() == 3


class TestFeatureVectorCache:
    """Tests for FeatureVectorCache."""

    def test_none_is_a_cached_value(self):
        """Test that a stored None differs from a missing key."""
        cache = FeatureVectorCache(num_stripes=4)
        instance = NodePairInstance(0, 1)

        assert cache.lookup(instance) == (False, None)
        cache.put(instance, None)
        assert cache.lookup(instance) == (True, None)
        assert instance in cache
        assert cache.rows() == []

    def test_statistics(self):
        """Test hit / miss counts."""
        cache = FeatureVectorCache()
        row = MatrixRow(NodePairInstance(0, 1), (0,), (1.0,))
        cache.lookup(row.instance)
        cache.put(row.instance, row)
        cache.lookup(row.instance)

        stats = cache.get_statistics()
        assert stats['hits'] == 1
        assert stats['misses'] == 1
        assert stats['size'] == 1
        assert cache.rows() == [row]

    def test_concurrent_puts(self):
        """Test that concurrent writers lose nothing."""
        cache = FeatureVectorCache(num_stripes=8)

        def fill(offset):
            for i in range(500):
                cache.put(NodePairInstance(offset, i), None)

        threads = [threading.Thread(target=fill, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(cache) == 2000
        cache.clear()
        assert len(cache) == 0
