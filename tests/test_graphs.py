"""
Tests for Graphs Module.

Tests the NetworkX graph, subgraph discovery and path exploration.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from pra.data import Dataset, NodePairInstance
from pra.experiments import RelationMetadata
from pra.features.subgraph import SubgraphFinder, path_to_string, reverse_path, string_to_path
from pra.graphs import NetworkXGraph, inverse_edge_name
from pra.graphs.explorer import GraphExplorer
from pra.errors import ConfigurationError


def pair(graph, source, target, is_positive=True):
    return NodePairInstance(graph.get_node_index(source), graph.get_node_index(target), is_positive)


class TestNetworkXGraph:
    """Tests for NetworkXGraph."""

    def test_inverse_edges(self, graph):
        """Test that every triple is walkable in both directions."""
        acme = graph.get_node_index("acme")
        neighbors = {
            (graph.get_edge_name(edge), graph.get_node_name(node))
            for edge, node in graph.neighbors(acme)
        }
        assert neighbors == {
            ("_works_for", "alice"),
            ("_works_for", "bob"),
            ("partner", "globex"),
        }

    def test_inverse_edge_name(self):
        """Test inverse naming in both directions."""
        assert inverse_edge_name("works_for") == "_works_for"
        assert inverse_edge_name("_works_for") == "works_for"

    def test_statistics(self, graph):
        """Test node, edge and relation counts."""
        stats = graph.get_statistics()
        assert stats['num_nodes'] == 6
        assert stats['num_edges'] == 7
        assert stats['num_edge_types'] == 3

    def test_unknown_names(self, graph):
        """Test lookups of names the graph lacks."""
        assert not graph.has_node("zed")
        assert not graph.has_edge_type("founded")
        assert graph.find_edge_index("founded") is None
        with pytest.raises(KeyError):
            graph.get_node_index("zed")

    def test_from_tsv_file(self, graph_file):
        """Test loading an edge file."""
        loaded = NetworkXGraph.from_tsv_file(graph_file)
        assert loaded.num_nodes == 6
        assert loaded.has_edge_type("_partner")

    def test_malformed_tsv(self, tmp_path):
        """Test that edge lines need three fields."""
        path = tmp_path / 'edges.tsv'
        path.write_text("alice\tworks_for\n")
        with pytest.raises(ValueError):
            NetworkXGraph.from_tsv_file(path)


class TestPathStrings:
    """Tests for path feature strings."""

    def test_round_trip(self):
        """Test rendering and parsing a path."""
        path = ("colleague", "_works_for")
        assert path_to_string(path) == "-colleague-_works_for-"
        assert string_to_path("-colleague-_works_for-") == path

    def test_not_a_path(self):
        """Test that non-path features are rejected."""
        for feature in ["bias", "CONNECTED", "--", "-a--b-"]:
            with pytest.raises(ValueError):
                string_to_path(feature)

    def test_reverse_path(self):
        """Test walking a path from the other end."""
        assert reverse_path(("works_for", "partner")) == ("_partner", "_works_for")


class TestSubgraphFinder:
    """Tests for SubgraphFinder."""

    def test_connecting_paths(self, graph):
        """Test paths meeting in the middle read from source to target."""
        finder = SubgraphFinder(graph, max_path_length=2)
        subgraph = finder.find(pair(graph, "alice", "globex"))

        assert ("works_for", "partner") in subgraph.connecting_paths()

    def test_own_edge_is_hidden(self, graph):
        """Test that the predicted relation between the pair is skipped."""
        instance = pair(graph, "alice", "acme")

        unrestricted = SubgraphFinder(graph, max_path_length=1).find(instance)
        restricted = SubgraphFinder(graph, relation="works_for", max_path_length=1).find(instance)

        assert unrestricted.connecting_paths() == frozenset({("works_for",)})
        assert restricted.connecting_paths() == frozenset()

    def test_own_edge_hidden_only_between_pair(self, graph):
        """Test that the relation's other edges still explain the pair."""
        finder = SubgraphFinder(graph, relation="works_for", max_path_length=2)
        paths = finder.find(pair(graph, "alice", "acme")).connecting_paths()

        assert ("colleague", "works_for") in paths
        assert ("works_for",) not in paths

    def test_declared_inverse_is_hidden(self):
        """Test that the relation's declared inverse is skipped too."""
        graph = NetworkXGraph.from_triples([
            ("alice", "works_for", "acme"),
            ("acme", "employs", "alice"),
        ])
        instance = pair(graph, "alice", "acme")

        only_relation = SubgraphFinder(graph, relation="works_for", max_path_length=1)
        with_inverse = SubgraphFinder(graph, relation="works_for", max_path_length=1,
                                      inverse_relation="employs")

        assert only_relation.find(instance).connecting_paths() == frozenset({("_employs",)})
        assert with_inverse.find(instance).connecting_paths() == frozenset()

    def test_disconnected_pair(self, graph):
        """Test that distant pairs have no connecting paths."""
        finder = SubgraphFinder(graph, max_path_length=2)
        assert finder.find(pair(graph, "bob", "dave")).connecting_paths() == frozenset()

    def test_path_counts(self, graph):
        """Test that a path is counted once per meeting point."""
        finder = SubgraphFinder(graph, relation="works_for", max_path_length=3)
        counts = finder.find(pair(graph, "alice", "acme")).connecting_path_counts()

        # Meets at bob (source half) and at acme (whole path from source).
        assert counts[("colleague", "works_for")] == 2

    def test_invalid_length(self, graph):
        """Test that path length must be positive."""
        with pytest.raises(ValueError):
            SubgraphFinder(graph, max_path_length=0)


class TestGraphExplorer:
    """Tests for GraphExplorer."""

    def test_find_connecting_paths(self, graph, quiet_outputter):
        """Test per-instance path counts as strings."""
        explorer = GraphExplorer({'max path length': 2}, 'works_for',
                                 RelationMetadata.empty(), quiet_outputter, graph)
        instances = [("bob", "acme"), ("bob", "dave")]
        data = Dataset.from_instances([
            (graph.get_node_index(s), graph.get_node_index(t)) for s, t in instances
        ])

        path_counts = explorer.find_connecting_paths(data)

        assert set(path_counts[pair(graph, "bob", "acme")]) == {"-_colleague-works_for-"}
        assert len(path_counts[pair(graph, "bob", "dave")]) == 0

    def test_unknown_key(self, graph, quiet_outputter):
        """Test that explore parameters are whitelisted."""
        with pytest.raises(ConfigurationError):
            GraphExplorer({'max depth': 2}, 'works_for', RelationMetadata.empty(),
                          quiet_outputter, graph)
