"""
Shared fixtures: a small employment graph and split.

    alice -works_for-> acme      bob -works_for-> acme      alice -colleague-> bob
    carol -works_for-> globex    dave -works_for-> globex   carol -colleague-> dave
    acme -partner-> globex
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from pra.data import Dataset
from pra.experiments import Outputter
from pra.graphs import NetworkXGraph

TRIPLES = [
    ("alice", "works_for", "acme"),
    ("bob", "works_for", "acme"),
    ("alice", "colleague", "bob"),
    ("carol", "works_for", "globex"),
    ("dave", "works_for", "globex"),
    ("carol", "colleague", "dave"),
    ("acme", "partner", "globex"),
]


def node_pairs(graph, names):
    """Translate (source name, target name) pairs to node ids."""
    return [(graph.get_node_index(s), graph.get_node_index(t)) for s, t in names]


def employment_training(graph):
    return Dataset.from_instances(
        node_pairs(graph, [("alice", "acme"), ("bob", "acme"), ("carol", "globex")]),
        node_pairs(graph, [("alice", "globex"), ("dave", "acme")])
    )


def employment_testing(graph):
    return Dataset.from_instances(
        node_pairs(graph, [("dave", "globex")]),
        node_pairs(graph, [("bob", "globex"), ("carol", "acme")])
    )


@pytest.fixture
def graph():
    """Small employment graph."""
    return NetworkXGraph.from_triples(TRIPLES)


@pytest.fixture
def graph_file(tmp_path):
    """The employment graph as an edge file."""
    path = tmp_path / 'edges.tsv'
    path.write_text(''.join(f"{s}\t{r}\t{t}\n" for s, r, t in TRIPLES))
    return path


@pytest.fixture
def split_dir(tmp_path, graph):
    """Split directory with training and testing data for works_for."""
    directory = tmp_path / 'split'
    employment_training(graph).write_to_file(directory / 'works_for' / 'training.tsv')
    employment_testing(graph).write_to_file(directory / 'works_for' / 'testing.tsv')
    return directory


@pytest.fixture
def quiet_outputter():
    """Outputter that neither prints nor writes."""
    return Outputter.just_logger(verbose=False)
