"""
Tests for Configuration.

Tests YAML loading, overrides and that the shipped default config is valid.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config import apply_overrides, get_default_config, load_config
from pra.experiments import Outputter, RelationMetadata
from pra.operations import SgdTrainAndTest, create_operation
from scripts.run_relations import parse_args


class TestLoadConfig:
    """Tests for load_config."""

    def test_default_operation_is_valid(self):
        """Test that the shipped operation block passes validation."""
        config = get_default_config()
        operation = create_operation(
            config['operation'], None, None,
            RelationMetadata.from_params(config['relation_metadata']),
            Outputter.just_logger(verbose=False)
        )
        assert isinstance(operation, SgdTrainAndTest)

    def test_empty_file(self, tmp_path):
        """Test that an empty file loads as an empty config."""
        path = tmp_path / 'empty.yaml'
        path.write_text('')
        assert load_config(str(path)) == {}

    def test_spaced_keys(self, tmp_path):
        """Test that multi-word keys survive YAML loading."""
        path = tmp_path / 'experiment.yaml'
        path.write_text("operation:\n  type: explore graph\n  data: training\n")
        assert load_config(str(path)) == {
            'operation': {'type': 'explore graph', 'data': 'training'}
        }


class TestApplyOverrides:
    """Tests for apply_overrides."""

    def test_nested_merge(self):
        """Test that nested blocks merge key by key."""
        config = {'operation': {'type': 'sgd train and test', 'threads': 4}, 'relations': ['a']}
        merged = apply_overrides(config, {'operation': {'threads': 1}})

        assert merged == {'operation': {'type': 'sgd train and test', 'threads': 1},
                          'relations': ['a']}
        assert config['operation']['threads'] == 4

    def test_replaces_non_mappings(self):
        """Test that lists and scalars are replaced outright."""
        merged = apply_overrides({'relations': ['a', 'b']}, {'relations': ['c']})
        assert merged == {'relations': ['c']}


class TestCommandLine:
    """Tests for the run_relations argument parser."""

    def test_defaults(self):
        """Test default arguments."""
        args = parse_args([])
        assert args.config == 'config/default.yaml'
        assert args.relations is None
        assert not args.quiet

    def test_overrides(self):
        """Test parsing override flags."""
        args = parse_args(['--relations', 'a', 'b', '--threads', '2', '--operation', 'no op'])
        assert args.relations == ['a', 'b']
        assert args.threads == 2
        assert args.operation == 'no op'
