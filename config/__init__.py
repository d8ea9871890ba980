"""
Configuration module for PRA experiments.

An experiment config is a YAML mapping with ``paths``, ``relations``,
``relation_metadata`` and one ``operation`` block. Blocks are validated
by the components that consume them, not here.
"""

import copy
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).parent / "default.yaml"


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load an experiment configuration from YAML.

    Args:
        config_path: Path to config file. If None, loads default.yaml

    Returns:
        Configuration dictionary (empty for an empty file)
    """
    path = DEFAULT_CONFIG_PATH if config_path is None else Path(config_path)
    with open(path, 'r') as f:
        return yaml.safe_load(f) or {}


def apply_overrides(config: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge overrides into a copy of config.

    Nested mappings merge key by key; any other override value replaces
    what was there.

    Example:
        >>> apply_overrides({'operation': {'type': 'no op', 'threads': 4}},
        ...                 {'operation': {'threads': 1}})
        {'operation': {'type': 'no op', 'threads': 1}}
    """
    merged = copy.deepcopy(config)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = apply_overrides(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def get_default_config() -> Dict[str, Any]:
    """Get default configuration dictionary."""
    return load_config()


__all__ = ['load_config', 'apply_overrides', 'get_default_config', 'DEFAULT_CONFIG_PATH']
