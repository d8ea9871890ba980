"""
Parameter Access Helpers.

Operations, feature generators and models each receive a block of the
configuration as a plain dictionary. These helpers read values with
defaults and reject keys that a component does not understand, so that a
typo in a config file fails before any data is touched.
"""

from typing import Any, Dict, Iterable, Optional, Sequence

from ..errors import ConfigurationError


def as_params(params: Optional[Any], base: str = "params") -> Dict[str, Any]:
    """
    Normalize a configuration block to a dictionary.

    A missing block becomes an empty dict. A bare string is treated as the
    block's ``type``, so ``learning: "svm"`` and ``learning: {type: "svm"}``
    are equivalent.
    """
    if params is None:
        return {}
    if isinstance(params, str):
        return {"type": params}
    if not isinstance(params, dict):
        raise ConfigurationError(
            f"Expected a mapping for '{base}', got {type(params).__name__}"
        )
    return params


def ensure_no_extras(params: Dict[str, Any], base: str, allowed_keys: Iterable[str]) -> None:
    """
    Fail if params contain keys outside the whitelist.

    Args:
        params: Configuration block
        base: Name of the block, used in the error message
        allowed_keys: Recognized keys

    Raises:
        ConfigurationError: naming every unrecognized key
    """
    allowed = set(allowed_keys)
    extras = sorted(key for key in params if key not in allowed)
    if extras:
        raise ConfigurationError(
            f"Unrecognized key(s) in '{base}': {', '.join(repr(k) for k in extras)}; "
            f"allowed keys are {sorted(allowed)}"
        )


def extract_with_default(params: Dict[str, Any], key: str, default: Any) -> Any:
    """Return params[key] if present, otherwise default."""
    value = params.get(key)
    return default if value is None else value


def extract_option_with_default(
    params: Dict[str, Any],
    key: str,
    options: Sequence[str],
    default: str
) -> str:
    """
    Read an enumerated option.

    Raises:
        ConfigurationError: if the value is not one of options
    """
    value = extract_with_default(params, key, default)
    if value not in options:
        raise ConfigurationError(
            f"Unrecognized value {value!r} for '{key}'; expected one of {list(options)}"
        )
    return value


def get_sub_params(params: Dict[str, Any], key: str) -> Dict[str, Any]:
    """Get a nested configuration block (empty dict when absent)."""
    return as_params(params.get(key), base=key)
