"""Shared utility functions for ngc."""

from typing import Any


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge dicts. Override values take precedence.

    Merge rules:
    - Dicts are recursively merged
    - Lists are REPLACED (override wins completely), so a project config
      can narrow the global `cmds` list
    - Other values are overwritten

    Args:
        base: Base dictionary.
        override: Dictionary with values to overlay.

    Returns:
        New merged dictionary (original dicts not modified).
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result
