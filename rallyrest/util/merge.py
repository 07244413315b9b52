"""Recursive merge of request descriptors."""

from typing import Any, Dict, Optional


def deep_merge(*sources: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Merge dicts left to right into a new dict.

    Nested dicts are merged key by key, any other value from a later source
    replaces the earlier one. None sources are skipped and no input is mutated.
    """
    merged: Dict[str, Any] = {}
    for source in sources:
        if not source:
            continue
        for key, value in source.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = deep_merge(merged[key], value)
            elif isinstance(value, dict):
                merged[key] = deep_merge(value)
            else:
                merged[key] = value
    return merged
