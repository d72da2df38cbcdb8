"""Flat-dict helpers used alongside the converters.

None of these know anything about records; they operate on the top level of
plain dicts and always return a new dict, leaving their inputs untouched.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping

__all__ = ["map_keys", "join", "filter_map"]


def map_keys(m: Mapping[str, Any], key_map: Mapping[str, str]) -> Dict[str, Any]:
    """Rename keys of ``m`` per ``key_map``; keys not listed are kept as-is.

    When a renamed key collides with another key, whichever comes later in
    ``m``'s iteration order wins.
    """
    return {key_map.get(k, k): v for k, v in m.items()}


def join(a: Mapping[str, Any], b: Mapping[str, Any]) -> Dict[str, Any]:
    """Shallow merge; values from ``b`` win on collision."""
    return {**a, **b}


def filter_map(m: Mapping[str, Any], allowed_keys: Iterable[str]) -> Dict[str, Any]:
    """Keep only the entries of ``m`` whose key appears in ``allowed_keys``."""
    return {k: m[k] for k in allowed_keys if k in m}
