"""Public facade for record ↔ map conversion.

This module provides the stable conversion API. Field resolution (naming,
omission, inlining, catch-all) is delegated to `mapsmith.mapping.get_mappings`;
the functions here only walk the resulting key table.

Public Functions:
    to_map: Record → dict using the default metadata scheme
    from_map: dict → record using the default metadata scheme
    tagged_to_map: Record → dict under explicit name/filter schemes
    tagged_from_map: dict → record under explicit name/filter schemes

Error Mode:
    Applies to the map → record direction. ``strict=None`` defers to
    ``Settings.STRICT``. In the default best-effort mode kind mismatches,
    unsettable fields and unmatched keys are ignored; strict mode raises
    `KindMismatch`, `FieldNotSettable` and `UnmappedKey`.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, FrozenSet, Optional, TypeVar

from .config import get_settings
from .errors import RecordCycleError, UnmappedKey
from .fields import FieldAdapter, Kind, is_record, new_instance
from .mapping.builder import get_mappings

logger = logging.getLogger(__name__)

__all__ = ["to_map", "from_map", "tagged_to_map", "tagged_from_map"]

R = TypeVar("R")


def _resolve_strict(strict: Optional[bool]) -> bool:
    return get_settings().STRICT if strict is None else strict


def tagged_to_map(record: Any, name_tag: str, filter_tag: str = "") -> Dict[str, Any]:
    """Convert a record to a flat dict under an explicit naming scheme.

    Nested records held by mapped fields are converted recursively under the
    same schemes. Catch-all entries are merged last and therefore overwrite
    named keys they collide with. Reading never installs lazy containers, so
    ``record`` is left untouched. Nothing is written, so there is no error
    mode to choose.

    Args:
        record: Dataclass or pydantic model instance.
        name_tag: Scheme supplying names and flags.
        filter_tag: Scheme a field must carry to be included; empty means
            ``name_tag``.

    Returns:
        New dict keyed by resolved field names.

    Raises:
        RecordCycleError: a nested record refers back to one being converted.
    """
    return _to_map(record, name_tag, filter_tag, frozenset())


def _to_map(record: Any, name_tag: str, filter_tag: str, active: FrozenSet[int]) -> Dict[str, Any]:
    if id(record) in active:
        raise RecordCycleError(f"{type(record).__name__} instance refers back to itself")
    active = active | {id(record)}
    info = get_mappings(record, name_tag, filter_tag, strict=False)
    result: Dict[str, Any] = {}
    for key, fld in info.fields.items():
        value = fld.value
        if is_record(value):
            value = _to_map(value, name_tag, filter_tag, active)
        result[key] = value
    if info.extra is not None:
        for key in info.extra.keys():
            result[key] = info.extra.index(key)
    return result


def to_map(record: Any) -> Dict[str, Any]:
    """Convert a record to a flat dict using the default scheme (``map``)."""
    tag = get_settings().DEFAULT_TAG
    return tagged_to_map(record, tag, tag)


def tagged_from_map(
    data: Mapping[str, Any],
    dest: R,
    name_tag: str,
    filter_tag: str = "",
    *,
    strict: Optional[bool] = None,
) -> R:
    """Populate ``dest`` from a flat dict under an explicit naming scheme.

    Each source key is looked up among the mapped fields. A mapping value
    destined for a record-typed field is converted recursively: pointer
    (``Optional``) fields and unallocated record fields receive a fresh
    instance, populated record fields are updated in place. Other values
    are assigned as-is, without coercion. Keys with no field go to the
    catch-all when one exists and are dropped otherwise.

    ``omitempty`` is ignored in this direction so that zero-valued fields
    remain writable.

    Args:
        data: Source mapping.
        dest: Record instance to populate (mutated in place).
        name_tag: Scheme supplying names and flags.
        filter_tag: Scheme a field must carry to be writable; empty means
            ``name_tag``.
        strict: Error mode; None uses settings.

    Returns:
        ``dest``, for chaining.

    Raises:
        UnmappedKey: strict mode, a key matched nothing and there is no catch-all.
        FieldNotSettable, KindMismatch: strict mode, a write was refused.
    """
    strict = _resolve_strict(strict)
    info = get_mappings(dest, name_tag, filter_tag, strict=strict, omit_empty=False)
    for key, src_value in data.items():
        fld = info.fields.get(key)
        if fld is None:
            if info.extra is not None:
                info.extra.set_index(key, src_value)
            elif strict:
                raise UnmappedKey(f"key {key!r} matches no field of {type(dest).__name__}")
            else:
                logger.debug("Dropping key %r: no field of %s maps it", key, type(dest).__name__)
            continue

        value = src_value
        if fld.kind in (Kind.RECORD, Kind.POINTER) and isinstance(src_value, Mapping):
            value = _nested_target(fld)
            tagged_from_map(src_value, value, name_tag, filter_tag, strict=strict)
        fld.set(value)
    return dest


def _nested_target(fld: FieldAdapter) -> Any:
    current = fld.value
    if fld.kind is Kind.RECORD and current is not None:
        return current
    return new_instance(fld.record_type)


def from_map(data: Mapping[str, Any], dest: R, *, strict: Optional[bool] = None) -> R:
    """Populate ``dest`` from a flat dict using the default scheme (``map``)."""
    tag = get_settings().DEFAULT_TAG
    return tagged_from_map(data, dest, tag, tag, strict=strict)
