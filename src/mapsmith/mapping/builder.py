"""Resolve a record into a flat key → field-adapter table.

`get_mappings` walks a record's fields in declaration order and applies the
metadata grammar (see ``mapsmith.tags``):

1. Fields without metadata under the filter scheme are skipped.
2. A resolved name of ``-`` skips the field.
3. No flags: the field is mapped under its resolved name.
4. ``omitempty`` on a zero-valued field: skipped (only when ``omit_empty``).
5. ``inline``:
   - on a non record/map field: skipped with a warning;
   - on a ``None`` field: a fresh container is built and every adapter derived
     from it is wrapped in a lazy installer sharing one `FieldInitializer`;
   - map kind: becomes the catch-all (later inline maps replace earlier ones);
   - record kind: recursively mapped and merged into the parent table; the
     child's own catch-all propagates upward.
6. Other flags: mapped under the resolved name.

Later keys overwrite earlier ones. The result is built fresh per call and
holds references into one record instance; never cache or share it.

Cycle guard:
    Inlining a fresh instance of a record type already on the current inline
    path, revisiting an instance on the path, or nesting deeper than
    ``max_depth`` raises `RecordCycleError`. An unallocated self-typed field
    that also carries ``omitempty`` ends the recursion instead.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Optional, Tuple

from ..config import get_settings
from ..errors import RecordCycleError
from ..fields import Field, FieldAdapter, Kind, map_key_type, new_instance, record_fields
from ..tags import DEFAULT_TAG, INLINE, OMITEMPTY, SKIP, parse_name_and_flags
from .catch_all import CatchAllAdapter, MapFieldAdapter
from .lazy import FieldInitializer, LazyCatchAll, LazyField

logger = logging.getLogger(__name__)

__all__ = ["MappingInfo", "get_mappings"]

_INLINE_KINDS = (Kind.RECORD, Kind.POINTER, Kind.MAP)


@dataclass
class MappingInfo:
    fields: Dict[str, FieldAdapter] = field(default_factory=dict)
    extra: Optional[MapFieldAdapter] = None


@dataclass(frozen=True)
class _BuildContext:
    name_tag: str
    filter_tag: str
    strict: bool
    omit_empty: bool
    max_depth: int
    depth: int = 0
    lineage_types: Tuple[type, ...] = ()
    lineage_ids: FrozenSet[int] = frozenset()

    def descend(self, record: Any) -> "_BuildContext":
        record_type = type(record)
        if id(record) in self.lineage_ids:
            raise RecordCycleError(f"{record_type.__name__} instance is inlined into itself")
        if self.depth >= self.max_depth:
            raise RecordCycleError(f"inline nesting exceeds max depth {self.max_depth}")
        return replace(
            self,
            depth=self.depth + 1,
            lineage_types=self.lineage_types + (record_type,),
            lineage_ids=self.lineage_ids | {id(record)},
        )


def get_mappings(
    record: Any,
    name_tag: str = DEFAULT_TAG,
    filter_tag: str = "",
    *,
    strict: Optional[bool] = None,
    omit_empty: bool = True,
    max_depth: Optional[int] = None,
) -> MappingInfo:
    """Build the flat key table of ``record``.

    Args:
        record: Dataclass or pydantic model instance.
        name_tag: Metadata scheme supplying names and flags.
        filter_tag: Scheme a field must carry to be considered; empty means
            ``name_tag``.
        strict: Error mode of the produced accessors; None uses settings.
        omit_empty: Honor ``omitempty`` on zero-valued fields. Map→record
            conversion turns this off so that empty fields stay writable.
        max_depth: Inline nesting limit; None uses settings.

    Raises:
        TypeError: ``record`` is not a record instance.
        RecordCycleError: the inline structure is self-referential.
    """
    if strict is None or max_depth is None:
        settings = get_settings()
        strict = settings.STRICT if strict is None else strict
        max_depth = settings.MAX_INLINE_DEPTH if max_depth is None else max_depth
    ctx = _BuildContext(
        name_tag=name_tag,
        filter_tag=filter_tag or name_tag,
        strict=strict,
        omit_empty=omit_empty,
        max_depth=max_depth,
    )
    return _build(record, ctx.descend(record))


def _build(record: Any, ctx: _BuildContext) -> MappingInfo:
    info = MappingInfo()
    for fld in record_fields(record, strict=ctx.strict):
        if not fld.has_tag(ctx.filter_tag):
            continue
        name, flags = parse_name_and_flags(fld, ctx.name_tag)
        if name == SKIP:
            continue
        _parse_field(info, fld, name, flags, ctx)
    return info


def _parse_field(
    info: MappingInfo, fld: Field, name: str, flags: FrozenSet[str], ctx: _BuildContext
) -> None:
    if not flags:
        _add_field(info, name, fld)
        return
    if OMITEMPTY in flags and ctx.omit_empty and fld.is_zero():
        return
    if INLINE in flags:
        _inline_field(info, fld, flags, ctx)
        return
    _add_field(info, name, fld)


def _inline_field(
    info: MappingInfo, fld: Field, flags: FrozenSet[str], ctx: _BuildContext
) -> None:
    kind = fld.kind
    if kind not in _INLINE_KINDS:
        logger.warning("Ignoring inline flag on %s field %s", kind.value, fld.qualname)
        return

    if kind is Kind.MAP and map_key_type(fld.annotation) not in (str, Any):
        logger.warning(
            "Field %s cannot serve as catch-all: keys are not str", fld.qualname
        )
        return

    instance = fld.value
    initializer: Optional[FieldInitializer] = None
    if instance is None:
        if kind is not Kind.MAP and fld.record_type in ctx.lineage_types:
            if OMITEMPTY in flags:
                logger.debug("Not inlining unallocated self-typed field %s", fld.qualname)
                return
            raise RecordCycleError(
                f"{fld.record_type.__name__} inlines itself through field {fld.qualname}"
            )
        instance = fld.map_type() if kind is Kind.MAP else new_instance(fld.record_type)
        initializer = FieldInitializer(instance, fld)

    if kind is Kind.MAP:
        extra: MapFieldAdapter = CatchAllAdapter(instance)
        if initializer is not None:
            extra = LazyCatchAll(extra, initializer)
        _set_extra(info, extra, fld)
        return

    inner = _build(instance, ctx.descend(instance))
    for key, adapter in inner.fields.items():
        _add_field(info, key, adapter if initializer is None else LazyField(adapter, initializer))
    if inner.extra is not None:
        extra = inner.extra if initializer is None else LazyCatchAll(inner.extra, initializer)
        _set_extra(info, extra, fld)


def _add_field(info: MappingInfo, key: str, adapter: FieldAdapter) -> None:
    previous = info.fields.get(key)
    if previous is not None:
        logger.debug("Key %r moves from field %r to field %r", key, previous.name, adapter.name)
    info.fields[key] = adapter


def _set_extra(info: MappingInfo, extra: MapFieldAdapter, fld: Field) -> None:
    if info.extra is not None:
        logger.warning("Catch-all from field %s replaces an earlier catch-all", fld.qualname)
    info.extra = extra
