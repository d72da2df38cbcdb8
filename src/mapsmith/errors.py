"""Exception hierarchy for record/map conversion.

Conversions are best-effort by default: unsettable fields, kind mismatches and
unmatched keys are logged at DEBUG and otherwise ignored. Strict mode (either
per call via ``strict=True`` or globally via ``MAPSMITH_STRICT``) turns those
silent paths into the exceptions below.

``RecordCycleError`` is the exception to that rule: an inline structure that
would recurse forever is rejected in both modes.
"""
from __future__ import annotations

__all__ = [
    "MappingError",
    "FieldNotSettable",
    "KindMismatch",
    "UnmappedKey",
    "RecordCycleError",
]


class MappingError(Exception):
    """Base class for all conversion errors raised by mapsmith."""


class FieldNotSettable(MappingError):
    """A write targeted a private field or a field of a frozen record."""


class KindMismatch(MappingError):
    """A write carried a value whose type does not match the field annotation."""


class UnmappedKey(MappingError, KeyError):
    """A source key matched no field and the record declares no catch-all."""

    def __str__(self) -> str:  # KeyError repr-quotes its message otherwise
        return str(self.args[0]) if self.args else ""


class RecordCycleError(MappingError):
    """Inlining or nested conversion would revisit a record already on the path."""
