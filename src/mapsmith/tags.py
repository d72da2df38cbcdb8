"""Field metadata grammar.

A field's metadata string under a tag scheme reads ``name[,flag]*``:

- ``name`` empty: the field is exposed under its declared attribute name.
- ``name == "-"``: the field is excluded entirely.
- anything else: the external key.

Recognized flags are ``omitempty`` and ``inline``. Flags form a set, so order
and duplicates do not matter; unknown flags are carried but never acted on.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, FrozenSet, Tuple

if TYPE_CHECKING:
    from .fields import Field

__all__ = [
    "DEFAULT_TAG",
    "SKIP",
    "OMITEMPTY",
    "INLINE",
    "parse_name_and_flags",
]

DEFAULT_TAG = "map"
SKIP = "-"
OMITEMPTY = "omitempty"
INLINE = "inline"


def parse_name_and_flags(field: "Field", tag_scheme: str = DEFAULT_TAG) -> Tuple[str, FrozenSet[str]]:
    """Resolve the external name and flag set of ``field`` under ``tag_scheme``.

    Args:
        field: Accessor whose metadata is parsed.
        tag_scheme: Metadata key to read (``"map"`` unless a named view is used).

    Returns:
        Tuple of (external name, frozenset of flags). The name falls back to
        the field's own name when the first segment is empty.
    """
    name, _, rest = field.tag(tag_scheme).partition(",")
    flags = frozenset(rest.split(",")) if rest else frozenset()
    return name or field.name, flags
