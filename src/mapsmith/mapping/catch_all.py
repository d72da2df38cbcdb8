"""Catch-all storage for keys that match no named field.

A record may declare one ``inline`` map field. During map→record conversion
every source key without a matching field lands in that map; during
record→map conversion the map's string keys are merged into the output after
the named fields.
"""
from __future__ import annotations

from typing import Any, List, MutableMapping, Protocol

__all__ = ["MapFieldAdapter", "CatchAllAdapter"]


class MapFieldAdapter(Protocol):
    def set_index(self, key: str, value: Any) -> None: ...

    def index(self, key: str) -> Any: ...

    def keys(self) -> List[str]: ...


class CatchAllAdapter:
    """String-keyed view over the container held by an inline map field."""

    def __init__(self, container: MutableMapping[Any, Any]) -> None:
        self.container = container

    def __repr__(self) -> str:
        return f"CatchAllAdapter(keys={self.keys()!r})"

    def set_index(self, key: str, value: Any) -> None:
        self.container[key] = value

    def index(self, key: str) -> Any:
        return self.container[key]

    def keys(self) -> List[str]:
        # non-string keys are invisible to the flat key space
        return [k for k in self.container if isinstance(k, str)]
