"""Deferred installation of nested containers.

When an ``inline`` field is ``None`` the builder works against a freshly
constructed instance that is *not yet attached* to the owning record. Every
accessor derived from that instance is wrapped so that the first write through
any of them installs the instance into the owning field, exactly once, and
only then performs the write.

State machine per initializer: ``pending -> installed``, a single transition
guarded by `Once`. All wrappers fanned out from the same container share one
initializer, so sibling writes (and concurrent first writes from several
threads) never install twice. Reads never trigger installation.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, List, Optional

from ..fields import FieldAdapter, Kind
from .catch_all import CatchAllAdapter, MapFieldAdapter

logger = logging.getLogger(__name__)

__all__ = ["Once", "FieldInitializer", "LazyField", "LazyCatchAll"]


class Once:
    """Run a callable at most once, even under concurrent first use.

    Callers that lose the race block on the lock until the winner's call has
    returned, so nobody observes a half-installed container. If the callable
    raises, the guard stays open and a later call retries.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    def do(self, fn: Callable[[], None]) -> bool:
        """Invoke ``fn`` unless already done. Returns True for the invoking call."""
        if self._done:
            return False
        with self._lock:
            if self._done:
                return False
            fn()
            self._done = True
            return True


class FieldInitializer:
    """Installs ``instance`` into ``target`` on first demand."""

    def __init__(self, instance: Any, target: FieldAdapter) -> None:
        self.instance = instance
        self.target = target
        self._once = Once()

    @property
    def installed(self) -> bool:
        return self._once.done

    def ensure_init(self) -> None:
        if self._once.do(self._install):
            logger.debug("Installed %s into field %r", type(self.instance).__name__, self.target.name)

    def _install(self) -> None:
        self.target.set(self.instance)


class LazyField:
    """Field adapter that installs its owning container before the first write."""

    def __init__(self, adapter: FieldAdapter, initializer: FieldInitializer) -> None:
        self.adapter = adapter
        self.initializer = initializer

    def __repr__(self) -> str:
        return f"LazyField({self.adapter!r}, installed={self.initializer.installed})"

    @property
    def name(self) -> str:
        return self.adapter.name

    @property
    def kind(self) -> Kind:
        return self.adapter.kind

    @property
    def record_type(self) -> Optional[type]:
        return self.adapter.record_type

    @property
    def value(self) -> Any:
        return self.adapter.value

    def set(self, value: Any) -> None:
        self.initializer.ensure_init()
        self.adapter.set(value)


class LazyCatchAll:
    """Catch-all adapter that installs its map before the first key write."""

    def __init__(self, adapter: MapFieldAdapter, initializer: FieldInitializer) -> None:
        self.adapter = adapter
        self.initializer = initializer
        # only a map installed directly by this initializer can be swapped on assignment
        self._owns_container = (
            isinstance(adapter, CatchAllAdapter) and adapter.container is initializer.instance
        )

    def __repr__(self) -> str:
        return f"LazyCatchAll({self.adapter!r}, installed={self.initializer.installed})"

    def set_index(self, key: str, value: Any) -> None:
        self.initializer.ensure_init()
        if self._owns_container:
            self._follow_installed()
        self.adapter.set_index(key, value)

    def _follow_installed(self) -> None:
        # validating setters (pydantic validate_assignment) store a copy of the map
        held = self.initializer.target.value
        if held is not None and held is not self.adapter.container:
            self.adapter.container = held

    def index(self, key: str) -> Any:
        return self.adapter.index(key)

    def keys(self) -> List[str]:
        return self.adapter.keys()
