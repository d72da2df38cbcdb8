"""Mapping engine: builder, catch-all adapters and lazy installers."""

from .builder import MappingInfo, get_mappings
from .catch_all import CatchAllAdapter, MapFieldAdapter
from .lazy import FieldInitializer, LazyCatchAll, LazyField, Once

__all__ = [
    "MappingInfo",
    "get_mappings",
    "CatchAllAdapter",
    "MapFieldAdapter",
    "FieldInitializer",
    "LazyCatchAll",
    "LazyField",
    "Once",
]
