"""Generic field access over dataclass and pydantic records.

A *record* is an instance of a stdlib dataclass or a ``pydantic.BaseModel``.
Per-field metadata is a plain ``{scheme: "name[,flag]*"}`` mapping, stored in
``dataclasses.field(metadata=...)`` for dataclasses and in
``Field(json_schema_extra=...)`` for pydantic models.

Field annotations are resolved once per class and reduced to a coarse
``Kind``:

- ``RECORD``: the annotation is a record class.
- ``POINTER``: ``Optional[RecordClass]``; ``None`` is the unallocated state.
- ``MAP``: ``dict`` / ``Mapping`` / ``MutableMapping``, optional or not.
- ``PRIMITIVE``: everything else, including lists and ``Any``.

Writes go through ``Field.set`` which refuses private fields, frozen records
and values whose type does not match the annotation. Refusals are silent
(DEBUG log) unless the accessor was built in strict mode.
"""
from __future__ import annotations

import dataclasses
import enum
import logging
import numbers
import types
import typing
from collections.abc import Mapping
from functools import lru_cache
from typing import Any, Dict, List, NamedTuple, Optional, Protocol, Tuple, Type, Union, get_args, get_origin

from pydantic import BaseModel, ValidationError

from .errors import FieldNotSettable, KindMismatch
from .tags import DEFAULT_TAG

logger = logging.getLogger(__name__)

__all__ = [
    "Kind",
    "Field",
    "FieldAdapter",
    "record_fields",
    "is_record",
    "is_record_type",
    "is_zero",
    "kind_of",
    "new_instance",
    "zero_value",
    "mapped",
]

_NONE_TYPE = type(None)
_ZERO_FACTORIES = (bool, int, float, complex, str, bytes, bytearray, list, tuple, set, frozenset)


class Kind(str, enum.Enum):
    RECORD = "record"
    POINTER = "pointer"
    MAP = "map"
    PRIMITIVE = "primitive"


class FieldSpec(NamedTuple):
    """Static description of one record field, shared by all instances of a class."""

    name: str
    annotation: Any
    metadata: Mapping[str, str]
    frozen: bool


class FieldAdapter(Protocol):
    """Read/write surface the converters need from a mapped field."""

    @property
    def name(self) -> str: ...

    @property
    def kind(self) -> Kind: ...

    @property
    def record_type(self) -> Optional[type]: ...

    @property
    def value(self) -> Any: ...

    def set(self, value: Any) -> None: ...


# ---------------------------------------------------------------------------
# Annotation helpers
# ---------------------------------------------------------------------------

def is_record_type(tp: Any) -> bool:
    """True when ``tp`` is a dataclass or pydantic model class."""
    if not isinstance(tp, type):
        return False
    return dataclasses.is_dataclass(tp) or issubclass(tp, BaseModel)


def is_record(value: Any) -> bool:
    return is_record_type(type(value))


def _unwrap_annotated(tp: Any) -> Any:
    while get_origin(tp) is typing.Annotated:
        tp = get_args(tp)[0]
    return tp


def _is_union(tp: Any) -> bool:
    origin = get_origin(tp)
    return origin is Union or origin is types.UnionType


def split_optional(annotation: Any) -> Tuple[Any, bool]:
    """Strip ``None`` from a union annotation.

    Returns:
        Tuple of (remaining annotation, whether ``None`` was a member).
    """
    tp = _unwrap_annotated(annotation)
    if not _is_union(tp):
        return tp, False
    members = get_args(tp)
    rest = tuple(a for a in members if a is not _NONE_TYPE)
    optional = len(rest) != len(members)
    if len(rest) == 1:
        return _unwrap_annotated(rest[0]), optional
    return Union[rest], optional


def map_class(annotation: Any) -> Optional[type]:
    """Concrete container class to allocate for a map annotation, else None."""
    tp, _ = split_optional(annotation)
    origin = get_origin(tp) or tp
    if not isinstance(origin, type) or not issubclass(origin, Mapping):
        return None
    if origin.__module__ == "collections.abc" or getattr(origin, "__abstractmethods__", None):
        return dict
    return origin


def map_key_type(annotation: Any) -> Any:
    tp, _ = split_optional(annotation)
    args = get_args(tp)
    return args[0] if args else Any


def kind_of(annotation: Any) -> Kind:
    inner, optional = split_optional(annotation)
    if is_record_type(inner):
        return Kind.POINTER if optional else Kind.RECORD
    if map_class(inner) is not None:
        return Kind.MAP
    return Kind.PRIMITIVE


def accepts(annotation: Any, value: Any) -> bool:
    """Shallow kind check of ``value`` against ``annotation``.

    Only the outermost type is inspected: ``list[int]`` accepts any list.
    Annotations that cannot be checked at runtime (TypeVars, unresolved
    forward references, non-runtime protocols) accept everything.
    """
    tp = _unwrap_annotated(annotation)
    if tp is Any or tp is object:
        return True
    if tp is None or tp is _NONE_TYPE:
        return value is None
    if _is_union(tp):
        return any(accepts(member, value) for member in get_args(tp))
    origin = get_origin(tp)
    if origin is typing.Literal:
        return value in get_args(tp)
    if origin is not None:
        tp = origin
    if not isinstance(tp, type):
        return True
    if isinstance(value, bool) and tp in (int, float):
        return False
    if tp is float and isinstance(value, int):
        return True
    try:
        return isinstance(value, tp)
    except TypeError:
        return True


def zero_value(annotation: Any) -> Any:
    """Zero value for an annotation: ``None`` for optionals and unknown types."""
    inner, optional = split_optional(annotation)
    if optional:
        return None
    if is_record_type(inner):
        return new_instance(inner)
    container = map_class(inner)
    if container is not None:
        return container()
    origin = get_origin(inner) or inner
    if origin in _ZERO_FACTORIES:
        return origin()
    return None


def is_zero(value: Any, annotation: Any = Any) -> bool:
    """Report whether ``value`` is the zero value of its field.

    ``None`` is always zero. A non-``None`` value held by an ``Optional``
    field is never zero, whatever it contains. Records are zero when every
    field is zero; containers, strings and bytes when empty; numbers when 0.
    """
    if value is None:
        return True
    if split_optional(annotation)[1]:
        return False
    if is_record(value):
        return all(field.is_zero() for field in record_fields(value))
    if isinstance(value, bool):
        return not value
    if isinstance(value, numbers.Number):
        return value == 0
    if isinstance(value, (str, bytes, bytearray, Mapping, list, tuple, set, frozenset)):
        return len(value) == 0
    return False


# ---------------------------------------------------------------------------
# Record introspection
# ---------------------------------------------------------------------------

def _resolved_hints(cls: type) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as e:
        logger.debug("Could not resolve annotations of %s: %s", cls.__name__, e)
        return {}


def _string_metadata(raw: Any) -> Dict[str, str]:
    if not isinstance(raw, Mapping):
        return {}
    return {k: v for k, v in raw.items() if isinstance(k, str) and isinstance(v, str)}


@lru_cache(maxsize=256)
def _field_specs(cls: type) -> Tuple[FieldSpec, ...]:
    if dataclasses.is_dataclass(cls):
        hints = _resolved_hints(cls)
        frozen = bool(cls.__dataclass_params__.frozen)
        specs = []
        for f in dataclasses.fields(cls):
            annotation = hints.get(f.name, f.type)
            if isinstance(annotation, str):
                annotation = Any
            specs.append(FieldSpec(f.name, annotation, _string_metadata(f.metadata), frozen))
        return tuple(specs)
    frozen = bool(cls.model_config.get("frozen", False))
    return tuple(
        FieldSpec(name, info.annotation, _string_metadata(info.json_schema_extra), frozen or bool(info.frozen))
        for name, info in cls.model_fields.items()
    )


def record_fields(record: Any, *, strict: bool = False) -> List["Field"]:
    """Accessors for every field of ``record`` in declaration order.

    Raises:
        TypeError: ``record`` is not a dataclass or pydantic model instance.
    """
    cls = type(record)
    if not is_record_type(cls):
        raise TypeError(f"expected a dataclass or pydantic model instance, got {cls.__name__}")
    return [Field(record, spec, strict=strict) for spec in _field_specs(cls)]


def new_instance(record_type: Type[Any]) -> Any:
    """Build a zero-valued instance of a record class.

    Required dataclass fields are filled with the zero value of their
    annotation; pydantic models are built with ``model_construct`` so that no
    validation runs against those zero values.
    """
    if not is_record_type(record_type):
        raise TypeError(f"expected a dataclass or pydantic model class, got {record_type!r}")
    if dataclasses.is_dataclass(record_type):
        hints = _resolved_hints(record_type)
        kwargs = {
            f.name: zero_value(hints.get(f.name, Any))
            for f in dataclasses.fields(record_type)
            if f.init and f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING
        }
        return record_type(**kwargs)
    kwargs = {
        name: zero_value(info.annotation)
        for name, info in record_type.model_fields.items()
        if info.is_required()
    }
    return record_type.model_construct(**kwargs)


def mapped(
    spec: Optional[str] = "",
    *,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
    **schemes: str,
) -> Any:
    """Declare a dataclass field carrying mapping metadata.

    ``mapped("city,omitempty")`` is shorthand for
    ``field(default="", metadata={"map": "city,omitempty"})`` on a ``str``
    field. Extra keyword arguments add metadata under other schemes, e.g.
    ``mapped("id", api="userId")``. Pass ``spec=None`` to leave the default
    scheme untagged. Without ``default`` or ``default_factory`` the field is
    required, exactly as with ``dataclasses.field``.
    """
    metadata: Dict[str, str] = {} if spec is None else {DEFAULT_TAG: spec}
    metadata.update(schemes)
    if default_factory is not dataclasses.MISSING:
        return dataclasses.field(default_factory=default_factory, metadata=metadata)
    return dataclasses.field(default=default, metadata=metadata)


class Field:
    """Accessor for one field of one record instance."""

    def __init__(self, record: Any, spec: FieldSpec, *, strict: bool = False) -> None:
        self._record = record
        self._spec = spec
        self.strict = strict

    def __repr__(self) -> str:
        return f"Field({self.qualname}, kind={self.kind.value})"

    @property
    def name(self) -> str:
        return self._spec.name

    @property
    def qualname(self) -> str:
        return f"{type(self._record).__name__}.{self._spec.name}"

    @property
    def annotation(self) -> Any:
        return self._spec.annotation

    @property
    def kind(self) -> Kind:
        return kind_of(self._spec.annotation)

    @property
    def record_type(self) -> Optional[type]:
        inner, _ = split_optional(self._spec.annotation)
        return inner if is_record_type(inner) else None

    @property
    def map_type(self) -> Optional[type]:
        return map_class(self._spec.annotation)

    @property
    def settable(self) -> bool:
        return not self._spec.name.startswith("_") and not self._spec.frozen

    def has_tag(self, scheme: str) -> bool:
        return scheme in self._spec.metadata

    def tag(self, scheme: str) -> str:
        return self._spec.metadata.get(scheme, "")

    @property
    def value(self) -> Any:
        return getattr(self._record, self._spec.name)

    def is_zero(self) -> bool:
        return is_zero(self.value, self._spec.annotation)

    def set(self, value: Any) -> None:
        """Assign ``value`` to the field.

        Raises:
            FieldNotSettable: strict mode, and the field is private or frozen.
            KindMismatch: strict mode, and ``value`` does not fit the annotation.
        """
        if not self.settable:
            if self.strict:
                raise FieldNotSettable(f"field {self.qualname} is not settable")
            logger.debug("Ignoring write to unsettable field %s", self.qualname)
            return
        if not accepts(self._spec.annotation, value):
            if self.strict:
                raise KindMismatch(
                    f"field {self.qualname} cannot hold a value of type {type(value).__name__}"
                )
            logger.debug(
                "Ignoring %s value for field %s (kind mismatch)", type(value).__name__, self.qualname
            )
            return
        try:
            setattr(self._record, self._spec.name, value)
        except ValidationError as e:
            # models with validate_assignment=True run their own checks
            if self.strict:
                raise KindMismatch(f"field {self.qualname} rejected value: {e}") from e
            logger.debug("Model validation rejected write to %s: %s", self.qualname, e)
