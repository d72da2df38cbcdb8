"""mapsmith: metadata-driven conversion between records and flat dicts.

Records are dataclasses or pydantic models whose fields carry a metadata
string per scheme, ``name[,omitempty][,inline]``::

    @dataclass
    class Address:
        city: str = mapped("city", default="")

    @dataclass
    class Customer:
        name: str = mapped("name", default="")
        address: Optional[Address] = mapped(",inline", default=None)
        extra: Optional[dict] = mapped(",inline", default=None)

    to_map(Customer(name="a"))             # {"name": "a", "city": ""}
    from_map({"city": "Oslo", "x": 1}, c)  # c.address.city == "Oslo"; c.extra == {"x": 1}
"""

from .errors import FieldNotSettable, KindMismatch, MappingError, RecordCycleError, UnmappedKey
from .fields import Field, Kind, is_record, mapped, new_instance
from .mapper import from_map, tagged_from_map, tagged_to_map, to_map
from .mapping import MappingInfo, get_mappings
from .maputils import filter_map, join, map_keys
from .tags import DEFAULT_TAG, INLINE, OMITEMPTY, SKIP, parse_name_and_flags

__all__ = [
    "to_map",
    "from_map",
    "tagged_to_map",
    "tagged_from_map",
    "get_mappings",
    "MappingInfo",
    "Field",
    "Kind",
    "is_record",
    "mapped",
    "new_instance",
    "parse_name_and_flags",
    "DEFAULT_TAG",
    "INLINE",
    "OMITEMPTY",
    "SKIP",
    "map_keys",
    "join",
    "filter_map",
    "MappingError",
    "FieldNotSettable",
    "KindMismatch",
    "UnmappedKey",
    "RecordCycleError",
]
