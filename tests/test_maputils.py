from __future__ import annotations

from mapsmith import filter_map, join, map_keys, to_map
from sample_records import Person


def test_map_keys_renames_listed_keys_only():
    src = {"a": 1, "b": 2}
    assert map_keys(src, {"a": "alpha", "zzz": "unused"}) == {"alpha": 1, "b": 2}
    assert src == {"a": 1, "b": 2}


def test_join_right_hand_side_wins():
    left = {"a": 1, "b": 2}
    right = {"b": 3, "c": 4}
    assert join(left, right) == {"a": 1, "b": 3, "c": 4}
    assert left == {"a": 1, "b": 2}


def test_filter_map_keeps_allowed_present_keys():
    assert filter_map({"a": 1, "b": 2, "c": 3}, ["a", "c", "missing"]) == {"a": 1, "c": 3}
    assert filter_map({"a": 1}, []) == {}


def test_helpers_compose_with_converters():
    out = to_map(Person(full_name="Ada"))
    public = filter_map(map_keys(out, {"name": "displayName"}), ["displayName", "city"])
    assert public == {"displayName": "Ada", "city": ""}
