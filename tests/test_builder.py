from __future__ import annotations

import logging

import pytest

from mapsmith.errors import RecordCycleError
from mapsmith.mapping import CatchAllAdapter, LazyCatchAll, LazyField, get_mappings
from sample_records import (
    Account,
    Address,
    BadInline,
    Customer,
    Envelope,
    IntKeyed,
    Node,
    OptionalNode,
    Overlap,
    Person,
    TwoCatchAlls,
    WithExtra,
)


def test_direct_omitted_and_excluded_fields():
    info = get_mappings(Person(), "map")
    # age is zero + omitempty, password is "-", notes is untagged,
    # zip is zero + omitempty inside the inlined address
    assert set(info.fields) == {"name", "nickname", "token", "city"}
    assert info.extra is None


def test_omitempty_keeps_non_zero_fields():
    info = get_mappings(Person(age=7, address=Address(zip_code="0150")), "map")
    assert {"age", "zip"} <= set(info.fields)


def test_omit_empty_can_be_disabled():
    info = get_mappings(Person(), "map", omit_empty=False)
    assert {"age", "zip"} <= set(info.fields)


def test_inline_populated_record_is_not_lazy():
    person = Person(address=Address(city="Oslo"))
    info = get_mappings(person, "map")
    city = info.fields["city"]
    assert not isinstance(city, LazyField)
    assert city.value == "Oslo"


def test_inline_nil_pointer_is_lazy_and_untouched():
    customer = Customer()
    info = get_mappings(customer, "map")
    assert set(info.fields) == {"id", "city"}
    assert isinstance(info.fields["city"], LazyField)
    assert info.fields["city"].value == ""
    assert customer.address is None


def test_siblings_share_one_initializer():
    info = get_mappings(Customer(), "map", omit_empty=False)
    city, zip_code = info.fields["city"], info.fields["zip"]
    assert city.initializer is zip_code.initializer


def test_inline_map_becomes_catch_all():
    populated = WithExtra(extra={"k": 1})
    info = get_mappings(populated, "map")
    assert isinstance(info.extra, CatchAllAdapter)
    assert info.extra.keys() == ["k"]

    empty = WithExtra()
    info = get_mappings(empty, "map")
    assert isinstance(info.extra, LazyCatchAll)
    assert info.extra.keys() == []
    assert empty.extra is None


def test_nested_catch_all_propagates_to_parent():
    info = get_mappings(Envelope(), "map")
    assert set(info.fields) == {"kind", "name"}
    assert isinstance(info.extra, LazyCatchAll)


def test_later_field_wins_on_collision(caplog):
    rec = Overlap(city="outer", address=Address(city="inner"))
    with caplog.at_level(logging.DEBUG, logger="mapsmith.mapping.builder"):
        info = get_mappings(rec, "map")
    assert info.fields["city"].value == "inner"
    assert "moves from field" in caplog.text


def test_inline_on_unsupported_kind_contributes_nothing(caplog):
    with caplog.at_level(logging.WARNING, logger="mapsmith.mapping.builder"):
        info = get_mappings(BadInline(labels=["a"]), "map")
    assert set(info.fields) == {"name"}
    assert info.extra is None
    assert "Ignoring inline flag" in caplog.text


def test_non_string_keyed_map_is_not_a_catch_all(caplog):
    with caplog.at_level(logging.WARNING, logger="mapsmith.mapping.builder"):
        info = get_mappings(IntKeyed(), "map")
    assert info.extra is None
    assert "cannot serve as catch-all" in caplog.text


def test_second_catch_all_replaces_first(caplog):
    rec = TwoCatchAlls(first={"a": 1}, second={"b": 2})
    with caplog.at_level(logging.WARNING, logger="mapsmith.mapping.builder"):
        info = get_mappings(rec, "map")
    assert info.extra.keys() == ["b"]
    assert "replaces an earlier catch-all" in caplog.text


def test_filter_tag_and_name_tag_are_independent():
    acct = Account(user_id=9, password="pw", email="")
    api_only = get_mappings(acct, "api")
    assert set(api_only.fields) == {"userId"}  # email zero + omitempty

    api_names_map_filter = get_mappings(acct, "api", "map")
    assert set(api_names_map_filter.fields) == {"userId", "password"}


def test_self_inlining_nil_pointer_is_rejected():
    with pytest.raises(RecordCycleError):
        get_mappings(Node(), "map")


def test_self_inlining_with_omitempty_stops_at_nil():
    info = get_mappings(OptionalNode(label="root"), "map")
    assert set(info.fields) == {"label"}
    # a populated child inlines once, later key wins
    info = get_mappings(OptionalNode(label="root", child=OptionalNode(label="leaf")), "map")
    assert info.fields["label"].value == "leaf"


def test_self_inlining_with_omitempty_stops_at_nil_when_writable():
    info = get_mappings(OptionalNode(label="root"), "map", omit_empty=False)
    assert set(info.fields) == {"label"}
    assert not isinstance(info.fields["label"], LazyField)
    with pytest.raises(RecordCycleError):
        get_mappings(Node(), "map", omit_empty=False)


def test_instance_inlined_into_itself_is_rejected():
    node = OptionalNode(label="loop")
    node.child = node
    with pytest.raises(RecordCycleError):
        get_mappings(node, "map")


def test_depth_limit():
    chain = OptionalNode(label="0")
    tail = chain
    for i in range(1, 5):
        tail.child = OptionalNode(label=str(i))
        tail = tail.child
    assert get_mappings(chain, "map", max_depth=5).fields["label"].value == "4"
    with pytest.raises(RecordCycleError):
        get_mappings(chain, "map", max_depth=4)


def test_rejects_non_record():
    with pytest.raises(TypeError):
        get_mappings({"not": "a record"}, "map")
