from __future__ import annotations

from mapsmith.fields import record_fields
from mapsmith.tags import DEFAULT_TAG, INLINE, OMITEMPTY, parse_name_and_flags
from sample_records import Account, Person


def _field(record, name):
    return next(f for f in record_fields(record) if f.name == name)


def test_explicit_name_without_flags():
    name, flags = parse_name_and_flags(_field(Person(), "full_name"), DEFAULT_TAG)
    assert name == "name"
    assert flags == frozenset()


def test_empty_name_falls_back_to_attribute_name():
    name, flags = parse_name_and_flags(_field(Person(), "nickname"))
    assert name == "nickname"
    assert flags == frozenset()


def test_flags_form_a_set():
    name, flags = parse_name_and_flags(_field(Person(), "address"))
    assert name == "address"
    assert flags == {INLINE}
    name, flags = parse_name_and_flags(_field(Person(), "age"))
    assert (name, flags) == ("age", {OMITEMPTY})


def test_skip_marker_is_returned_verbatim():
    name, _ = parse_name_and_flags(_field(Person(), "password"))
    assert name == "-"


def test_scheme_selects_metadata():
    acct = Account()
    assert parse_name_and_flags(_field(acct, "user_id"), "api") == ("userId", frozenset())
    assert parse_name_and_flags(_field(acct, "email"), "api") == ("email", {OMITEMPTY})
    # missing scheme behaves like an empty tag
    assert parse_name_and_flags(_field(acct, "password"), "api") == ("password", frozenset())


def test_duplicate_and_unknown_flags():
    class _Stub:
        name = "thing"

        @staticmethod
        def tag(scheme):
            return "x,inline,bogus,inline"

    name, flags = parse_name_and_flags(_Stub(), "map")
    assert name == "x"
    assert flags == {"inline", "bogus"}
