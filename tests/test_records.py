from __future__ import annotations

from implindex.core import ImplementorRecord, coerce_batch, coerce_record


def test_wire_and_generator_aliases() -> None:
    wire = coerce_record({"displayText": "impl A for B", "isSynthetic": True, "typePath": "m::B"})
    generated = coerce_record({"text": "impl A for B", "synthetic": True, "types": ["m::B", "m::Alias"]})
    snake = coerce_record({"display_text": "impl A for B", "is_synthetic": True, "type_path": "m::B"})

    expected = ImplementorRecord(display_text="impl A for B", is_synthetic=True, type_path="m::B")
    assert wire == expected
    assert generated == expected
    assert snake == expected


def test_wrong_types_fall_back_to_defaults() -> None:
    rec = coerce_record({"displayText": None, "isSynthetic": 1, "types": [3]})
    assert rec == ImplementorRecord()

    assert coerce_record({"types": []}).type_path == ""


def test_crate_from_entry_wins_over_default() -> None:
    assert coerce_record({"displayText": "x"}, crate="outer").crate == "outer"
    assert coerce_record({"displayText": "x", "crate": "inner"}, crate="outer").crate == "inner"


def test_records_pass_through_unchanged() -> None:
    rec = ImplementorRecord(display_text="kept", crate="c")
    assert coerce_record(rec) is rec


def test_batch_keeps_entry_order_and_stringifies_keys() -> None:
    batch = coerce_batch({1: [{"displayText": "b"}, {"displayText": "a"}], "T": ()})
    assert list(batch) == ["1", "T"]
    assert [r.display_text for r in batch["1"]] == ["b", "a"]
    assert batch["T"] == []


def test_colliding_keys_keep_both_lists() -> None:
    batch = coerce_batch({1: [{"displayText": "one"}], "1": [{"displayText": "uno"}]})
    assert [r.display_text for r in batch["1"]] == ["one", "uno"]
