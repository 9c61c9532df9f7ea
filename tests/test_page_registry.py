from __future__ import annotations

import pytest

from implindex.core import ImplementorRecord, ImplementorRegistry, PageContext, contribute


def test_same_trait_batches_concatenate_in_arrival_order() -> None:
    reg = ImplementorRegistry()
    reg.contribute({"T": [{"displayText": "a"}, {"displayText": "b"}]})
    reg.contribute({"T": [{"displayText": "c"}], "U": [{"displayText": "u"}]})

    assert [r.display_text for r in reg.get("T")] == ["a", "b", "c"]
    assert [r.display_text for r in reg.get("U")] == ["u"]
    assert reg.traits() == ["T", "U"]
    assert reg.record_count() == 4


def test_contributing_same_batch_twice_duplicates_records() -> None:
    reg = ImplementorRegistry()
    batch = {"T": [{"displayText": "impl T for X", "typePath": "x::X"}]}
    reg.contribute(batch)
    reg.contribute(batch)

    recs = reg.get("T")
    assert len(recs) == 2
    assert recs[0] == recs[1]


def test_reads_are_copies() -> None:
    reg = ImplementorRegistry()
    reg.contribute({"T": [{"displayText": "a"}]})

    got = reg.get("T")
    got.append(ImplementorRecord(display_text="intruder"))
    snap = reg.snapshot()
    snap["T"].clear()

    assert [r.display_text for r in reg.get("T")] == ["a"]
    assert reg.get("unknown") == []
    assert not reg.has_trait("unknown")


def test_empty_trait_list_still_creates_entry() -> None:
    reg = ImplementorRegistry()
    reg.contribute({"T": []})
    assert reg.has_trait("T")
    assert reg.get("T") == []


def test_global_revision_counts_contributions() -> None:
    reg = ImplementorRegistry()
    assert reg.global_revision() == 0
    reg.contribute({"T": []})
    reg.contribute({})
    assert reg.global_revision() == 2
    reg.reset()
    assert reg.traits() == []
    assert reg.global_revision() == 3


def test_missing_display_text_yields_empty_record() -> None:
    page = PageContext()
    merged = contribute(page, {"T": [{"typePath": "x::X"}, {"displayText": "ok"}]})

    recs = page.registry.get("T")
    assert [r.display_text for r in recs] == ["", "ok"]
    assert recs[0].type_path == "x::X"
    assert merged["T"] == recs


def test_malformed_entries_do_not_abort_the_batch() -> None:
    page = PageContext()
    page.contribute(
        {
            "T": [None, "text only", {"displayText": 42, "isSynthetic": "yes"}],
            "U": "not a list",
            "V": [{"displayText": "fine"}],
        }
    )

    assert page.registry.get("T") == [ImplementorRecord(), ImplementorRecord(), ImplementorRecord()]
    assert not page.registry.has_trait("U")
    assert [r.display_text for r in page.registry.get("V")] == ["fine"]


def test_non_mapping_batch_contributes_nothing_but_is_still_delivered() -> None:
    page = PageContext()
    seen: list[dict] = []
    page.attach_consumer(seen.append)

    assert page.contribute(["not", "a", "mapping"]) == {}
    assert seen == [{}]
    assert page.registry.traits() == []


def test_closed_page_rejects_contributions() -> None:
    with PageContext() as page:
        page.contribute({"T": [{"displayText": "a"}]})
    assert page.closed
    assert page.registry.traits() == []

    with pytest.raises(RuntimeError):
        page.contribute({"T": []})
    with pytest.raises(RuntimeError):
        page.attach_consumer(lambda b: None)


def test_reset_keeps_page_open_and_detaches_consumer() -> None:
    page = PageContext()
    seen: list[dict] = []
    page.attach_consumer(seen.append)
    page.contribute({"T": []})
    page.reset()

    assert page.registry.traits() == []
    assert not page.channel.has_consumer
    page.contribute({"U": []})
    assert len(seen) == 1
    assert len(page.channel.pending()) == 1
