from __future__ import annotations

from implindex.core import ChannelState, HandoffChannel, ImplementorRecord, PageContext


def _rec(text: str) -> ImplementorRecord:
    return ImplementorRecord(display_text=text)


def test_batch_before_consumer_is_delivered_once_on_attach() -> None:
    page = PageContext()
    page.contribute({"Trait::Drop": [{"displayText": "impl Drop for Foo"}]})
    assert page.state is ChannelState.AWAITING_CONSUMER
    assert len(page.channel.pending()) == 1

    seen: list[dict] = []
    page.attach_consumer(seen.append)

    assert seen == [{"Trait::Drop": [_rec("impl Drop for Foo")]}]
    assert page.state is ChannelState.CONSUMER_ATTACHED
    assert page.channel.pending() == []


def test_batches_after_attach_are_delivered_synchronously_in_order() -> None:
    page = PageContext()
    seen: list[dict] = []
    page.attach_consumer(seen.append)

    page.contribute({"Trait::Clone": [{"displayText": "impl Clone for Bar"}]})
    assert len(seen) == 1
    page.contribute({"Trait::Clone": [{"displayText": "impl Clone for Baz"}]})

    assert seen == [
        {"Trait::Clone": [_rec("impl Clone for Bar")]},
        {"Trait::Clone": [_rec("impl Clone for Baz")]},
    ]
    assert [r.display_text for r in page.registry.get("Trait::Clone")] == [
        "impl Clone for Bar",
        "impl Clone for Baz",
    ]


def test_backlog_precedes_later_contributions() -> None:
    page = PageContext()
    for i in range(5):
        page.contribute({f"T{i}": [{"displayText": f"impl T{i} for X"}]})

    seen: list[str] = []
    page.attach_consumer(lambda b: seen.extend(b.keys()))
    page.contribute({"T5": []})

    assert seen == ["T0", "T1", "T2", "T3", "T4", "T5"]
    assert page.channel.delivered_count() == 6


def test_contribution_from_inside_consumer_queues_behind_backlog() -> None:
    page = PageContext()
    page.contribute({"A": []})
    page.contribute({"B": []})

    seen: list[str] = []

    def consumer(batch: dict) -> None:
        seen.extend(batch.keys())
        if "A" in batch:
            page.contribute({"C": []})

    page.attach_consumer(consumer)

    assert seen == ["A", "B", "C"]


def test_reattach_replaces_consumer() -> None:
    page = PageContext()
    first: list[dict] = []
    second: list[dict] = []

    page.attach_consumer(first.append)
    page.contribute({"T": [{"displayText": "one"}]})
    page.attach_consumer(second.append)
    page.contribute({"T": [{"displayText": "two"}]})

    assert [b["T"][0].display_text for b in first] == ["one"]
    assert [b["T"][0].display_text for b in second] == ["two"]


def test_failing_consumer_does_not_block_later_batches() -> None:
    channel = HandoffChannel()
    calls: list[str] = []

    def flaky(batch: dict) -> None:
        calls.extend(batch.keys())
        if "bad" in batch:
            raise RuntimeError("renderer blew up")

    channel.attach_consumer(flaky)
    channel.deliver({"bad": []})
    channel.deliver({"good": []})

    assert calls == ["bad", "good"]
    assert channel.delivered_count() == 2


def test_no_consumer_keeps_batches_pending() -> None:
    channel = HandoffChannel()
    channel.deliver({"A": []})
    channel.deliver({"B": []})

    assert channel.state is ChannelState.AWAITING_CONSUMER
    assert not channel.has_consumer
    assert [list(b) for b in channel.pending()] == [["A"], ["B"]]


def test_attach_rejects_non_callable() -> None:
    import pytest

    channel = HandoffChannel()
    with pytest.raises(ValueError):
        channel.attach_consumer("not a function")  # type: ignore[arg-type]


def test_close_drops_consumer_and_backlog() -> None:
    channel = HandoffChannel()
    channel.deliver({"A": []})
    channel.close()
    assert channel.pending() == []

    seen: list[dict] = []
    channel.attach_consumer(seen.append)
    assert seen == []


def test_failing_consumer_during_flush_still_drains_backlog() -> None:
    page = PageContext()
    page.contribute({"A": []})
    page.contribute({"bad": []})
    page.contribute({"C": []})

    seen: list[str] = []

    def flaky(batch: dict) -> None:
        seen.extend(batch.keys())
        if "bad" in batch:
            raise RuntimeError("renderer blew up")

    page.attach_consumer(flaky)

    assert seen == ["A", "bad", "C"]
    assert page.channel.pending() == []
    assert page.channel.delivered_count() == 3
