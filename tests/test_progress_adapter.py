"""Tests for the stream-to-callback progress adapter."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from gitwrap.core.progress import AdapterState, CheckoutProgressParser, ProgressAdapter, ProgressParser
from gitwrap.models.progress import CheckoutProgress

if TYPE_CHECKING:
    from collections.abc import Generator

    from gitwrap.core.progress import Progress


def _to_checkout(record: Progress) -> CheckoutProgress:
    return CheckoutProgress(
        title="Checking out branch feature",
        description=record.text,
        value=record.percent,
        target_branch="feature",
    )


def _make_adapter(events: list[CheckoutProgress]) -> ProgressAdapter[CheckoutProgress]:
    return ProgressAdapter(CheckoutProgressParser(), _to_checkout, events.append)


class TestProgressAdapter:
    def test_initial_state(self) -> None:
        adapter = _make_adapter([])
        assert adapter.state is AdapterState.NOT_STARTED

    def test_feed_starts_running(self) -> None:
        adapter = _make_adapter([])
        adapter.feed("")
        assert adapter.state is AdapterState.RUNNING

    def test_callback_per_record_in_order(self) -> None:
        events: list[CheckoutProgress] = []
        adapter = _make_adapter(events)
        adapter.feed("Checking out files:  10% (1/10)\nChecking out")
        adapter.feed(" files:  50% (5/10)\nChecking out files: 100% (10/10)\n")
        assert [e.value for e in events] == pytest.approx([0.1, 0.5, 1.0])
        assert all(e.target_branch == "feature" for e in events)
        assert events[0].description == "Checking out files:  10% (1/10)"

    def test_unmatched_output_gives_no_callback(self) -> None:
        events: list[CheckoutProgress] = []
        adapter = _make_adapter(events)
        adapter.feed("Switched to branch 'feature'\nChecking out files: oops\n")
        adapter.close()
        assert events == []

    def test_close_flushes_partial_line(self) -> None:
        events: list[CheckoutProgress] = []
        adapter = _make_adapter(events)
        adapter.feed("Checking out files: 100% (10/10), done.")
        assert events == []
        adapter.close()
        assert [e.value for e in events] == [1.0]
        assert adapter.state is AdapterState.FINISHED

    def test_close_is_idempotent(self) -> None:
        events: list[CheckoutProgress] = []
        adapter = _make_adapter(events)
        adapter.feed("Checking out files: 100% (10/10)")
        adapter.close()
        adapter.close()
        assert len(events) == 1

    def test_feed_after_close_raises(self) -> None:
        adapter = _make_adapter([])
        adapter.close()
        with pytest.raises(RuntimeError, match="finished progress adapter"):
            adapter.feed("Checking out files: 100% (10/10)\n")

    def test_synthetic_start_then_stream(self) -> None:
        events: list[CheckoutProgress] = []
        events.append(CheckoutProgress(title="Checking out branch feature", value=0, target_branch="feature"))
        adapter = _make_adapter(events)
        adapter.consume(["Checking out files: 10% (1/10)\n", "Checking out files: 100% (10/10)\n"])

        assert [e.value for e in events] == pytest.approx([0.0, 0.1, 1.0])
        assert events[0].description is None
        assert all(e.kind == "checkout" for e in events)

    def test_works_with_generic_parser(self) -> None:
        values: list[float] = []
        adapter = ProgressAdapter(ProgressParser(), lambda record: record.percent, values.append)
        adapter.consume(["Resolving deltas:  37% (370/1000)"])
        assert values == pytest.approx([0.37])


class TestConsumeCallbackFailure:
    def test_callback_error_is_raised_after_stream_is_drained(self) -> None:
        consumed: list[str] = []

        def _chunks() -> Generator[str]:
            for chunk in ["Checking out files: 10% (1/10)\n", "Checking out files: 50% (5/10)\n", "tail\n"]:
                consumed.append(chunk)
                yield chunk

        def _explode(event: CheckoutProgress) -> None:
            msg = f"cannot render {event.value}"
            raise ValueError(msg)

        adapter = ProgressAdapter(CheckoutProgressParser(), _to_checkout, _explode)
        with pytest.raises(ValueError, match="cannot render"):
            adapter.consume(_chunks())

        assert len(consumed) == 3
        assert adapter.state is AdapterState.FINISHED

    def test_no_further_callbacks_after_failure(self) -> None:
        calls: list[float] = []

        def _fail_once(event: CheckoutProgress) -> None:
            calls.append(event.value)
            msg = "boom"
            raise RuntimeError(msg)

        adapter = ProgressAdapter(CheckoutProgressParser(), _to_checkout, _fail_once)
        with pytest.raises(RuntimeError, match="boom"):
            adapter.consume(["Checking out files: 10% (1/10)\n", "Checking out files: 100% (10/10)\n"])

        assert calls == pytest.approx([0.1])
