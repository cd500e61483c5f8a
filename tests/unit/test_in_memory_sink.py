"""Tests for the in-memory sink."""

import pytest

from observepy.adapters.sinks.in_memory import InMemorySink, SinkRecord

pytestmark = pytest.mark.sink


class TestInMemorySink:
    """Tests for InMemorySink."""

    async def test_submit_stores_records_in_order(self) -> None:
        sink = InMemorySink()
        await sink.submit("info", "first", {"a": 1})
        await sink.submit("error", "second", {})

        assert sink.records == [
            SinkRecord("info", "first", {"a": 1}),
            SinkRecord("error", "second", {}),
        ]

    async def test_metadata_is_copied(self) -> None:
        sink = InMemorySink()
        metadata = {"a": 1}
        await sink.submit("info", "x", metadata)
        metadata["a"] = 2
        assert sink.records[0].metadata == {"a": 1}

    async def test_records_returns_a_snapshot(self) -> None:
        sink = InMemorySink()
        await sink.submit("info", "x", {})
        sink.records.clear()
        assert len(sink.records) == 1

    async def test_drain_is_counted(self) -> None:
        sink = InMemorySink()
        await sink.drain()
        await sink.drain()
        assert sink.drain_count == 2

    async def test_clear(self) -> None:
        sink = InMemorySink()
        await sink.submit("info", "x", {})
        sink.clear()
        assert sink.records == []
