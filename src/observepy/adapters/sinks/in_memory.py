"""In-memory sink adapter."""

from typing import Any, NamedTuple


class SinkRecord(NamedTuple):
    """A record as received by a sink."""

    level: str
    message: str
    metadata: dict[str, Any]


class InMemorySink:
    """In-memory implementation of RemoteSinkPort.

    Stores submitted records in a list. Suitable for testing and for
    embedding applications that want to inspect what would have been sent.
    """

    def __init__(self) -> None:
        self._records: list[SinkRecord] = []
        self.drain_count = 0

    @property
    def records(self) -> list[SinkRecord]:
        """Snapshot of submitted records, oldest first."""
        return list(self._records)

    async def submit(self, level: str, message: str, metadata: dict[str, Any]) -> None:
        """Store a record."""
        self._records.append(SinkRecord(level, message, dict(metadata)))

    async def drain(self) -> None:
        """Nothing is buffered, so draining completes immediately."""
        self.drain_count += 1

    def clear(self) -> None:
        self._records.clear()
