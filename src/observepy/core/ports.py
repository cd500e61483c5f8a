"""Port interfaces for log sinks.

These protocols define the contract the dispatcher relies on. The core
depends only on these interfaces, not on concrete sinks.
"""

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RemoteSinkPort(Protocol):
    """Port for asynchronous log delivery.

    Adapters implementing this protocol receive normalized records.
    Examples: BetterStackSink, FileSink, InMemorySink.
    """

    async def submit(self, level: str, message: str, metadata: dict[str, Any]) -> None:
        """Deliver one record. May raise on failure."""
        ...

    async def drain(self) -> None:
        """Wait until every buffered record has been delivered.

        May never complete when the destination is unreachable.
        """
        ...


SinkFactory = Callable[..., RemoteSinkPort]
