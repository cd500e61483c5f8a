"""Sink adapters implementing RemoteSinkPort."""

from observepy.adapters.sinks.betterstack import BetterStackSink
from observepy.adapters.sinks.file import FileSink
from observepy.adapters.sinks.in_memory import InMemorySink, SinkRecord

__all__ = [
    "BetterStackSink",
    "FileSink",
    "InMemorySink",
    "SinkRecord",
]
