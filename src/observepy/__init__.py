"""observepy: console logging with asynchronous delivery to a remote sink."""

from observepy.adapters.console import ConsoleWriter
from observepy.adapters.logging import ObservepyHandler
from observepy.adapters.sinks import BetterStackSink, FileSink, InMemorySink
from observepy.config import LoggerOptions
from observepy.core.models import Level, LogRecord, ServiceIdentity
from observepy.core.normalize import NormalizedRecord, normalize
from observepy.core.ports import RemoteSinkPort
from observepy.delivery import FlushOutcome
from observepy.errors import DeliveryError, ObservepyError, SinkConfigurationError
from observepy.logger import BoundLogger, Logger, create_logger

__version__ = "0.1.0"

__all__ = [
    "BetterStackSink",
    "BoundLogger",
    "ConsoleWriter",
    "DeliveryError",
    "FileSink",
    "FlushOutcome",
    "InMemorySink",
    "Level",
    "LogRecord",
    "Logger",
    "LoggerOptions",
    "NormalizedRecord",
    "ObservepyError",
    "ObservepyHandler",
    "RemoteSinkPort",
    "ServiceIdentity",
    "SinkConfigurationError",
    "create_logger",
    "normalize",
]
