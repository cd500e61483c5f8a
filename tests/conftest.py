"""Shared test fixtures for all test modules."""

import io
import logging
from collections.abc import Callable, Iterator
from typing import Any

import pytest

from observepy.adapters.console import ConsoleWriter
from observepy.adapters.sinks.in_memory import InMemorySink
from observepy.logger import Logger, create_logger


@pytest.fixture
def stdout() -> io.StringIO:
    """Captured stream for info and lower records."""
    return io.StringIO()


@pytest.fixture
def stderr() -> io.StringIO:
    """Captured stream for error and warn records."""
    return io.StringIO()


@pytest.fixture
def console(stdout: io.StringIO, stderr: io.StringIO) -> ConsoleWriter:
    """Console writer bound to the captured streams."""
    return ConsoleWriter(stdout=stdout, stderr=stderr)


@pytest.fixture
def sink() -> InMemorySink:
    """Fixture providing an empty in-memory sink."""
    return InMemorySink()


@pytest.fixture
def make_logger(console: ConsoleWriter) -> Iterator[Callable[..., Logger]]:
    """Factory fixture creating loggers isolated from the process environment.

    Loggers are closed at teardown so no delivery threads outlive the test.

    Usage:
        def test_something(make_logger, sink):
            logger = make_logger(sink=sink, min_level="debug")
    """
    created: list[Logger] = []

    def _make(**kwargs: Any) -> Logger:
        kwargs.setdefault("env", {})
        kwargs.setdefault("console", console)
        logger = create_logger(**kwargs)
        created.append(logger)
        return logger

    yield _make

    for logger in created:
        logger.close(timeout=0.2)


@pytest.fixture
def logger(make_logger: Callable[..., Logger], sink: InMemorySink) -> Logger:
    """Logger at debug level delivering to the in-memory sink."""
    return make_logger(sink=sink, min_level="debug", service="checkout")


@pytest.fixture
def diagnostics(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    """Capture observepy's own diagnostic records."""
    caplog.set_level(logging.DEBUG, logger="observepy")
    return caplog
