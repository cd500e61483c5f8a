"""Leveled logger facade: console output plus asynchronous remote delivery.

Every accepted call is normalized once, written to the console
synchronously and handed to the remote delivery path without waiting.
:meth:`Logger.bind` returns a :class:`BoundLogger` that wraps the root
logger together with an immutable context map merged under every call.
"""

import functools
import logging
import time
from collections.abc import Mapping
from dataclasses import replace
from types import MappingProxyType, TracebackType
from typing import Any

from observepy.adapters.console import ConsoleWriter, format_timestamp
from observepy.adapters.sinks.betterstack import BetterStackSink
from observepy.adapters.sinks.file import FileSink
from observepy.config import LoggerOptions
from observepy.core.models import Level, LoggerConfig, LogRecord, ServiceIdentity
from observepy.core.normalize import merge_fields, normalize
from observepy.core.ports import RemoteSinkPort, SinkFactory
from observepy.delivery import FlushOutcome, RemoteDelivery

_logger = logging.getLogger(__name__)

_EMPTY_CONTEXT: Mapping[str, Any] = MappingProxyType({})


class _LeveledLogger:
    """Leveled methods, level filter and binding shared by all loggers."""

    _min_level: Level
    _config: LoggerConfig
    _context: Mapping[str, Any]
    # The logger owning the console writer and the delivery path.
    _root_logger: "Logger"

    def _emit(self, level: Level, args: tuple[Any, ...], fields: dict[str, Any]) -> None:
        self._root_logger._dispatch(level, args, fields, self._config, self._context)

    def _log(self, level: Level, args: tuple[Any, ...], fields: dict[str, Any]) -> None:
        if not self._min_level.allows(level):
            return
        self._emit(level, args, fields)

    def error(self, *args: Any, **fields: Any) -> None:
        self._log(Level.ERROR, args, fields)

    def warn(self, *args: Any, **fields: Any) -> None:
        self._log(Level.WARN, args, fields)

    def info(self, *args: Any, **fields: Any) -> None:
        self._log(Level.INFO, args, fields)

    def http(self, *args: Any, **fields: Any) -> None:
        self._log(Level.HTTP, args, fields)

    def verbose(self, *args: Any, **fields: Any) -> None:
        self._log(Level.VERBOSE, args, fields)

    def debug(self, *args: Any, **fields: Any) -> None:
        self._log(Level.DEBUG, args, fields)

    def silly(self, *args: Any, **fields: Any) -> None:
        self._log(Level.SILLY, args, fields)

    def log(self, *args: Any, **fields: Any) -> None:
        """Alias of :meth:`info`."""
        self._log(Level.INFO, args, fields)

    @property
    def min_level(self) -> Level:
        return self._min_level

    def set_min_level(self, level: Level | str) -> None:
        """Change the threshold for all subsequent calls on this logger.

        Raises:
            ValueError: If ``level`` is not a known level name.
        """
        self._min_level = Level.parse(level)

    def is_enabled_for(self, level: Level | str) -> bool:
        return self._min_level.allows(Level.parse(level))

    @property
    def identity(self) -> ServiceIdentity:
        return self._config.identity

    @property
    def context(self) -> Mapping[str, Any]:
        """Read-only view of the bound context."""
        return self._context

    def bind(self, context: Mapping[str, Any] | None = None, **fields: Any) -> "BoundLogger":
        """Return a logger that merges ``context`` into every call.

        Per-call metadata wins over bound context, and later bindings win
        over earlier ones. ``service``, ``environment`` and ``version`` in
        the context replace the derived logger's identity. This logger is
        never modified.

        Args:
            context: Fields to attach to every record.
            **fields: More fields, applied after ``context``.

        Returns:
            A new BoundLogger sharing this logger's sink.
        """
        merged = dict(self._context)
        if context:
            merge_fields(merged, context)
        if fields:
            merge_fields(merged, fields)
        return BoundLogger(
            self._root_logger,
            context=merged,
            config=self._config.derive(merged),
            min_level=self._min_level,
        )

    def flush(self, timeout: float = 3.0) -> FlushOutcome:
        """Wait up to ``timeout`` seconds for remote delivery to settle.

        Never raises. Returns immediately with ``NO_SINK`` when no remote
        sink is configured.
        """
        return self._root_logger._delivery.flush(timeout)

    async def aflush(self, timeout: float = 3.0) -> FlushOutcome:
        """Awaitable variant of :meth:`flush`."""
        return await self._root_logger._delivery.aflush(timeout)


class Logger(_LeveledLogger):
    """Root logger owning the console writer and the remote delivery path.

    Use :func:`create_logger` rather than constructing this directly.

    Args:
        config: Resolved configuration.
        delivery: Remote delivery path. Console-only when omitted.
        console: Console writer. Writes to stdout/stderr when omitted.
    """

    def __init__(
        self,
        config: LoggerConfig | None = None,
        *,
        delivery: RemoteDelivery | None = None,
        console: ConsoleWriter | None = None,
    ) -> None:
        self._config = config or LoggerConfig()
        self._min_level = self._config.min_level
        self._context = _EMPTY_CONTEXT
        self._delivery = delivery or RemoteDelivery(None)
        self._console = console or ConsoleWriter()
        self._root_logger = self

    @property
    def config(self) -> LoggerConfig:
        return self._config

    @property
    def delivery(self) -> RemoteDelivery:
        return self._delivery

    def _dispatch(
        self,
        level: Level,
        args: tuple[Any, ...],
        fields: dict[str, Any],
        config: LoggerConfig,
        context: Mapping[str, Any],
    ) -> None:
        normalized = normalize(args, fields)
        now = time.time()
        identity = config.identity.as_dict()
        metadata: dict[str, Any] = dict(identity)
        metadata["timestamp"] = format_timestamp(now)
        metadata.update(context)
        # Bound identity fields are already folded into config.identity.
        metadata.update(identity)
        metadata.update(normalized.metadata)
        record = LogRecord(
            level=level,
            message=normalized.message,
            metadata=metadata,
            timestamp=now,
        )
        self._console.write(record)
        self._delivery.submit(record)

    def close(self, timeout: float = 3.0) -> FlushOutcome:
        """Flush, close the sink and stop delivery. Console output continues."""
        return self._delivery.close(timeout)

    def __enter__(self) -> "Logger":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        identity = self._config.identity
        return (
            f"Logger(service={identity.service!r}, environment={identity.environment!r}, "
            f"min_level={self._min_level.label!r})"
        )


class BoundLogger(_LeveledLogger):
    """Logger view carrying a fixed context map.

    Delegates dispatch to the root logger, so it shares the root's console
    writer and remote sink. Its threshold starts from the parent's and is
    independent afterwards.
    """

    def __init__(
        self,
        root: Logger,
        *,
        context: Mapping[str, Any],
        config: LoggerConfig,
        min_level: Level,
    ) -> None:
        self._root_logger = root
        self._context = MappingProxyType(dict(context))
        self._config = config
        self._min_level = min_level

    def __repr__(self) -> str:
        return f"BoundLogger(context={dict(self._context)!r}, min_level={self._min_level.label!r})"


def _build_delivery(
    config: LoggerConfig,
    sink: RemoteSinkPort | None,
    sink_factory: SinkFactory | None,
) -> RemoteDelivery:
    if sink is not None:
        return RemoteDelivery.for_sink(sink, retry_delay=None)
    if config.credentials is not None:
        factory = sink_factory or BetterStackSink
        _logger.debug(
            "[observepy] Initializing remote sink with endpoint: %s",
            config.credentials.endpoint,
        )
        return RemoteDelivery(
            functools.partial(
                factory, config.credentials.token, endpoint=config.credentials.endpoint
            ),
            retry_delay=config.init_retry_delay,
        )
    if config.file_path:
        return RemoteDelivery(
            functools.partial(FileSink, config.file_path),
            retry_delay=config.init_retry_delay,
        )
    _logger.debug("[observepy] No sink token provided, logs will only go to console")
    return RemoteDelivery(None)


def create_logger(
    options: LoggerOptions | None = None,
    *,
    sink: RemoteSinkPort | None = None,
    sink_factory: SinkFactory | None = None,
    console: ConsoleWriter | None = None,
    env: Mapping[str, str] | None = None,
    **overrides: Any,
) -> Logger:
    """Create a root logger.

    Never raises for a bad sink configuration: the logger falls back to
    console-only output and reports the problem on the ``observepy``
    diagnostic logger.

    Args:
        options: Logger options. Unset fields come from ``env``.
        sink: Ready-made sink instance; bypasses sink construction.
        sink_factory: Callable ``(token, endpoint=...) -> sink`` used when a
            token is configured. Defaults to BetterStackSink.
        console: Console writer. Defaults to stdout/stderr.
        env: Environment mapping. Defaults to ``os.environ``.
        **overrides: LoggerOptions fields overriding ``options``.

    Returns:
        A new Logger.

    Example:
        ```python
        from observepy import create_logger

        logger = create_logger(service="billing", min_level="debug")
        logger.info("Invoice sent", {"invoiceId": 42})
        logger.flush()
        ```
    """
    options = options or LoggerOptions()
    if overrides:
        options = replace(options, **overrides)
    config = options.resolve(env)
    return Logger(config, delivery=_build_delivery(config, sink, sink_factory), console=console)
