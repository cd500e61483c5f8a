"""Core domain models for log records and logger configuration."""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Any

IDENTITY_FIELDS = ("service", "environment", "version")


class Level(IntEnum):
    """Log severity levels.

    Lower values are more severe. A call is emitted when its level is
    numerically less than or equal to the logger's threshold.
    """

    ERROR = 0
    WARN = 1
    INFO = 2
    HTTP = 3
    VERBOSE = 4
    DEBUG = 5
    SILLY = 6

    @property
    def label(self) -> str:
        """Lowercase level name as sent to sinks (e.g. ``"warn"``)."""
        return self.name.lower()

    @classmethod
    def parse(cls, value: "Level | str") -> "Level":
        """Convert a level name or Level into a Level.

        Args:
            value: A Level, or a case-insensitive level name. ``warning``
                is accepted as an alias of ``warn``.

        Returns:
            The matching Level.

        Raises:
            ValueError: If the name is not a known level.
        """
        if isinstance(value, Level):
            return value
        name = str(value).strip().lower()
        if name == "warning":
            name = "warn"
        try:
            return cls[name.upper()]
        except KeyError:
            raise ValueError(f"Unknown log level: {value!r}") from None

    def allows(self, level: "Level") -> bool:
        """Return True if ``level`` passes this threshold."""
        return level <= self


@dataclass(frozen=True)
class ServiceIdentity:
    """Identifies the emitting application instance.

    Attributes:
        service: Service name.
        environment: Deployment environment (e.g. production).
        version: Service version string.
    """

    service: str = "application"
    environment: str = "development"
    version: str = "1.0.0"

    def as_dict(self) -> dict[str, str]:
        return {
            "service": self.service,
            "environment": self.environment,
            "version": self.version,
        }

    def merged_with(self, context: Mapping[str, Any]) -> "ServiceIdentity":
        """Return a copy with identity fields present in ``context`` applied."""
        overrides = {
            key: str(context[key])
            for key in IDENTITY_FIELDS
            if key in context and context[key] is not None
        }
        if not overrides:
            return self
        return replace(self, **overrides)


@dataclass(frozen=True)
class SinkCredentials:
    """Credentials for the remote ingestion sink.

    Attributes:
        token: Source token sent with every batch.
        endpoint: Ingestion URL, always carrying a scheme.
    """

    token: str
    endpoint: str


@dataclass(frozen=True)
class LoggerConfig:
    """Configuration fixed for the lifetime of a logger.

    Attributes:
        min_level: Initial severity threshold.
        identity: Service identity stamped on every record.
        credentials: Remote sink credentials, or None for no remote sink.
        file_path: Path of the local NDJSON sink, or None.
        init_retry_delay: Seconds before the single sink construction
            retry, or None to disable the retry.
    """

    min_level: Level = Level.INFO
    identity: ServiceIdentity = field(default_factory=ServiceIdentity)
    credentials: SinkCredentials | None = None
    file_path: str | None = None
    init_retry_delay: float | None = 5.0

    def derive(self, context: Mapping[str, Any]) -> "LoggerConfig":
        """Return a config whose identity is overridden by ``context``."""
        identity = self.identity.merged_with(context)
        if identity is self.identity:
            return self
        return replace(self, identity=identity)


@dataclass(frozen=True)
class LogRecord:
    """A normalized log record ready for delivery.

    Attributes:
        level: Severity of the call.
        message: The log message, always a string.
        metadata: Structured fields including identity and timestamp.
        timestamp: Unix timestamp in seconds when the call was dispatched.
    """

    level: Level
    message: str
    metadata: dict[str, Any] = field(default_factory=dict)
    timestamp: float = 0.0
