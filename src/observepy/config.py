"""Logger options and their resolution from the process environment.

Each option is resolved in priority order: the explicit value, then the
environment variable, then a hard-coded default.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from observepy.core.models import Level, LoggerConfig, ServiceIdentity, SinkCredentials

_logger = logging.getLogger(__name__)

DEFAULT_SINK_ENDPOINT = "in.logs.betterstack.com"
DEFAULT_SERVICE = "application"
DEFAULT_ENVIRONMENT = "development"
DEFAULT_VERSION = "1.0.0"
DEFAULT_MIN_LEVEL = Level.INFO

ENV_SINK_TOKEN = "BETTER_STACK_SOURCE_TOKEN"
ENV_SINK_ENDPOINT = "BETTER_STACK_INGESTING_URL"
ENV_SERVICE = "SERVICE_NAME"
ENV_ENVIRONMENT = "APP_ENV"
ENV_VERSION = "SERVICE_VERSION"
ENV_MIN_LEVEL = "LOG_LEVEL"
ENV_FILE_PATH = "LOG_FILE"


def normalize_endpoint(endpoint: str) -> str:
    """Prefix ``https://`` when the endpoint carries no scheme."""
    endpoint = endpoint.strip()
    if not endpoint.startswith(("http://", "https://")):
        endpoint = f"https://{endpoint}"
    return endpoint


def _pick(explicit: str | None, env: Mapping[str, str], name: str, default: str | None) -> str | None:
    if explicit:
        return explicit
    value = env.get(name)
    if value:
        return value
    return default


@dataclass
class LoggerOptions:
    """Options accepted by :func:`observepy.create_logger`.

    Attributes:
        sink_token: Remote sink token. Enables remote delivery when set.
        sink_endpoint: Remote ingestion host or URL.
        service: Service name.
        environment: Deployment environment.
        version: Service version.
        min_level: Initial severity threshold (Level or level name).
        file_path: Enables the local NDJSON sink when no token is set.
        init_retry_delay: Seconds before retrying a failed sink construction
            once, or None to never retry.
    """

    sink_token: str | None = None
    sink_endpoint: str | None = None
    service: str | None = None
    environment: str | None = None
    version: str | None = None
    min_level: Level | str | None = None
    file_path: str | None = None
    init_retry_delay: float | None = 5.0

    def resolve(self, env: Mapping[str, str] | None = None) -> LoggerConfig:
        """Build a LoggerConfig, filling unset options from ``env``.

        Args:
            env: Environment mapping. Defaults to ``os.environ``.

        Returns:
            The resolved LoggerConfig.
        """
        if env is None:
            env = os.environ

        identity = ServiceIdentity(
            service=_pick(self.service, env, ENV_SERVICE, DEFAULT_SERVICE),
            environment=_pick(self.environment, env, ENV_ENVIRONMENT, DEFAULT_ENVIRONMENT),
            version=_pick(self.version, env, ENV_VERSION, DEFAULT_VERSION),
        )

        credentials = None
        token = _pick(self.sink_token, env, ENV_SINK_TOKEN, None)
        if token:
            endpoint = _pick(self.sink_endpoint, env, ENV_SINK_ENDPOINT, DEFAULT_SINK_ENDPOINT)
            credentials = SinkCredentials(token=token, endpoint=normalize_endpoint(endpoint))

        return LoggerConfig(
            min_level=self._resolve_level(env),
            identity=identity,
            credentials=credentials,
            file_path=_pick(self.file_path, env, ENV_FILE_PATH, None),
            init_retry_delay=self.init_retry_delay,
        )

    def _resolve_level(self, env: Mapping[str, str]) -> Level:
        raw = self.min_level if self.min_level is not None else env.get(ENV_MIN_LEVEL)
        if not raw:
            return DEFAULT_MIN_LEVEL
        try:
            return Level.parse(raw)
        except ValueError:
            _logger.warning(
                "[observepy] Ignoring unknown log level %r, using %s",
                raw,
                DEFAULT_MIN_LEVEL.label,
            )
            return DEFAULT_MIN_LEVEL
