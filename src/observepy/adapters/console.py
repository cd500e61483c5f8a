"""Human-readable console output for log records."""

import json
import sys
import threading
from datetime import datetime, timezone
from typing import Any, TextIO

from observepy.core.models import IDENTITY_FIELDS, Level, LogRecord
from observepy.core.normalize import json_default
from observepy.core.outcome import Err, capture

# Fields already shown in the line header.
_HEADER_FIELDS = frozenset({*IDENTITY_FIELDS, "timestamp"})

_STDERR_LEVELS = frozenset({Level.ERROR, Level.WARN})


def format_timestamp(timestamp: float) -> str:
    """Format a Unix timestamp as ISO-8601 UTC with milliseconds."""
    moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ConsoleWriter:
    """Writes one human-readable entry per record.

    Output looks like::

        2026-10-18T09:12:03.512Z [billing/production@2.1.0] INFO: Invoice sent
        {
          "invoiceId": 42
        }

    ``error`` and ``warn`` records go to stderr, everything else to stdout.
    Streams are looked up at write time so redirected ``sys.stdout`` and
    ``sys.stderr`` are honoured.

    Args:
        stdout: Stream for non-error records. Defaults to ``sys.stdout``.
        stderr: Stream for error and warn records. Defaults to ``sys.stderr``.
    """

    def __init__(self, stdout: TextIO | None = None, stderr: TextIO | None = None) -> None:
        self._stdout = stdout
        self._stderr = stderr
        self._lock = threading.Lock()

    def _stream_for(self, level: Level) -> TextIO:
        if level in _STDERR_LEVELS:
            return self._stderr or sys.stderr
        return self._stdout or sys.stdout

    def format(self, record: LogRecord) -> str:
        meta = record.metadata
        header = (
            f"{format_timestamp(record.timestamp)} "
            f"[{meta.get('service')}/{meta.get('environment')}@{meta.get('version')}] "
            f"{record.level.name}: {record.message}"
        )
        extra: dict[str, Any] = {k: v for k, v in meta.items() if k not in _HEADER_FIELDS}
        if not extra:
            return header
        body = capture(json.dumps, extra, indent=2, default=json_default)
        if isinstance(body, Err):
            body_text = repr(extra)
        else:
            body_text = body.value
        return f"{header}\n{body_text}"

    def _write(self, record: LogRecord) -> None:
        text = self.format(record)
        stream = self._stream_for(record.level)
        with self._lock:
            stream.write(text + "\n")
            stream.flush()

    def write(self, record: LogRecord) -> bool:
        """Write a record. Never raises.

        Returns:
            True if the record was written.
        """
        return capture(self._write, record).ok
