"""NDJSON file sink adapter."""

import threading
from pathlib import Path
from typing import Any, TextIO

from observepy.core.encoding.ndjson import encode_record


class FileSink:
    """File implementation of RemoteSinkPort.

    Appends one NDJSON line per record. The file is opened lazily on the
    first submission and parent directories are created as needed.

    Args:
        path: Destination file path.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._file: TextIO | None = None
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _ensure_file(self) -> TextIO:
        if self._file is None:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._file = self._path.open("a", encoding="utf-8")
        return self._file

    async def submit(self, level: str, message: str, metadata: dict[str, Any]) -> None:
        """Append a record to the file."""
        line = encode_record(level, message, metadata)
        with self._lock:
            self._ensure_file().write(line + "\n")

    async def drain(self) -> None:
        """Flush buffered lines to disk."""
        with self._lock:
            if self._file is not None:
                self._file.flush()

    async def aclose(self) -> None:
        """Flush and close the file."""
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None
