"""NDJSON encoder for log records."""

import json
from typing import Any

from observepy.core.normalize import json_default


def encode_record(
    level: str, message: str, metadata: dict[str, Any]
) -> str:
    """Encode a single record as one JSON line (without trailing newline)."""
    obj = {
        "timestamp": metadata.get("timestamp"),
        "level": level,
        "message": message,
        "metadata": metadata,
    }
    return json.dumps(obj, default=json_default)
