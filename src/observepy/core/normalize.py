"""Reduce variadic logging arguments into a single structured record.

A call such as ``logger.info("saved", {"user": 1})`` or
``logger.error(exc, "retrying", 3)`` is turned into one message string and
one metadata dict. The rules are:

1. No arguments: empty message and empty metadata.
2. An exception first: its text becomes the message and the exception is
   expanded under ``metadata["error"]``.
3. A string first: used verbatim.
4. Anything else first: JSON-encoded, falling back to ``str()``.
5. Exactly one trailing mapping is merged into metadata. Any other trailing
   arguments are kept, in order, under ``metadata["additionalArgs"]``.

Keyword fields given to the leveled method are merged last.
"""

import json
import traceback
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from observepy.core.outcome import Err, capture

ADDITIONAL_ARGS_KEY = "additionalArgs"
ERROR_KEY = "error"
RESERVED_KEYS = frozenset({"message"})

_MAX_CAUSE_DEPTH = 5


@dataclass(frozen=True)
class NormalizedRecord:
    """Message and metadata produced from one logging call."""

    message: str
    metadata: dict[str, Any] = field(default_factory=dict)


def expand_error(exc: BaseException, _depth: int = 0) -> dict[str, Any]:
    """Expand an exception into a JSON-friendly dict.

    Args:
        exc: The exception to expand.

    Returns:
        Dict with ``name``, ``message`` and ``stack`` plus any public
        attributes set on the exception instance. An explicit ``__cause__``
        is expanded under ``cause``.
    """
    expanded: dict[str, Any] = {
        key: value for key, value in vars(exc).items() if not key.startswith("_")
    }
    expanded["name"] = type(exc).__name__
    expanded["message"] = str(exc)
    expanded["stack"] = "".join(
        traceback.format_exception(type(exc), exc, exc.__traceback__)
    )
    if exc.__cause__ is not None and _depth < _MAX_CAUSE_DEPTH:
        expanded["cause"] = expand_error(exc.__cause__, _depth + 1)
    return expanded


def json_default(value: Any) -> Any:
    """``json.dumps`` hook used by every sink and the console."""
    if isinstance(value, BaseException):
        return expand_error(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    return safe_str(value)


def safe_str(value: Any) -> str:
    """Return ``str(value)``, or a placeholder when ``__str__`` fails."""
    outcome = capture(str, value)
    if isinstance(outcome, Err):
        return f"<unprintable {type(value).__name__}>"
    return outcome.value


def _message_from(first: Any) -> str:
    if isinstance(first, str):
        return first
    encoded = capture(json.dumps, first)
    if isinstance(encoded, Err):
        return safe_str(first)
    return encoded.value


def merge_fields(metadata: dict[str, Any], extra: Mapping[Any, Any]) -> None:
    """Copy ``extra`` into ``metadata`` with string keys, renaming reserved keys."""
    for key, value in extra.items():
        key = str(key)
        if key in RESERVED_KEYS:
            key = f"{key}_"
        metadata[key] = value


def _normalize_arg(arg: Any) -> Any:
    if isinstance(arg, BaseException):
        return expand_error(arg)
    return arg


def _normalize(
    args: Sequence[Any], fields: Mapping[str, Any] | None
) -> NormalizedRecord:
    message = ""
    metadata: dict[str, Any] = {}

    if args:
        first = args[0]
        if isinstance(first, BaseException):
            message = safe_str(first)
            metadata[ERROR_KEY] = expand_error(first)
        else:
            message = _message_from(first)

        rest = args[1:]
        if (
            len(rest) == 1
            and isinstance(rest[0], Mapping)
            and not isinstance(rest[0], BaseException)
        ):
            merge_fields(metadata, rest[0])
        elif rest:
            metadata[ADDITIONAL_ARGS_KEY] = [_normalize_arg(arg) for arg in rest]

    if fields:
        merge_fields(metadata, fields)
    return NormalizedRecord(message=message, metadata=metadata)


def normalize(
    args: Sequence[Any], fields: Mapping[str, Any] | None = None
) -> NormalizedRecord:
    """Normalize logging call arguments into a message and metadata.

    Never raises: if normalization fails, a coarser record is returned
    carrying the failure under ``normalizationError``.

    Args:
        args: Positional arguments of the logging call.
        fields: Keyword arguments of the logging call.

    Returns:
        NormalizedRecord for the call.
    """
    outcome = capture(_normalize, args, fields)
    if isinstance(outcome, Err):
        message = safe_str(args[0]) if args else ""
        return NormalizedRecord(
            message=message,
            metadata={"normalizationError": safe_str(outcome.error)},
        )
    return outcome.value
