"""Explicit success/failure values for operations that must not raise.

The logging pipeline never lets an internal failure reach application
code. Instead of bare ``try/except`` blocks scattered through the
dispatcher, each fallible step returns an :data:`Outcome` which the
caller inspects and turns into a fallback or a diagnostic line.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying the exception that caused it."""

    error: Exception

    @property
    def ok(self) -> bool:
        return False


Outcome = Ok[T] | Err


def capture(func: Callable[..., T], *args: Any, **kwargs: Any) -> "Ok[T] | Err":
    """Call ``func`` and wrap its result or exception in an Outcome.

    Args:
        func: Callable to invoke.
        *args: Positional arguments for ``func``.
        **kwargs: Keyword arguments for ``func``.

    Returns:
        Ok with the return value, or Err with the raised exception.
    """
    try:
        return Ok(func(*args, **kwargs))
    except Exception as exc:
        return Err(exc)


async def acapture(awaitable: Awaitable[T]) -> "Ok[T] | Err":
    """Await ``awaitable`` and wrap its result or exception in an Outcome.

    Cancellation is not captured and propagates to the caller.
    """
    try:
        return Ok(await awaitable)
    except Exception as exc:
        return Err(exc)
