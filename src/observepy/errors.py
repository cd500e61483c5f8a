"""Exceptions raised inside observepy.

None of these reach application code through a leveled call, a flush or
``create_logger``; they travel as :class:`~observepy.core.outcome.Err`
values and end up on the diagnostic channel.
"""


class ObservepyError(Exception):
    """Base class for observepy errors."""


class SinkConfigurationError(ObservepyError):
    """A sink could not be constructed from the given credentials."""


class DeliveryError(ObservepyError):
    """A sink failed to deliver a record."""
