"""Tests for context binding."""

import io
from collections.abc import Callable

import pytest

from observepy.adapters.sinks.in_memory import InMemorySink
from observepy.core.models import Level
from observepy.logger import BoundLogger, Logger

pytestmark = pytest.mark.tier(1)


def _delivered(logger: Logger, sink: InMemorySink) -> list[dict]:
    logger.flush(1.0)
    return [record.metadata for record in sink.records]


class TestBind:
    """Tests for Logger.bind()."""

    def test_context_is_merged_into_every_call(self, logger: Logger, sink: InMemorySink) -> None:
        user_logger = logger.bind({"userId": "user_123", "requestId": "req_456"})
        user_logger.info("User profile updated")
        user_logger.debug("User details", {"email": "user@example.com"})

        first, second = _delivered(logger, sink)
        assert first["userId"] == "user_123"
        assert second["requestId"] == "req_456"
        assert second["email"] == "user@example.com"

    def test_returns_bound_logger(self, logger: Logger) -> None:
        assert isinstance(logger.bind(a=1), BoundLogger)

    def test_rightmost_binding_wins_and_parent_is_unaffected(
        self, logger: Logger, sink: InMemorySink
    ) -> None:
        logger.bind({"a": 1}).bind({"a": 2}).info("x")
        logger.info("x")

        bound, plain = _delivered(logger, sink)
        assert bound["a"] == 2
        assert "a" not in plain

    def test_composed_bindings_keep_earlier_keys(self, logger: Logger, sink: InMemorySink) -> None:
        logger.bind(a=1).bind(b=2).info("x")
        [metadata] = _delivered(logger, sink)
        assert (metadata["a"], metadata["b"]) == (1, 2)

    def test_per_call_metadata_wins_over_context(self, logger: Logger, sink: InMemorySink) -> None:
        logger.bind(source="context").info("x", {"source": "call"})
        logger.bind(source="context").info("y", source="kwarg")
        first, second = _delivered(logger, sink)
        assert first["source"] == "call"
        assert second["source"] == "kwarg"

    def test_context_survives_multiple_trailing_arguments(
        self, logger: Logger, sink: InMemorySink
    ) -> None:
        logger.bind(requestId="r1").info("values", 1, 2)
        [metadata] = _delivered(logger, sink)
        assert metadata["requestId"] == "r1"
        assert metadata["additionalArgs"] == [1, 2]

    def test_binding_does_not_mutate_the_intermediate_logger(self, logger: Logger) -> None:
        first = logger.bind(a=1)
        first.bind(a=2, b=3)
        assert dict(first.context) == {"a": 1}
        assert dict(logger.context) == {}

    def test_context_is_read_only(self, logger: Logger) -> None:
        bound = logger.bind(a=1)
        with pytest.raises(TypeError):
            bound.context["a"] = 2  # type: ignore[index]

    def test_caller_dict_is_copied(self, logger: Logger, sink: InMemorySink) -> None:
        context = {"a": 1}
        bound = logger.bind(context)
        context["a"] = 99
        bound.info("x")
        [metadata] = _delivered(logger, sink)
        assert metadata["a"] == 1


class TestBoundIdentity:
    """Tests for identity fields supplied in a bound context."""

    def test_identity_override_applies_to_bound_and_descendants(
        self, logger: Logger, sink: InMemorySink
    ) -> None:
        user_service = logger.bind(service="user-service")
        user_service.info("a")
        user_service.bind(requestId="r1").info("b")
        logger.info("c")

        bound, descendant, parent = _delivered(logger, sink)
        assert bound["service"] == "user-service"
        assert descendant["service"] == "user-service"
        assert parent["service"] == "checkout"
        assert user_service.identity.service == "user-service"
        assert logger.identity.service == "checkout"

    def test_metadata_identity_matches_logger_identity(
        self, logger: Logger, sink: InMemorySink
    ) -> None:
        """A None or non-string identity value in the context cannot leak into metadata."""
        cleared = logger.bind(service=None)
        numbered = logger.bind(version=2)
        cleared.info("a")
        numbered.info("b")

        first, second = _delivered(logger, sink)
        assert first["service"] == cleared.identity.service == "checkout"
        assert second["version"] == numbered.identity.version == "2"

    def test_per_call_fields_still_override_bound_identity(
        self, logger: Logger, sink: InMemorySink
    ) -> None:
        logger.bind(service="user-service").info("x", service="explicit")
        [metadata] = _delivered(logger, sink)
        assert metadata["service"] == "explicit"

    def test_identity_override_shows_in_console_header(
        self, logger: Logger, stdout: io.StringIO
    ) -> None:
        logger.bind(environment="staging").info("hello")
        assert "[checkout/staging@1.0.0] INFO: hello" in stdout.getvalue()


class TestBoundLevels:
    """Tests for thresholds on bound loggers."""

    def test_bound_logger_starts_from_parent_threshold(
        self, make_logger: Callable[..., Logger]
    ) -> None:
        logger = make_logger(min_level="warn")
        assert logger.bind(a=1).min_level is Level.WARN

    def test_thresholds_are_independent(self, logger: Logger, sink: InMemorySink) -> None:
        bound = logger.bind(a=1)
        bound.set_min_level("error")
        logger.debug("parent still logs")
        bound.info("bound suppressed")
        assert logger.min_level is Level.DEBUG
        logger.flush(1.0)
        assert [r.message for r in sink.records] == ["parent still logs"]

    def test_bound_logger_shares_the_root_sink(self, logger: Logger, sink: InMemorySink) -> None:
        bound = logger.bind(a=1)
        bound.info("from bound")
        assert bound.flush(1.0) is logger.flush(1.0)
        assert [r.message for r in sink.records] == ["from bound"]
