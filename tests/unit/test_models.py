"""Tests for core models, outcomes and the NDJSON encoder."""

import json
from dataclasses import FrozenInstanceError

import pytest

from observepy.core.encoding.ndjson import encode_record
from observepy.core.models import Level, LoggerConfig, ServiceIdentity
from observepy.core.outcome import Err, Ok, acapture, capture

pytestmark = [pytest.mark.core, pytest.mark.tier(1)]


class TestLevel:
    """Tests for Level ordering and parsing."""

    def test_lower_value_is_more_severe(self) -> None:
        order = [
            Level.ERROR,
            Level.WARN,
            Level.INFO,
            Level.HTTP,
            Level.VERBOSE,
            Level.DEBUG,
            Level.SILLY,
        ]
        assert sorted(order) == order

    @pytest.mark.parametrize(
        ("name", "expected"),
        [("info", Level.INFO), ("WARN", Level.WARN), ("warning", Level.WARN), (" Debug ", Level.DEBUG)],
    )
    def test_parse_names(self, name: str, expected: Level) -> None:
        assert Level.parse(name) is expected

    def test_parse_level_passthrough(self) -> None:
        assert Level.parse(Level.HTTP) is Level.HTTP

    def test_parse_unknown_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown log level"):
            Level.parse("loud")

    def test_threshold_allows_more_severe(self) -> None:
        assert Level.WARN.allows(Level.ERROR)
        assert Level.WARN.allows(Level.WARN)
        assert not Level.WARN.allows(Level.DEBUG)

    def test_label(self) -> None:
        assert Level.VERBOSE.label == "verbose"


class TestServiceIdentity:
    """Tests for ServiceIdentity."""

    def test_defaults(self) -> None:
        assert ServiceIdentity().as_dict() == {
            "service": "application",
            "environment": "development",
            "version": "1.0.0",
        }

    def test_is_immutable(self) -> None:
        identity = ServiceIdentity()
        with pytest.raises(FrozenInstanceError):
            identity.service = "other"  # type: ignore[misc]

    def test_merged_with_applies_only_present_fields(self) -> None:
        identity = ServiceIdentity(service="api", environment="prod", version="2.0")
        merged = identity.merged_with({"service": "user-service", "userId": 1})
        assert merged == ServiceIdentity(service="user-service", environment="prod", version="2.0")
        assert identity.service == "api"

    def test_config_derive_without_identity_fields_is_identity(self) -> None:
        config = LoggerConfig()
        assert config.derive({"requestId": "r1"}) is config


class TestOutcome:
    """Tests for Ok/Err capture helpers."""

    def test_capture_ok(self) -> None:
        outcome = capture(int, "12")
        assert outcome == Ok(12)
        assert outcome.ok

    def test_capture_err(self) -> None:
        outcome = capture(int, "twelve")
        assert isinstance(outcome, Err)
        assert isinstance(outcome.error, ValueError)
        assert not outcome.ok

    async def test_acapture(self) -> None:
        async def fails() -> None:
            raise RuntimeError("down")

        async def succeeds() -> str:
            return "up"

        assert await acapture(succeeds()) == Ok("up")
        failed = await acapture(fails())
        assert isinstance(failed, Err)
        assert str(failed.error) == "down"


class TestNdjsonEncoder:
    """Tests for NDJSON encoding of records."""

    @pytest.mark.encoding
    def test_encode_single_record(self) -> None:
        """A record encodes to one JSON object with its metadata nested."""
        line = encode_record("info", "Application started", {"timestamp": "t", "service": "api"})
        parsed = json.loads(line)
        assert parsed == {
            "timestamp": "t",
            "level": "info",
            "message": "Application started",
            "metadata": {"timestamp": "t", "service": "api"},
        }

    @pytest.mark.encoding
    def test_encode_non_json_values(self) -> None:
        """Exceptions inside metadata are expanded instead of failing."""
        line = encode_record("error", "failed", {"error": ValueError("boom")})
        assert json.loads(line)["metadata"]["error"]["message"] == "boom"
