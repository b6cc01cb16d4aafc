"""Unit tests for timestamp utilities."""

from datetime import datetime, timedelta, timezone

from app.utils.timestamps import ensure_utc, format_timestamp, utc_now


class TestUtcNow:
    """Tests for utc_now."""

    def test_is_aware_utc(self):
        now = utc_now()

        assert now.tzinfo == timezone.utc
        assert abs((datetime.now(timezone.utc) - now).total_seconds()) < 5


class TestEnsureUtc:
    """Tests for ensure_utc."""

    def test_none_passthrough(self):
        assert ensure_utc(None) is None

    def test_naive_treated_as_utc(self):
        result = ensure_utc(datetime(2025, 2, 12, 10, 0))

        assert result == datetime(2025, 2, 12, 10, 0, tzinfo=timezone.utc)

    def test_other_zone_converted(self):
        pacific = timezone(timedelta(hours=-8))

        result = ensure_utc(datetime(2025, 2, 12, 2, 0, tzinfo=pacific))

        assert result == datetime(2025, 2, 12, 10, 0, tzinfo=timezone.utc)
        assert result.tzinfo == timezone.utc


class TestFormatTimestamp:
    """Tests for format_timestamp."""

    def test_seconds_precision_with_z(self):
        dt = datetime(2025, 11, 4, 12, 0, 0, 123456, tzinfo=timezone.utc)

        assert format_timestamp(dt) == "2025-11-04T12:00:00Z"
        assert format_timestamp(dt, include_microseconds=True) == "2025-11-04T12:00:00.123456Z"

    def test_converts_to_utc(self):
        eastern = timezone(timedelta(hours=-5))

        assert format_timestamp(datetime(2025, 11, 4, 7, 0, tzinfo=eastern)) == "2025-11-04T12:00:00Z"
