"""Time helpers — verifies UTC normalization of naive and aware datetimes."""

from datetime import datetime, timedelta, timezone

from hackshield.core.time_utils import as_utc, isoformat, utc_now


def test_utc_now_is_aware():
    assert utc_now().tzinfo is timezone.utc


def test_naive_values_are_assumed_utc():
    assert as_utc(datetime(2026, 5, 1, 12, 0)) == datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_aware_values_are_converted():
    plus_two = timezone(timedelta(hours=2))
    assert as_utc(datetime(2026, 5, 1, 14, 0, tzinfo=plus_two)).hour == 12


def test_isoformat_handles_none():
    assert isoformat(None) is None
    assert isoformat(datetime(2026, 5, 1, 12, 0)) == "2026-05-01T12:00:00+00:00"
