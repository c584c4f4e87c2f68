"""Violations — verifies severity mapping, strike threshold and duration formatting."""

from datetime import datetime, timedelta, timezone

from hackshield.core.domain_types import ActivitySeverity, ViolationSeverity
from hackshield.core.violations import (
    activity_severity, format_duration, session_duration, should_disqualify,
    violation_severity,
)


def test_known_violation_severities():
    assert violation_severity("focus_loss") == ViolationSeverity.LOW
    assert violation_severity("tab_switch") == ViolationSeverity.MEDIUM
    assert violation_severity("navigation") == ViolationSeverity.HIGH


def test_unknown_violation_is_medium():
    assert violation_severity("copy_paste") == ViolationSeverity.MEDIUM


def test_activity_severity_mapping():
    assert activity_severity(ViolationSeverity.LOW) == ActivitySeverity.INFO
    assert activity_severity(ViolationSeverity.MEDIUM) == ActivitySeverity.WARNING
    assert activity_severity(ViolationSeverity.HIGH) == ActivitySeverity.CRITICAL


def test_should_disqualify_at_threshold():
    assert not should_disqualify(2, 3)
    assert should_disqualify(3, 3)
    assert should_disqualify(4, 3)
    assert not should_disqualify(10, 0)


def test_format_duration():
    assert format_duration(42) == "42s"
    assert format_duration(125) == "2m"
    assert format_duration(3 * 3600 + 15 * 60) == "3h 15m"
    assert format_duration(-5) == "0s"


def test_session_duration():
    now = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)
    assert session_duration(None, now) is None
    assert session_duration(now - timedelta(minutes=90), now) == "1h 30m"
