"""Notification Rules — verifies preference gating, quiet hours and reminder windows.

Tests:
    - should_send requires category, category channel and global channel
    - Critical email needs a verified address
    - Quiet hours wrap midnight and honor the configured timezone
    - due_reminders fires at 24h / 1h before start and 24h / 6h / 1h before end
"""

from datetime import datetime, timedelta, timezone

from hackshield.core.domain_types import NotificationPriority
from hackshield.core.notification_rules import (
    deep_merge, default_preferences, due_reminders, in_quiet_hours, should_send,
    upcoming_summary,
)

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_default_preferences_enable_all_categories():
    prefs = default_preferences("a@x.dev")
    assert prefs["channels"]["email"]["address"] == "a@x.dev"
    assert all(c["enabled"] for c in prefs["categories"].values())
    assert prefs["categories"]["security_alerts"]["priority"] == "critical"


def test_deep_merge_updates_nested_flag_only():
    prefs = default_preferences("a@x.dev")
    merged = deep_merge(prefs, {"channels": {"push": {"enabled": False}}})
    assert merged["channels"]["push"]["enabled"] is False
    assert merged["channels"]["email"]["enabled"] is True
    assert prefs["channels"]["push"]["enabled"] is True


def test_should_send_respects_category_channels():
    prefs = default_preferences("a@x.dev")
    assert should_send(prefs, "hackathon_updates", "in_app", "medium")
    assert not should_send(prefs, "social_interactions", "email", "low")
    assert not should_send(prefs, "unknown_category", "in_app", "low")


def test_should_send_respects_disabled_channel_and_category():
    prefs = deep_merge(default_preferences("a@x.dev"), {
        "channels": {"email": {"enabled": False}},
        "categories": {"team_invitations": {"enabled": False}},
    })
    assert not should_send(prefs, "hackathon_updates", "email", "medium")
    assert not should_send(prefs, "team_invitations", "in_app", "high")


def test_critical_email_requires_verified_address():
    prefs = default_preferences("a@x.dev")
    assert not should_send(prefs, "system_announcements", "email", NotificationPriority.CRITICAL.value)
    verified = deep_merge(prefs, {"channels": {"email": {"verified": True}}})
    assert should_send(verified, "system_announcements", "email", NotificationPriority.CRITICAL.value)


def _quiet(start: str, end: str, tz: str = "UTC") -> dict:
    return {"schedule": {"quiet_hours": {"enabled": True, "start": start, "end": end, "timezone": tz}}}


def test_quiet_hours_disabled_by_default():
    assert not in_quiet_hours(default_preferences("a@x.dev"), NOW)


def test_overnight_quiet_hours_wrap_midnight():
    prefs = _quiet("22:00", "08:00")
    assert in_quiet_hours(prefs, NOW.replace(hour=23))
    assert in_quiet_hours(prefs, NOW.replace(hour=3))
    assert not in_quiet_hours(prefs, NOW)


def test_same_day_quiet_hours():
    prefs = _quiet("11:00", "13:00")
    assert in_quiet_hours(prefs, NOW)
    assert not in_quiet_hours(prefs, NOW.replace(hour=14))


def test_quiet_hours_use_local_timezone():
    # 12:00 UTC is 21:00 in Tokyo
    assert in_quiet_hours(_quiet("20:00", "22:00", "Asia/Tokyo"), NOW)


def test_unknown_timezone_falls_back_to_utc():
    assert in_quiet_hours(_quiet("11:00", "13:00", "Mars/Olympus"), NOW)


def test_reminder_24h_before_start():
    reminders = due_reminders(NOW + timedelta(hours=24), NOW + timedelta(hours=72), NOW)
    assert [r.label for r in reminders] == ["starting_in_24h"]
    assert reminders[0].title("Build Week") == "Build Week starts in 24 hours!"


def test_reminder_1h_before_start():
    reminders = due_reminders(NOW + timedelta(hours=1), NOW + timedelta(hours=48), NOW)
    assert [r.label for r in reminders] == ["starting_in_1h"]


def test_end_reminders():
    start = NOW - timedelta(hours=10)
    assert [r.label for r in due_reminders(start, NOW + timedelta(hours=24), NOW)] == ["ending_in_24h"]
    six = due_reminders(start, NOW + timedelta(hours=6), NOW)
    assert [r.label for r in six] == ["ending_in_6h"]
    assert six[0].priority == NotificationPriority.CRITICAL
    assert [r.label for r in due_reminders(start, NOW + timedelta(hours=1), NOW)] == ["ending_in_1h"]


def test_no_reminder_outside_windows():
    assert due_reminders(NOW + timedelta(hours=10), NOW + timedelta(hours=40), NOW) == []


def test_upcoming_summary():
    before = upcoming_summary(NOW + timedelta(hours=30), NOW + timedelta(hours=60), NOW)
    assert before == {"hours_until_start": 30.0, "will_send_reminder": False}
    during = upcoming_summary(NOW - timedelta(hours=1), NOW + timedelta(hours=5), NOW)
    assert during == {"hours_until_end": 5.0, "will_send_reminder": True}
    assert upcoming_summary(NOW - timedelta(hours=5), NOW - timedelta(hours=1), NOW) is None
