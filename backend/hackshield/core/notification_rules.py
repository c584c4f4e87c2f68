"""Notification Rules — preference defaults, delivery gating, quiet hours and reminder windows.

Invariants:
    - A notification goes out on a channel only if its category is enabled, the
      category lists the channel, and the channel is globally enabled
    - Critical email/SMS require a verified address
    - Quiet hours support overnight ranges (start > end wraps midnight)
    - Each hackathon yields at most one start reminder and one end reminder per run

Design Decisions:
    - Preferences are one nested dict (JSON column); deep_merge applies partial
      updates so clients can PATCH a single flag
"""

import copy
from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from hackshield.core.domain_types import NotificationPriority

_CATEGORY_DEFAULTS = {
    "hackathon_updates": (["email", "in_app"], "medium"),
    "team_invitations": (["email", "push", "in_app"], "high"),
    "project_feedback": (["email", "in_app"], "medium"),
    "marketplace_activity": (["email", "push", "in_app"], "high"),
    "social_interactions": (["in_app"], "low"),
    "system_announcements": (["email", "in_app"], "medium"),
    "security_alerts": (["email", "sms", "push"], "critical"),
}


def default_preferences(email: str) -> dict:
    return {
        "channels": {
            "email": {"enabled": True, "address": email, "verified": False},
            "sms": {"enabled": False, "phone": None, "verified": False},
            "push": {"enabled": True},
            "in_app": {"enabled": True},
        },
        "categories": {
            name: {"enabled": True, "channels": list(channels), "priority": priority}
            for name, (channels, priority) in _CATEGORY_DEFAULTS.items()
        },
        "schedule": {
            "quiet_hours": {
                "enabled": False, "start": "22:00", "end": "08:00", "timezone": "UTC",
            },
            "digest": {
                "enabled": False, "frequency": "weekly", "time": "09:00", "timezone": "UTC",
            },
            "immediate": {"enabled": True, "priorities": ["high", "critical"]},
        },
    }


def deep_merge(base: dict, updates: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def should_send(preferences: dict, category: str, channel: str, priority: str) -> bool:
    category_prefs = (preferences.get("categories") or {}).get(category)
    if not category_prefs or not category_prefs.get("enabled"):
        return False
    if channel not in (category_prefs.get("channels") or []):
        return False
    channel_prefs = (preferences.get("channels") or {}).get(channel)
    if not channel_prefs or not channel_prefs.get("enabled"):
        return False
    if (
        channel in ("sms", "email")
        and priority == NotificationPriority.CRITICAL.value
        and not channel_prefs.get("verified")
    ):
        return False
    return True


def _minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def in_quiet_hours(preferences: dict, now: datetime) -> bool:
    quiet = ((preferences.get("schedule") or {}).get("quiet_hours")) or {}
    if not quiet.get("enabled"):
        return False
    try:
        local = now.astimezone(ZoneInfo(quiet.get("timezone") or "UTC"))
    except ZoneInfoNotFoundError:
        local = now
    current = local.hour * 60 + local.minute
    start = _minutes(quiet.get("start") or "22:00")
    end = _minutes(quiet.get("end") or "08:00")
    if start > end:
        return current >= start or current <= end
    return start <= current <= end


# ─── Reminders ───────────────────────────────────────────────────

@dataclass(frozen=True)
class Reminder:
    kind: str           # starting_soon | deadline_approaching | ending_soon
    label: str          # starting_in_24h, starting_in_1h, ending_in_24h, ...
    hours: int
    priority: NotificationPriority

    def title(self, hackathon_title: str) -> str:
        if self.kind == "starting_soon":
            return f"{hackathon_title} starts in {self.hours} hours!"
        if self.kind == "deadline_approaching":
            return f"{hackathon_title} deadline in {self.hours} hours"
        return f"{hackathon_title} ends in {self.hours} hours!"

    def message(self, hackathon_title: str) -> str:
        if self.kind == "starting_soon":
            return (
                f'Get ready! The hackathon "{hackathon_title}" begins in {self.hours} '
                "hours. Make sure your team is ready to start coding!"
            )
        if self.kind == "deadline_approaching":
            return (
                f'Reminder: the submission deadline for "{hackathon_title}" is in '
                f"{self.hours} hours. Submit your project before time runs out!"
            )
        return (
            f'Final reminder: "{hackathon_title}" ends in {self.hours} hours. '
            "Submit your project now if you haven't already!"
        )


def _hours_until(target: datetime, now: datetime) -> float:
    return (target - now).total_seconds() / 3600


def due_reminders(start: datetime, end: datetime, now: datetime) -> list[Reminder]:
    due: list[Reminder] = []
    to_start = _hours_until(start, now)
    to_end = _hours_until(end, now)

    if 23 < to_start <= 25:
        due.append(Reminder("starting_soon", "starting_in_24h", 24, NotificationPriority.HIGH))
    elif 0.5 < to_start <= 1.5:
        due.append(Reminder("starting_soon", "starting_in_1h", 1, NotificationPriority.HIGH))

    if 23 < to_end <= 25:
        due.append(Reminder(
            "deadline_approaching", "ending_in_24h", 24, NotificationPriority.HIGH,
        ))
    elif 5.5 < to_end <= 6.5:
        due.append(Reminder("ending_soon", "ending_in_6h", 6, NotificationPriority.CRITICAL))
    elif 0.5 < to_end <= 1.5:
        due.append(Reminder("ending_soon", "ending_in_1h", 1, NotificationPriority.CRITICAL))
    return due


def upcoming_summary(start: datetime, end: datetime, now: datetime) -> dict | None:
    """Hours to the next milestone, or None once the hackathon has ended."""
    to_start = _hours_until(start, now)
    to_end = _hours_until(end, now)
    if to_start > 0:
        return {
            "hours_until_start": round(to_start, 1),
            "will_send_reminder": to_start <= 25,
        }
    if to_end > 0:
        return {
            "hours_until_end": round(to_end, 1),
            "will_send_reminder": to_end <= 25,
        }
    return None
