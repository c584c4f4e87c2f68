"""IDE Schedule — evaluates when an approved participant may open the IDE.

Invariants:
    - Not approved → never active, no next window
    - Explicit access_windows take precedence over allowed_days + start/end time
    - Fallback window is 09:00–17:00 on allowed_days (all days when none given)
    - next_window searches at most 7 days ahead
    - Times are "HH:MM" wall-clock values compared in UTC

Design Decisions:
    - Schedule arrives as a plain dict (JSON column) so organizers can extend it
      without a migration; unknown keys are ignored
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

DAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
DEFAULT_START = "09:00"
DEFAULT_END = "17:00"
LOOKAHEAD_DAYS = 7


@dataclass
class ScheduleStatus:
    is_active: bool
    is_approved: bool
    message: str
    current_window: dict | None = None
    next_window: dict | None = None

    def to_dict(self) -> dict:
        return {
            "is_active": self.is_active,
            "is_approved": self.is_approved,
            "current_window": self.current_window,
            "next_window": self.next_window,
            "message": self.message,
        }


def _minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def _windows_for_day(schedule: dict, day: str) -> list[dict]:
    explicit = schedule.get("access_windows") or []
    if explicit:
        return [w for w in explicit if (w.get("day") or "").lower() == day]
    allowed = [d.lower() for d in schedule.get("allowed_days") or DAY_NAMES]
    if day not in allowed:
        return []
    return [{
        "day": day,
        "start_time": schedule.get("start_time") or DEFAULT_START,
        "end_time": schedule.get("end_time") or DEFAULT_END,
    }]


def evaluate_schedule(schedule: dict | None, now: datetime) -> ScheduleStatus:
    schedule = schedule or {}
    if not schedule.get("organization_approved"):
        return ScheduleStatus(
            False, False, "IDE access is pending organization approval",
        )

    today = DAY_NAMES[now.weekday()]
    minute_now = now.hour * 60 + now.minute
    for window in _windows_for_day(schedule, today):
        if _minutes(window["start_time"]) <= minute_now < _minutes(window["end_time"]):
            return ScheduleStatus(
                True, True,
                f"IDE is open until {window['end_time']}",
                current_window=window,
            )

    upcoming = _next_window(schedule, now)
    if upcoming is None:
        return ScheduleStatus(False, True, "No IDE access windows scheduled in the next 7 days")
    return ScheduleStatus(
        False, True,
        f"IDE opens {upcoming['day']} at {upcoming['start_time']}",
        next_window=upcoming,
    )


def _next_window(schedule: dict, now: datetime) -> dict | None:
    minute_now = now.hour * 60 + now.minute
    for offset in range(LOOKAHEAD_DAYS + 1):
        day_date = (now + timedelta(days=offset)).date()
        day = DAY_NAMES[day_date.weekday()]
        windows = sorted(
            _windows_for_day(schedule, day), key=lambda w: _minutes(w["start_time"]),
        )
        for window in windows:
            if offset == 0 and _minutes(window["start_time"]) <= minute_now:
                continue
            return {**window, "date": day_date.isoformat()}
    return None
