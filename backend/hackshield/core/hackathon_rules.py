"""Hackathon Rules — pure checks for the hackathon lifecycle and registration window.

Invariants:
    - total prize pool is always the sum of prize amounts (never user-supplied)
    - Publishing requires every field in PUBLISH_REQUIRED_FIELDS, a future start,
      registration closing no later than start, and at least one prize
    - Registration is open only while status ∈ {published, active} and now ≤ registration_end
    - Unregistering is refused once the event is active, judging or completed

Design Decisions:
    - Functions receive plain values (not ORM objects) so they are testable without a DB
    - Problems are returned as lists of messages; the shell decides which error to raise
"""

from datetime import datetime

from hackshield.core.domain_types import HackathonStatus

DEFAULT_DURATION_HOURS = 24

PUBLISH_REQUIRED_FIELDS = (
    "title", "tagline", "description", "theme",
    "start_date", "end_date", "registration_start", "registration_end", "mode",
)

OPEN_FOR_REGISTRATION = frozenset({HackathonStatus.PUBLISHED, HackathonStatus.ACTIVE})
LOCKED_FOR_UNREGISTER = frozenset({
    HackathonStatus.ACTIVE, HackathonStatus.JUDGING, HackathonStatus.COMPLETED,
})


def normalize_prizes(prizes: list[dict] | None) -> list[dict]:
    """Coerce prize dicts to {place, amount, description}; accepts 'position' for place."""
    normalized = []
    for prize in prizes or []:
        place = prize.get("place") or prize.get("position") or ""
        normalized.append({
            "place": str(place),
            "amount": float(prize.get("amount") or 0),
            "description": prize.get("description") or "",
        })
    return normalized


def total_prize_pool(prizes: list[dict] | None) -> float:
    return float(sum(float(p.get("amount") or 0) for p in prizes or []))


def duration_hours(start: datetime | None, end: datetime | None) -> int:
    """Rounded hours between start and end; 24 when either is missing."""
    if not start or not end:
        return DEFAULT_DURATION_HOURS
    return round((end - start).total_seconds() / 3600)


def publish_problems(fields: dict, prizes: list[dict], now: datetime) -> tuple[list[str], list[str]]:
    """Return (missing_fields, violations) that block publishing. Both empty → publishable."""
    missing = [name for name in PUBLISH_REQUIRED_FIELDS if not fields.get(name)]
    violations: list[str] = []
    start = fields.get("start_date")
    reg_end = fields.get("registration_end")
    if start and start <= now:
        violations.append("Start date must be in the future")
    if start and reg_end and reg_end > start:
        violations.append("Registration must end before the hackathon starts")
    if not prizes:
        violations.append("At least one prize is required")
    return missing, violations


def registration_deadline_passed(registration_end: datetime | None, now: datetime) -> bool:
    return registration_end is not None and now > registration_end


def registration_problem(
    status: HackathonStatus,
    registration_end: datetime | None,
    now: datetime,
    participant_count: int,
    max_participants: int | None,
) -> str | None:
    """First reason registration is refused, or None if a new participant may register."""
    if status not in OPEN_FOR_REGISTRATION:
        return "Registration is not open for this hackathon"
    if registration_deadline_passed(registration_end, now):
        return "Registration deadline has passed"
    if max_participants and participant_count >= max_participants:
        return "Hackathon has reached maximum capacity"
    return None


def can_unregister(status: HackathonStatus) -> bool:
    return status not in LOCKED_FOR_UNREGISTER


def event_window_problem(start: datetime, end: datetime, now: datetime) -> str | None:
    """'not_started' / 'ended' when the IDE must stay closed, else None."""
    if now < start:
        return "not_started"
    if now > end:
        return "ended"
    return None
