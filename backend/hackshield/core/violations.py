"""Violations — anti-cheat severity mapping, strike counting and session durations.

Invariants:
    - Unknown violation types are medium severity
    - Violation severity maps onto activity-log severity: low → info,
      medium → warning, high → critical
    - A participant is disqualified once leave attempts reach the configured maximum
    - Durations render as "Xh Ym", "Ym" or "Xs"
"""

from datetime import datetime

from hackshield.core.domain_types import ActivitySeverity, ViolationSeverity

VIOLATION_SEVERITY: dict[str, ViolationSeverity] = {
    "focus_loss": ViolationSeverity.LOW,
    "tab_switch": ViolationSeverity.MEDIUM,
    "navigation": ViolationSeverity.HIGH,
    "back_button": ViolationSeverity.HIGH,
    "suspicious_activity": ViolationSeverity.HIGH,
}

_ACTIVITY_SEVERITY = {
    ViolationSeverity.LOW: ActivitySeverity.INFO,
    ViolationSeverity.MEDIUM: ActivitySeverity.WARNING,
    ViolationSeverity.HIGH: ActivitySeverity.CRITICAL,
}


def violation_severity(violation_type: str) -> ViolationSeverity:
    return VIOLATION_SEVERITY.get(violation_type, ViolationSeverity.MEDIUM)


def activity_severity(severity: ViolationSeverity) -> ActivitySeverity:
    return _ACTIVITY_SEVERITY[severity]


def should_disqualify(leave_attempts: int, max_attempts: int) -> bool:
    return max_attempts > 0 and leave_attempts >= max_attempts


def format_duration(seconds: float) -> str:
    seconds = max(0, int(seconds))
    hours, rem = divmod(seconds, 3600)
    minutes = rem // 60
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m"
    return f"{seconds}s"


def session_duration(started: datetime | None, now: datetime) -> str | None:
    if not started:
        return None
    return format_duration((now - started).total_seconds())
