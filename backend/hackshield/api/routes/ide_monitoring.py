"""IDE Monitoring Routes — heartbeats, leave attempts, disqualification and the activity feed.

Invariants:
    - Leave attempts only grow; reaching max_leave_attempts disqualifies automatically
    - Disqualification closes the session and is logged as a critical violation
    - Activity feed returns the newest `limit` entries, oldest first
    - Only the owning organization sees the team monitor
    - Logged activities are attributed to the resolved access id, never to a
      team named in the payload

Design Decisions:
    - Heartbeats and leave reports authenticate by IDE access id, like the rest
      of the editor; a disqualified principal may still report (and is told so)
    - Teams count leave attempts in warning_strikes, participants in ide_attempted_leave
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from hackshield.api.deps import (
    IDEPrincipal, find_participant, get_current_user, get_hackathon_or_404,
    get_owned_hackathon, require_organization, resolve_ide_principal,
)
from hackshield.api.serializers import activity_dict
from hackshield.config import get_settings
from hackshield.core.domain_types import (
    ActivitySeverity, ActivityType, ParticipantStatus, TeamStatus,
)
from hackshield.core.errors import BusinessRuleError
from hackshield.core.time_utils import as_utc, isoformat, utc_now
from hackshield.core.violations import (
    activity_severity, session_duration, should_disqualify, violation_severity,
)
from hackshield.infrastructure.database import get_db
from hackshield.models.participant import Participant
from hackshield.models.team import Team
from hackshield.models.user import User
from hackshield.models.workspace import ActivityLog
from hackshield.schemas.ide import (
    ActivityCreate, DisqualifyRequest, IDEActivityReport, ViolationReport,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/hackathons", tags=["ide-monitoring"])

LEAVE_ATTEMPT = "leave_attempt"


def _log_activity(
    db: AsyncSession, hackathon_id: UUID, principal: IDEPrincipal,
    type: str, details: str, severity: str, extra: dict | None = None,
) -> ActivityLog:
    entry = ActivityLog(
        hackathon_id=hackathon_id,
        team_id=principal.team_key,
        team_name=principal.display_name,
        participant_name=principal.participant.name if principal.participant else None,
        type=type,
        details=details,
        extra=extra or {},
        severity=severity,
    )
    db.add(entry)
    return entry


def _is_disqualified(principal: IDEPrincipal) -> bool:
    if principal.team is not None:
        return principal.team.status == TeamStatus.DISQUALIFIED.value
    return principal.participant.ide_disqualified


def _disqualify(principal: IDEPrincipal, reason: str) -> None:
    if principal.team is not None:
        principal.team.status = TeamStatus.DISQUALIFIED.value
        principal.team.ide_session_active = False
        return
    participant = principal.participant
    participant.ide_disqualified = True
    participant.ide_disqualified_reason = reason
    participant.ide_session_active = False
    participant.status = ParticipantStatus.DISQUALIFIED.value


def _leader_summary(user: User | None) -> dict | None:
    return {"name": user.name, "email": user.email} if user else None


def _record_leave(principal: IDEPrincipal, reported: int | None) -> int:
    if principal.team is not None:
        current = principal.team.warning_strikes
        attempts = max(current, reported) if reported is not None else current + 1
        principal.team.warning_strikes = attempts
        return attempts
    current = principal.participant.ide_attempted_leave
    attempts = max(current, reported) if reported is not None else current + 1
    principal.participant.ide_attempted_leave = attempts
    return attempts


@router.post("/{hackathon_id}/ide-activity")
async def report_activity(
    hackathon_id: UUID,
    body: IDEActivityReport,
    db: AsyncSession = Depends(get_db),
):
    await get_hackathon_or_404(hackathon_id, db)
    principal = await resolve_ide_principal(hackathon_id, body.access_id, db, allow_disqualified=True)
    if _is_disqualified(principal):
        return {"success": False, "disqualified": True, "message": "You have been disqualified"}

    max_attempts = get_settings().max_leave_attempts
    owner = principal.team or principal.participant
    owner.ide_last_activity = utc_now()

    attempts = None
    disqualified = False
    if body.activity_type == LEAVE_ATTEMPT:
        attempts = _record_leave(principal, body.leave_attempts)
        if should_disqualify(attempts, max_attempts):
            reason = f"Exceeded maximum leave attempts ({max_attempts})"
            _disqualify(principal, reason)
            _log_activity(
                db, hackathon_id, principal, ActivityType.VIOLATION.value,
                f"Automatically disqualified: {reason}", ActivitySeverity.CRITICAL.value,
                {"violation_type": LEAVE_ATTEMPT, "attempts": attempts},
            )
            disqualified = True
            logger.warning(
                "Auto-disqualified after leave attempts",
                extra={"hackathon_id": hackathon_id, "access_id": body.access_id},
            )
        else:
            _log_activity(
                db, hackathon_id, principal, ActivityType.VIOLATION.value,
                body.details or f"Attempted to leave the IDE ({attempts}/{max_attempts})",
                ActivitySeverity.WARNING.value,
                {"violation_type": LEAVE_ATTEMPT, "attempts": attempts},
            )
    await db.commit()

    response = {"success": True, "disqualified": disqualified}
    if attempts is not None:
        response["attempted_leave"] = attempts
        response["remaining_attempts"] = max(0, max_attempts - attempts)
    return response


@router.post("/{hackathon_id}/ide-disqualify")
async def disqualify(
    hackathon_id: UUID,
    body: DisqualifyRequest,
    db: AsyncSession = Depends(get_db),
):
    await get_hackathon_or_404(hackathon_id, db)
    principal = await resolve_ide_principal(hackathon_id, body.access_id, db, allow_disqualified=True)
    if not _is_disqualified(principal):
        _disqualify(principal, body.reason)
        _log_activity(
            db, hackathon_id, principal, ActivityType.VIOLATION.value,
            f"Disqualified: {body.reason}", ActivitySeverity.CRITICAL.value,
        )
        await db.commit()
        logger.warning("Disqualified", extra={"hackathon_id": hackathon_id, "access_id": body.access_id})
    return {"success": True, "disqualified": True, "reason": body.reason}


@router.post("/violations", status_code=status.HTTP_201_CREATED)
async def report_violation(
    body: ViolationReport,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await get_hackathon_or_404(body.hackathon_id, db)
    participant = await find_participant(body.hackathon_id, user.id, db)
    if participant is None:
        raise BusinessRuleError("Not registered for this hackathon", code="NOT_REGISTERED")

    severity = violation_severity(body.violation_type)
    team_key = participant.ide_access_id or str(participant.id)
    entry = ActivityLog(
        hackathon_id=body.hackathon_id,
        team_id=team_key,
        team_name=participant.team_name,
        participant_name=participant.name,
        type=ActivityType.VIOLATION.value,
        details=body.details or body.violation_type.replace("_", " "),
        extra={"violation_type": body.violation_type, "violation_severity": severity.value},
        severity=activity_severity(severity).value,
    )
    db.add(entry)

    if participant.team_id:
        team = await db.get(Team, participant.team_id)
        if team is not None:
            team.violations = [*team.violations, {
                "type": body.violation_type,
                "severity": severity.value,
                "participant": participant.name,
                "timestamp": utc_now().isoformat(),
            }]
    await db.commit()
    return {"message": "Violation recorded", "severity": severity.value, "activity": activity_dict(entry)}


@router.get("/{hackathon_id}/monitor/activities")
async def list_activities(
    hackathon_id: UUID,
    team_id: str | None = None,
    type: ActivityType | None = None,
    limit: int = Query(50, ge=1, le=500),
    user: User = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    await get_owned_hackathon(hackathon_id, user, db)
    query = select(ActivityLog).where(ActivityLog.hackathon_id == hackathon_id)
    if team_id:
        query = query.where(ActivityLog.team_id == team_id)
    if type is not None:
        query = query.where(ActivityLog.type == type.value)
    rows = (await db.execute(
        query.order_by(ActivityLog.created_at.desc()).limit(limit),
    )).scalars().all()
    return {"activities": [activity_dict(a) for a in reversed(rows)]}


@router.post("/{hackathon_id}/monitor/activities", status_code=status.HTTP_201_CREATED)
async def log_activity(
    hackathon_id: UUID,
    body: ActivityCreate,
    db: AsyncSession = Depends(get_db),
):
    await get_hackathon_or_404(hackathon_id, db)
    principal = await resolve_ide_principal(hackathon_id, body.access_id, db)
    entry = _log_activity(
        db, hackathon_id, principal, body.type.value, body.details,
        body.severity.value, body.extra,
    )
    await db.commit()
    return {"success": True, "activity": activity_dict(entry)}


@router.get("/{hackathon_id}/monitor/teams")
async def monitor_teams(
    hackathon_id: UUID,
    user: User = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    await get_owned_hackathon(hackathon_id, user, db)
    now = utc_now()

    violation_counts = dict((await db.execute(
        select(ActivityLog.team_id, func.count())
        .where(
            ActivityLog.hackathon_id == hackathon_id,
            ActivityLog.type == ActivityType.VIOLATION.value,
        )
        .group_by(ActivityLog.team_id),
    )).all())

    participants = (await db.execute(
        select(Participant).where(
            Participant.hackathon_id == hackathon_id,
            or_(Participant.ide_access_id.is_not(None), Participant.ide_session_started.is_not(None)),
        ),
    )).scalars().all()
    teams = (await db.execute(
        select(Team).where(Team.hackathon_id == hackathon_id, Team.ide_username.is_not(None)),
    )).scalars().all()
    leaders = {}
    if teams:
        leader_rows = (await db.execute(
            select(User).where(User.id.in_([t.leader_id for t in teams])),
        )).scalars().all()
        leaders = {u.id: u for u in leader_rows}

    rows = []
    for p in participants:
        key = p.ide_access_id or str(p.id)
        rows.append({
            "access_id": p.ide_access_id,
            "team_name": p.team_name or p.name,
            "leader": {
                "name": (p.team_leader or {}).get("name") or p.name,
                "email": (p.team_leader or {}).get("email") or p.email,
            },
            "is_active": p.ide_session_active and not p.ide_disqualified,
            "last_activity": isoformat(p.ide_last_activity),
            "violations": violation_counts.get(key, 0),
            "strikes": p.ide_attempted_leave,
            "disqualified": p.ide_disqualified,
            "disqualified_reason": p.ide_disqualified_reason,
            "session_duration": session_duration(as_utc(p.ide_session_started), now),
        })
    for t in teams:
        disqualified = t.status == TeamStatus.DISQUALIFIED.value
        rows.append({
            "access_id": t.ide_username,
            "team_name": t.name,
            "leader": _leader_summary(leaders.get(t.leader_id)),
            "is_active": t.ide_session_active and not disqualified,
            "last_activity": isoformat(t.ide_last_activity),
            "violations": violation_counts.get(str(t.id), 0),
            "strikes": t.warning_strikes,
            "disqualified": disqualified,
            "disqualified_reason": None,
            "session_duration": session_duration(as_utc(t.ide_session_started), now),
        })

    return {
        "teams": rows,
        "totals": {
            "total": len(rows),
            "active": sum(1 for r in rows if r["is_active"]),
            "disqualified": sum(1 for r in rows if r["disqualified"]),
            "violations": sum(r["violations"] for r in rows),
        },
    }
