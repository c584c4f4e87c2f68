"""IDE Access Routes — credential issue, verification and per-participant access schedules.

Invariants:
    - A participant's credentials are generated once and re-read afterwards
    - verify-access / ide-auth accept participant access_id+password or team
      username+passkey; anything else → 401
    - Disqualified principals → 403 regardless of credentials
    - The IDE opens only between start_date and end_date
    - A successful login marks the session active, stamps last activity and
      keeps the first session start

Design Decisions:
    - verify-access reports a closed event window as 403, ide-auth as 400: the
      two endpoints back different client screens with different handling
    - IDE logins are credential-based, not JWT-based: the editor runs without
      the portal session
"""

import logging
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hackshield.api.deps import (
    find_participant, get_current_user, get_hackathon_or_404, get_owned_hackathon,
    require_organization,
)
from hackshield.core.credentials import (
    credentials_match, generate_access_id, generate_access_password,
)
from hackshield.core.domain_types import IDEAccessStatus, TeamStatus, UserRole
from hackshield.core.errors import (
    AuthenticationError, BusinessRuleError, ConflictError, ErrorContext,
    PermissionDeniedError, ResourceNotFoundError, ValidationFailedError,
)
from hackshield.core.hackathon_rules import event_window_problem
from hackshield.core.ide_schedule import ScheduleStatus, evaluate_schedule
from hackshield.core.time_utils import as_utc, isoformat, utc_now
from hackshield.infrastructure.database import get_db
from hackshield.infrastructure.mailer import Mailer, get_mailer
from hackshield.models.hackathon import Hackathon
from hackshield.models.participant import Participant
from hackshield.models.team import Team
from hackshield.models.user import User
from hackshield.schemas.ide import GenerateAccessRequest, IDEAuthRequest, SendCredentialsRequest
from hackshield.schemas.registration import IDEScheduleUpdate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/hackathons", tags=["ide-access"])

_ACCESS_ID_ATTEMPTS = 5

_WINDOW_MESSAGES = {
    "not_started": ("Hackathon has not started yet", "HACKATHON_NOT_STARTED"),
    "ended": ("Hackathon has ended", "HACKATHON_ENDED"),
}


def _credentials_dict(p: Participant) -> dict:
    return {
        "participant_id": str(p.id),
        "name": p.name,
        "email": p.email,
        "access_id": p.ide_access_id,
        "password": p.ide_access_password,
        "generated_at": isoformat(p.ide_access_generated_at),
        "session_active": p.ide_session_active,
        "last_activity": isoformat(p.ide_last_activity),
        "attempted_leave": p.ide_attempted_leave,
        "disqualified": p.ide_disqualified,
    }


async def _unique_access_id(db: AsyncSession) -> str:
    for _ in range(_ACCESS_ID_ATTEMPTS):
        access_id = generate_access_id()
        taken = (await db.execute(
            select(Participant.id).where(Participant.ide_access_id == access_id),
        )).first()
        if taken is None:
            return access_id
    raise ConflictError("Could not allocate a unique access id")


@router.post("/{hackathon_id}/generate-access")
async def generate_access(
    hackathon_id: UUID,
    body: GenerateAccessRequest | None = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if user.role == UserRole.ORGANIZATION.value:
        await get_owned_hackathon(hackathon_id, user, db)
        if body is None or body.participant_user_id is None:
            raise ValidationFailedError("participant_user_id is required", field="participant_user_id")
        target_user_id = body.participant_user_id
    else:
        await get_hackathon_or_404(hackathon_id, db)
        target_user_id = user.id

    participant = await find_participant(hackathon_id, target_user_id, db)
    if participant is None:
        raise BusinessRuleError("Not registered for this hackathon", code="NOT_REGISTERED")

    if participant.ide_access_id:
        return {"already_generated": True, **_credentials_dict(participant)}

    participant.ide_access_id = await _unique_access_id(db)
    participant.ide_access_password = generate_access_password()
    participant.ide_access_generated_at = utc_now()
    await db.commit()

    logger.info(
        "IDE credentials generated",
        extra={"hackathon_id": hackathon_id, "access_id": participant.ide_access_id},
    )
    return {"already_generated": False, **_credentials_dict(participant)}


@router.get("/{hackathon_id}/generate-access")
async def list_access(
    hackathon_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if user.role == UserRole.ORGANIZATION.value:
        await get_owned_hackathon(hackathon_id, user, db)
        rows = (await db.execute(
            select(Participant)
            .where(Participant.hackathon_id == hackathon_id, Participant.ide_access_id.is_not(None))
            .order_by(Participant.ide_access_generated_at.asc()),
        )).scalars().all()
        return {"participants": [_credentials_dict(p) for p in rows], "total": len(rows)}

    participant = await find_participant(hackathon_id, user.id, db)
    if participant is None or not participant.ide_access_id:
        return {"has_access": False}
    return {"has_access": True, **_credentials_dict(participant)}


async def _authenticate(
    hackathon_id: UUID, body: IDEAuthRequest, db: AsyncSession,
) -> Participant | Team:
    if body.access_id and body.password:
        participant = (await db.execute(
            select(Participant).where(
                Participant.hackathon_id == hackathon_id,
                Participant.ide_access_id == body.access_id,
            ),
        )).scalar_one_or_none()
        if participant and credentials_match(participant.ide_access_password, body.password):
            if participant.ide_disqualified:
                raise PermissionDeniedError(
                    "You have been disqualified from this hackathon", code="DISQUALIFIED",
                    context=ErrorContext(access_id=body.access_id),
                )
            return participant

    if body.username and body.passkey:
        team = (await db.execute(
            select(Team).where(Team.hackathon_id == hackathon_id, Team.ide_username == body.username),
        )).scalar_one_or_none()
        if team and credentials_match(team.ide_passkey, body.passkey):
            if team.status == TeamStatus.DISQUALIFIED.value:
                raise PermissionDeniedError(
                    "This team has been disqualified", code="DISQUALIFIED",
                    context=ErrorContext(team_id=str(team.id)),
                )
            if team.ide_access_status == IDEAccessStatus.REVOKED.value:
                raise PermissionDeniedError("IDE access has been revoked for this team")
            return team

    raise AuthenticationError("Invalid access credentials")


def _open_session(principal: Participant | Team) -> None:
    now = utc_now()
    principal.ide_session_active = True
    principal.ide_last_activity = now
    if principal.ide_session_started is None:
        principal.ide_session_started = now
    if isinstance(principal, Team):
        principal.leader_activated = True
        if principal.activated_at is None:
            principal.activated_at = now


def _session_payload(hackathon: Hackathon, principal: Participant | Team) -> dict:
    if isinstance(principal, Team):
        identity = {
            "type": "team",
            "access_id": principal.ide_username,
            "team_id": str(principal.id),
            "team_name": principal.name,
            "main_branch": principal.main_branch,
        }
    else:
        identity = {
            "type": "participant",
            "access_id": principal.ide_access_id,
            "participant_id": str(principal.id),
            "name": principal.name,
            "team_name": principal.team_name,
        }
    return {
        "success": True,
        **identity,
        "hackathon": {
            "id": str(hackathon.id),
            "title": hackathon.title,
            "start_date": isoformat(hackathon.start_date),
            "end_date": isoformat(hackathon.end_date),
            "ai_assistance_level": hackathon.ai_assistance_level,
            "allowed_technologies": hackathon.allowed_technologies,
            "prohibited_technologies": hackathon.prohibited_technologies,
        },
    }


async def _login(hackathon_id: UUID, body: IDEAuthRequest, db: AsyncSession, window_error) -> dict:
    hackathon = await get_hackathon_or_404(hackathon_id, db)
    principal = await _authenticate(hackathon_id, body, db)
    problem = event_window_problem(
        as_utc(hackathon.start_date), as_utc(hackathon.end_date), utc_now(),
    )
    if problem:
        message, code = _WINDOW_MESSAGES[problem]
        raise window_error(message, code=code, context=ErrorContext(hackathon_id=str(hackathon_id)))

    _open_session(principal)
    await db.commit()
    logger.info("IDE session opened", extra={"hackathon_id": hackathon_id, "access_id": body.access_id or body.username})
    return _session_payload(hackathon, principal)


@router.post("/{hackathon_id}/verify-access")
async def verify_access(
    hackathon_id: UUID, body: IDEAuthRequest, db: AsyncSession = Depends(get_db),
):
    return await _login(hackathon_id, body, db, PermissionDeniedError)


@router.post("/{hackathon_id}/ide-auth")
async def ide_auth(
    hackathon_id: UUID, body: IDEAuthRequest, db: AsyncSession = Depends(get_db),
):
    return await _login(hackathon_id, body, db, BusinessRuleError)


@router.post("/{hackathon_id}/send-credentials")
async def send_credentials(
    hackathon_id: UUID,
    body: SendCredentialsRequest,
    background_tasks: BackgroundTasks,
    user: User = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    hackathon = await get_owned_hackathon(hackathon_id, user, db)
    participant = await db.get(Participant, body.participant_id)
    if participant is None or participant.hackathon_id != hackathon_id:
        raise ResourceNotFoundError("Participant", str(body.participant_id))
    if not participant.ide_access_id:
        raise BusinessRuleError(
            "IDE credentials have not been generated for this participant",
            code="CREDENTIALS_NOT_GENERATED",
        )

    leader_email = (participant.team_leader or {}).get("email") or participant.email
    recipients = list(dict.fromkeys([leader_email, *body.team_member_emails]))
    body_text = (
        f"IDE access for {hackathon.title}\n\n"
        f"Access ID: {participant.ide_access_id}\n"
        f"Password: {participant.ide_access_password}\n\n"
        f"The IDE opens at {isoformat(hackathon.start_date)} and closes at "
        f"{isoformat(hackathon.end_date)}."
    )
    background_tasks.add_task(mailer.send, recipients, f"IDE credentials for {hackathon.title}", body_text)

    logger.info(
        f"IDE credentials queued for {len(recipients)} recipient(s)",
        extra={"hackathon_id": hackathon_id, "access_id": participant.ide_access_id},
    )
    return {"message": "Credentials sent", "recipients": recipients}


@router.get("/{hackathon_id}/ide-schedule")
async def ide_schedule_status(
    hackathon_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await get_hackathon_or_404(hackathon_id, db)
    participant = await find_participant(hackathon_id, user.id, db)
    if participant is None:
        return ScheduleStatus(False, False, "You are not registered for this hackathon").to_dict()
    return evaluate_schedule(participant.ide_schedule, utc_now()).to_dict()


@router.put("/{hackathon_id}/participants/{participant_id}/ide-schedule")
async def update_ide_schedule(
    hackathon_id: UUID,
    participant_id: UUID,
    body: IDEScheduleUpdate,
    user: User = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    await get_owned_hackathon(hackathon_id, user, db)
    participant = await db.get(Participant, participant_id)
    if participant is None or participant.hackathon_id != hackathon_id:
        raise ResourceNotFoundError("Participant", str(participant_id))

    participant.ide_schedule = body.model_dump()
    await db.commit()
    return {
        "message": "IDE schedule updated",
        "schedule": participant.ide_schedule,
        "status": evaluate_schedule(participant.ide_schedule, utc_now()).to_dict(),
    }
