"""Registration Routes — joining a hackathon, pitch-deck round and open team invites.

Invariants:
    - Only participant accounts register; one registration per (hackathon, user)
    - Registration requires status ∈ {published, active}, an open window and free capacity
    - Unregistering is refused once the event is active, judging or completed
    - Pitch decks are .ppt/.pptx and at most max_ppt_bytes

Design Decisions:
    - The registration form is optional: a bare POST registers with defaults
    - Open invites live on the user row (looking_for_team + hackathon id):
      a user advertises for one hackathon at a time
"""

import asyncio
import logging
from pathlib import Path
from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hackshield.api.deps import (
    find_participant, get_current_user, get_hackathon_or_404, get_optional_user,
    get_owned_hackathon, require_organization, require_participant,
)
from hackshield.api.serializers import participant_dict, user_profile
from hackshield.config import get_settings
from hackshield.core.domain_types import (
    HackathonStatus, MatchingStatus, NotificationCategory, NotificationPriority,
    NotificationType, UserRole,
)
from hackshield.core.errors import (
    BusinessRuleError, ConflictError, ErrorContext, ResourceNotFoundError,
    ValidationFailedError,
)
from hackshield.core.hackathon_rules import (
    can_unregister, registration_deadline_passed, registration_problem,
)
from hackshield.core.time_utils import as_utc, utc_now
from hackshield.infrastructure.database import get_db
from hackshield.models.participant import Participant
from hackshield.models.user import User
from hackshield.schemas.registration import OpenInviteRequest, RegistrationForm, SelectionUpdate
from hackshield.services.notifier import create_notifications

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/hackathons", tags=["registration"])

PPT_EXTENSIONS = (".ppt", ".pptx")
LOOKING_FOR_TEAM_LIMIT = 50


async def _participant_count(hackathon_id: UUID, db: AsyncSession) -> int:
    return (await db.execute(
        select(func.count()).select_from(Participant).where(Participant.hackathon_id == hackathon_id),
    )).scalar_one()


@router.post("/{hackathon_id}/register", status_code=status.HTTP_201_CREATED)
async def register(
    hackathon_id: UUID,
    body: RegistrationForm | None = None,
    user: User = Depends(require_participant),
    db: AsyncSession = Depends(get_db),
):
    hackathon = await get_hackathon_or_404(hackathon_id, db)
    count = await _participant_count(hackathon_id, db)
    problem = registration_problem(
        HackathonStatus(hackathon.status), as_utc(hackathon.registration_end),
        utc_now(), count, hackathon.max_participants,
    )
    if problem:
        raise BusinessRuleError(problem, context=ErrorContext(hackathon_id=str(hackathon_id)))
    if await find_participant(hackathon_id, user.id, db) is not None:
        raise ConflictError("Already registered for this hackathon")

    form = body or RegistrationForm()
    participant = Participant(
        hackathon_id=hackathon_id,
        user_id=user.id,
        name=user.name,
        email=user.email,
        avatar=user.avatar,
        has_team=form.has_team,
        need_smart_matching=form.need_smart_matching,
        skills=form.skills or user.skills,
        preferred_team_size=form.preferred_team_size,
        matching_status=(
            MatchingStatus.PENDING.value if form.need_smart_matching
            else MatchingStatus.NOT_NEEDED.value
        ),
        experience=form.experience.value if form.experience else user.experience,
        availability=form.availability,
        preferred_role=form.preferred_role,
        team_name=form.team_name,
        team_size=form.team_size,
        team_leader=form.team_leader,
        team_members=form.team_members,
        project_idea=form.project_idea,
        previous_experience=form.previous_experience,
        special_requirements=form.special_requirements,
    )
    db.add(participant)
    user.hackathons_participated += 1
    await db.commit()
    await db.refresh(participant)

    logger.info("Participant registered", extra={"hackathon_id": hackathon_id, "user_id": user.id})
    return {
        "message": "Successfully registered for hackathon",
        "participant": participant_dict(participant),
        "total_participants": count + 1,
    }


@router.get("/{hackathon_id}/register")
async def registration_status(
    hackathon_id: UUID,
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    hackathon = await get_hackathon_or_404(hackathon_id, db)
    count = await _participant_count(hackathon_id, db)
    now = utc_now()
    is_registered = user is not None and await find_participant(hackathon_id, user.id, db) is not None
    problem = registration_problem(
        HackathonStatus(hackathon.status), as_utc(hackathon.registration_end),
        now, count, hackathon.max_participants,
    )
    return {
        "is_registered": is_registered,
        "total_participants": count,
        "max_participants": hackathon.max_participants,
        "can_register": problem is None and not is_registered,
        "registration_deadline_passed": registration_deadline_passed(
            as_utc(hackathon.registration_end), now,
        ),
    }


@router.delete("/{hackathon_id}/register")
async def unregister(
    hackathon_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    hackathon = await get_hackathon_or_404(hackathon_id, db)
    participant = await find_participant(hackathon_id, user.id, db)
    if participant is None:
        raise BusinessRuleError("Not registered for this hackathon", code="NOT_REGISTERED")
    if not can_unregister(HackathonStatus(hackathon.status)):
        raise BusinessRuleError(
            "Cannot unregister from a hackathon that has already started",
            context=ErrorContext(hackathon_id=str(hackathon_id)),
        )

    await db.delete(participant)
    user.hackathons_participated = max(0, user.hackathons_participated - 1)
    await db.commit()
    return {"message": "Successfully unregistered from hackathon"}


@router.post("/{hackathon_id}/ppt")
async def upload_ppt(
    hackathon_id: UUID,
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    settings = get_settings()
    await get_hackathon_or_404(hackathon_id, db)
    participant = await find_participant(hackathon_id, user.id, db)
    if participant is None:
        raise BusinessRuleError("Register for this hackathon before uploading", code="NOT_REGISTERED")

    suffix = Path(file.filename or "").suffix.lower()
    if suffix not in PPT_EXTENSIONS:
        raise ValidationFailedError("Only .ppt and .pptx files are accepted", field="file")
    content = await file.read(settings.max_ppt_bytes + 1)
    if len(content) > settings.max_ppt_bytes:
        raise ValidationFailedError(
            f"File exceeds maximum size of {settings.max_ppt_bytes // (1024 * 1024)}MB", field="file",
        )

    relative = Path("ppt") / str(hackathon_id) / f"{participant.id}{suffix}"
    target = Path(settings.upload_root) / relative
    target.parent.mkdir(parents=True, exist_ok=True)
    await asyncio.to_thread(target.write_bytes, content)

    participant.ppt_url = f"{settings.public_base_url}/uploads/{relative.as_posix()}"
    participant.ppt_uploaded_at = utc_now()
    await db.commit()

    logger.info("Pitch deck uploaded", extra={"hackathon_id": hackathon_id, "user_id": user.id})
    return {
        "message": "Presentation uploaded successfully",
        "ppt_url": participant.ppt_url,
        "uploaded_at": participant.ppt_uploaded_at.isoformat(),
    }


@router.patch("/{hackathon_id}/participants/{participant_id}/selection")
async def update_selection(
    hackathon_id: UUID,
    participant_id: UUID,
    body: SelectionUpdate,
    user: User = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    hackathon = await get_owned_hackathon(hackathon_id, user, db)
    participant = await db.get(Participant, participant_id)
    if participant is None or participant.hackathon_id != hackathon_id:
        raise ResourceNotFoundError("Participant", str(participant_id))

    participant.selection_round1_status = body.status.value
    participant.selection_feedback = body.feedback
    create_notifications(
        db, [participant.user_id],
        title=f"Selection update for {hackathon.title}",
        message=f"Your round 1 submission was {body.status.value}.",
        type=NotificationType.HACKATHON.value,
        category=NotificationCategory.HACKATHON_UPDATES.value,
        priority=NotificationPriority.HIGH.value,
        hackathon_id=hackathon_id,
        sender_id=user.id,
    )
    await db.commit()
    return {"message": "Selection status updated", "participant": participant_dict(participant)}


@router.get("/{hackathon_id}/participants")
async def list_participants(
    hackathon_id: UUID,
    looking_for_team: bool = False,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await get_hackathon_or_404(hackathon_id, db)
    if looking_for_team:
        users = (await db.execute(
            select(User)
            .where(
                User.role == UserRole.PARTICIPANT.value,
                User.looking_for_team.is_(True),
                User.looking_for_hackathon_id == hackathon_id,
            )
            .limit(LOOKING_FOR_TEAM_LIMIT),
        )).scalars().all()
        return {"participants": [user_profile(u) for u in users]}

    rows = (await db.execute(
        select(Participant)
        .where(Participant.hackathon_id == hackathon_id)
        .order_by(Participant.registered_at.asc()),
    )).scalars().all()
    return {"participants": [participant_dict(p) for p in rows]}


@router.get("/{hackathon_id}/open-invites")
async def list_open_invites(
    hackathon_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await get_hackathon_or_404(hackathon_id, db)
    users = (await db.execute(
        select(User).where(
            User.looking_for_team.is_(True),
            User.looking_for_hackathon_id == hackathon_id,
            User.id != user.id,
        ),
    )).scalars().all()
    return {"invites": [user_profile(u) for u in users]}


@router.post("/{hackathon_id}/open-invites")
async def create_open_invite(
    hackathon_id: UUID,
    body: OpenInviteRequest,
    user: User = Depends(require_participant),
    db: AsyncSession = Depends(get_db),
):
    await get_hackathon_or_404(hackathon_id, db)
    user.looking_for_team = True
    user.looking_for_hackathon_id = hackathon_id
    if body.bio is not None:
        user.bio = body.bio
    if body.skills is not None:
        user.skills = body.skills
    if body.experience is not None:
        user.experience = body.experience.value
    await db.commit()
    return {"message": "You are now visible to teams looking for members", "user": user_profile(user)}


@router.delete("/{hackathon_id}/open-invites")
async def delete_open_invite(
    hackathon_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if user.looking_for_hackathon_id == hackathon_id:
        user.looking_for_team = False
        user.looking_for_hackathon_id = None
        await db.commit()
    return {"message": "Open invite removed"}
