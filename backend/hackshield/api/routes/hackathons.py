"""Hackathon Routes — listing, creation, ownership-gated edits and the status lifecycle.

Invariants:
    - Only organization accounts create hackathons; only the owner edits them
    - total_prize_pool and duration are always derived, never taken from the payload
    - Only draft hackathons can be deleted
    - Updates never set a required column to null (400)
    - Publishing is refused while required fields are missing or dates are inconsistent

Design Decisions:
    - New hackathons are published immediately: organizers create events that
      are ready for registration, drafts come from status changes
    - Listing defaults to {published, active}; organization_owned=true shows
      every status for the caller's own events
"""

import logging
import math
from enum import Enum
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hackshield.api.deps import (
    get_hackathon_or_404, get_optional_user, get_owned_hackathon, require_organization,
)
from hackshield.api.serializers import hackathon_dict
from hackshield.core.domain_types import AIAssistanceLevel, HackathonStatus
from hackshield.core.errors import (
    AuthenticationError, BusinessRuleError, ErrorContext, ValidationFailedError,
)
from hackshield.core.hackathon_rules import (
    PUBLISH_REQUIRED_FIELDS, duration_hours, normalize_prizes, publish_problems,
    total_prize_pool,
)
from hackshield.core.time_utils import as_utc, utc_now
from hackshield.infrastructure.database import get_db
from hackshield.models.hackathon import Hackathon
from hackshield.models.participant import Participant
from hackshield.models.team import Team, TeamMember
from hackshield.models.user import User
from hackshield.schemas.hackathon import (
    HackathonCreate, HackathonUpdate, SecuritySettings, StatusUpdate,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/hackathons", tags=["hackathons"])

_DEFAULT_LISTED = (HackathonStatus.PUBLISHED.value, HackathonStatus.ACTIVE.value)

_SECURITY_FLAGS = {
    "neural_fairness": "enable_neural_fairness",
    "blockchain": "enable_blockchain",
    "geolocation": "enable_geolocation",
    "identity_check": "enable_identity_check",
    "screenshot_detection": "enable_screenshot_detection",
}

_DATE_FIELDS = ("start_date", "end_date", "registration_start", "registration_end")


def _security_columns(security: SecuritySettings) -> dict:
    return {column: getattr(security, flag) for flag, column in _SECURITY_FLAGS.items()}


@router.get("")
async def list_hackathons(
    status_filter: str | None = Query(None, alias="status"),
    theme: str | None = None,
    mode: str | None = None,
    organization_owned: bool = False,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user: User | None = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    conditions = []
    if organization_owned:
        if user is None:
            raise AuthenticationError()
        conditions.append(Hackathon.organization_id == user.id)
        if status_filter:
            conditions.append(Hackathon.status.in_(status_filter.split(",")))
    else:
        statuses = status_filter.split(",") if status_filter else list(_DEFAULT_LISTED)
        conditions.append(Hackathon.status.in_(statuses))
    if theme:
        conditions.append(Hackathon.theme == theme)
    if mode:
        conditions.append(Hackathon.mode == mode)

    total = (await db.execute(
        select(func.count()).select_from(Hackathon).where(*conditions),
    )).scalar_one()
    rows = (await db.execute(
        select(Hackathon)
        .where(*conditions)
        .order_by(Hackathon.start_date.asc())
        .offset((page - 1) * limit)
        .limit(limit),
    )).scalars().all()

    return {
        "hackathons": [hackathon_dict(h, summary=True) for h in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit),
        },
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_hackathon(
    body: HackathonCreate,
    user: User = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    now = utc_now()
    start = as_utc(body.start_date)
    end = as_utc(body.end_date)
    prizes = normalize_prizes([p.model_dump() for p in body.prizes or []])
    security = body.security_settings or SecuritySettings()
    min_team_size = body.min_team_size or 1

    if body.ai_assistance_level is not None:
        ai_level = body.ai_assistance_level.value
    elif security.ai_proctoring:
        ai_level = AIAssistanceLevel.STRICT.value
    else:
        ai_level = AIAssistanceLevel.MODERATE.value

    hackathon = Hackathon(
        title=body.title,
        tagline=body.tagline,
        description=body.description,
        long_description=body.long_description,
        theme=body.theme,
        cover_image=body.cover_image,
        organization_id=user.id,
        organization_name=user.org_name or user.name,
        organization_logo=user.org_logo,
        start_date=start,
        end_date=end,
        registration_start=as_utc(body.registration_start) or now,
        registration_end=as_utc(body.registration_end or body.registration_deadline) or start,
        duration=duration_hours(start, end),
        mode=body.mode.value,
        venue=body.venue,
        geofence_radius=body.geofence_radius if body.geofence_radius is not None else 500,
        min_team_size=min_team_size,
        max_team_size=body.max_team_size or 4,
        solo_allowed=min_team_size == 1,
        allowed_technologies=body.allowed_technologies or [],
        prohibited_technologies=body.prohibited_technologies or [],
        external_libraries_allowed=(
            body.external_libraries_allowed if body.external_libraries_allowed is not None else True
        ),
        pre_built_code_allowed=bool(body.pre_built_code_allowed),
        ai_assistance_level=ai_level,
        prizes=prizes,
        total_prize_pool=total_prize_pool(prizes),
        judging_criteria=body.judging_criteria or [],
        status=HackathonStatus.PUBLISHED.value,
        max_teams=body.max_teams,
        max_participants=body.max_participants,
        public_leaderboard=body.public_leaderboard if body.public_leaderboard is not None else True,
        sponsors=body.sponsors or [],
        rules=body.rules,
        code_of_conduct=body.code_of_conduct,
        **_security_columns(security),
    )
    db.add(hackathon)
    await db.commit()
    await db.refresh(hackathon)

    logger.info("Hackathon created", extra={"hackathon_id": hackathon.id, "user_id": user.id})
    return {"message": "Hackathon created successfully", "hackathon": hackathon_dict(hackathon)}


@router.get("/mine")
async def my_hackathons(
    user: User = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    rows = (await db.execute(
        select(Hackathon)
        .where(Hackathon.organization_id == user.id)
        .order_by(Hackathon.created_at.desc()),
    )).scalars().all()
    return {"hackathons": [hackathon_dict(h) for h in rows]}


@router.get("/{hackathon_id}")
async def get_hackathon(hackathon_id: UUID, db: AsyncSession = Depends(get_db)):
    hackathon = await get_hackathon_or_404(hackathon_id, db)
    hackathon.views += 1
    await db.commit()
    await db.refresh(hackathon)
    return {"hackathon": hackathon_dict(hackathon)}


@router.put("/{hackathon_id}")
async def update_hackathon(
    hackathon_id: UUID,
    body: HackathonUpdate,
    user: User = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    hackathon = await get_owned_hackathon(hackathon_id, user, db)
    changes = body.model_dump(exclude_unset=True)
    for field, value in changes.items():
        column = Hackathon.__table__.c.get(field)
        if value is None and column is not None and not column.nullable:
            raise ValidationFailedError(f"{field} cannot be null", field=field)

    prizes = changes.pop("prizes", None)
    if prizes is not None:
        hackathon.prizes = normalize_prizes(prizes)
        hackathon.total_prize_pool = total_prize_pool(hackathon.prizes)

    security = changes.pop("security_settings", None)
    if security is not None:
        settings = SecuritySettings(**security)
        for column, value in _security_columns(settings).items():
            setattr(hackathon, column, value)

    for field, value in changes.items():
        if isinstance(value, Enum):
            value = value.value
        if field in _DATE_FIELDS:
            value = as_utc(value)
        setattr(hackathon, field, value)

    start, end = as_utc(hackathon.start_date), as_utc(hackathon.end_date)
    if end <= start:
        raise ValidationFailedError("end_date must be after start_date", field="end_date")
    hackathon.duration = duration_hours(start, end)
    if "min_team_size" in changes:
        hackathon.solo_allowed = hackathon.min_team_size == 1

    await db.commit()
    await db.refresh(hackathon)
    return {"message": "Hackathon updated", "hackathon": hackathon_dict(hackathon)}


@router.delete("/{hackathon_id}")
async def delete_hackathon(
    hackathon_id: UUID,
    user: User = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    hackathon = await get_owned_hackathon(hackathon_id, user, db)
    if hackathon.status != HackathonStatus.DRAFT.value:
        raise BusinessRuleError(
            "Only draft hackathons can be deleted",
            context=ErrorContext(hackathon_id=str(hackathon_id)),
        )

    team_ids = select(Team.id).where(Team.hackathon_id == hackathon_id)
    await db.execute(delete(Participant).where(Participant.hackathon_id == hackathon_id))
    await db.execute(delete(TeamMember).where(TeamMember.team_id.in_(team_ids)))
    await db.execute(delete(Team).where(Team.hackathon_id == hackathon_id))
    await db.delete(hackathon)
    await db.commit()

    logger.info("Hackathon deleted", extra={"hackathon_id": hackathon_id})
    return {"message": "Hackathon deleted"}


@router.patch("/{hackathon_id}/status")
async def update_status(
    hackathon_id: UUID,
    body: StatusUpdate,
    user: User = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    hackathon = await get_owned_hackathon(hackathon_id, user, db)

    if body.status == HackathonStatus.PUBLISHED:
        fields = {name: getattr(hackathon, name) for name in PUBLISH_REQUIRED_FIELDS}
        for name in _DATE_FIELDS:
            fields[name] = as_utc(fields[name])
        missing, violations = publish_problems(fields, hackathon.prizes, utc_now())
        if missing or violations:
            message = "Missing required fields" if missing else violations[0]
            raise ValidationFailedError(
                message,
                context=ErrorContext(
                    hackathon_id=str(hackathon_id),
                    details={"missing_fields": missing, "violations": violations},
                ),
            )

    previous = hackathon.status
    hackathon.status = body.status.value
    await db.commit()
    await db.refresh(hackathon)

    logger.info(
        f"Hackathon status {previous} -> {hackathon.status}",
        extra={"hackathon_id": hackathon_id},
    )
    return {"message": f"Hackathon status updated to {hackathon.status}", "hackathon": hackathon_dict(hackathon)}
