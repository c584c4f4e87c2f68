"""API Dependencies — authentication and shared lookups used by every route module.

Invariants:
    - get_current_user always reloads the user row (token role is not trusted)
    - get_*_or_404 raise ResourceNotFoundError, never return None
    - Ownership checks raise PermissionDeniedError (403), distinct from missing (404)
    - resolve_ide_principal rejects unknown access ids (404) and disqualified ones (403)

Design Decisions:
    - HTTPBearer(auto_error=False): missing token maps to our 401 envelope instead
      of FastAPI's default 403
    - Lookups shared here instead of per-route copies: hackathon/team/participant
      loading is identical across resources
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hackshield.core.domain_types import TeamStatus, UserRole
from hackshield.core.errors import (
    AuthenticationError, ConflictError, ErrorContext, PermissionDeniedError,
    ResourceNotFoundError,
)
from hackshield.core.credentials import generate_invite_code, with_suffix
from hackshield.infrastructure.database import get_db
from hackshield.models.hackathon import Hackathon
from hackshield.models.participant import Participant
from hackshield.models.team import Team, TeamMember
from hackshield.models.user import User
from hackshield.services.auth import decode_access_token

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


# ─── Authentication ──────────────────────────────────────────────

async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    if credentials is None:
        return None
    payload = decode_access_token(credentials.credentials)
    try:
        user_id = UUID(payload["sub"])
    except ValueError:
        raise AuthenticationError("Invalid token")
    user = await db.get(User, user_id)
    if user is None:
        raise AuthenticationError("User no longer exists")
    return user


async def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    if user is None:
        raise AuthenticationError()
    return user


async def require_organization(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.ORGANIZATION.value:
        raise PermissionDeniedError("Only organizations can perform this action")
    return user


async def require_participant(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.PARTICIPANT.value:
        raise PermissionDeniedError("Only participants can perform this action")
    return user


# ─── Lookups ─────────────────────────────────────────────────────

async def get_hackathon_or_404(hackathon_id: UUID, db: AsyncSession) -> Hackathon:
    hackathon = await db.get(Hackathon, hackathon_id)
    if hackathon is None:
        raise ResourceNotFoundError("Hackathon", str(hackathon_id))
    return hackathon


async def get_owned_hackathon(hackathon_id: UUID, user: User, db: AsyncSession) -> Hackathon:
    hackathon = await get_hackathon_or_404(hackathon_id, db)
    if hackathon.organization_id != user.id:
        raise PermissionDeniedError(
            "Only the organizing account can manage this hackathon",
            context=ErrorContext(hackathon_id=str(hackathon_id)),
        )
    return hackathon


async def get_team_or_404(team_id: UUID, db: AsyncSession) -> Team:
    team = await db.get(Team, team_id)
    if team is None:
        raise ResourceNotFoundError("Team", str(team_id))
    return team


async def find_participant(
    hackathon_id: UUID, user_id: UUID, db: AsyncSession,
) -> Participant | None:
    result = await db.execute(
        select(Participant).where(
            Participant.hackathon_id == hackathon_id,
            Participant.user_id == user_id,
        ),
    )
    return result.scalar_one_or_none()


async def find_user_team(hackathon_id: UUID, user_id: UUID, db: AsyncSession) -> Team | None:
    result = await db.execute(
        select(Team)
        .join(TeamMember, TeamMember.team_id == Team.id)
        .where(Team.hackathon_id == hackathon_id, TeamMember.user_id == user_id),
    )
    return result.scalars().first()


async def allocate_invite_code(db: AsyncSession, attempts: int = 5) -> str:
    for _ in range(attempts):
        code = generate_invite_code()
        taken = (await db.execute(select(Team.id).where(Team.invite_code == code))).first()
        if taken is None:
            return code
    raise ConflictError("Could not allocate a unique invite code")


async def allocate_ide_username(base: str, db: AsyncSession, attempts: int = 5) -> str:
    """Return `base` when free, otherwise `base` with a random suffix."""
    candidate = base
    for _ in range(attempts):
        taken = (await db.execute(select(Team.id).where(Team.ide_username == candidate))).first()
        if taken is None:
            return candidate
        candidate = with_suffix(base)
    raise ConflictError("Could not allocate a unique IDE username")


# ─── IDE principals ──────────────────────────────────────────────

@dataclass
class IDEPrincipal:
    """Whoever an IDE access id belongs to: one participant or one team."""
    access_id: str
    participant: Participant | None = None
    team: Team | None = None

    @property
    def display_name(self) -> str:
        if self.team is not None:
            return self.team.name
        return self.participant.team_name or self.participant.name

    @property
    def team_key(self) -> str:
        """Identifier used for activity logs and monitoring rows."""
        return str(self.team.id) if self.team is not None else self.access_id


async def resolve_ide_principal(
    hackathon_id: UUID, access_id: str, db: AsyncSession, allow_disqualified: bool = False,
) -> IDEPrincipal:
    participant = (await db.execute(
        select(Participant).where(
            Participant.hackathon_id == hackathon_id,
            Participant.ide_access_id == access_id,
        ),
    )).scalar_one_or_none()
    if participant is not None:
        if participant.ide_disqualified and not allow_disqualified:
            raise PermissionDeniedError(
                "You have been disqualified from this hackathon",
                code="DISQUALIFIED",
                context=ErrorContext(hackathon_id=str(hackathon_id), access_id=access_id),
            )
        return IDEPrincipal(access_id, participant=participant)

    team = (await db.execute(
        select(Team).where(Team.hackathon_id == hackathon_id, Team.ide_username == access_id),
    )).scalar_one_or_none()
    if team is not None:
        if team.status == TeamStatus.DISQUALIFIED.value and not allow_disqualified:
            raise PermissionDeniedError(
                "This team has been disqualified",
                code="DISQUALIFIED",
                context=ErrorContext(hackathon_id=str(hackathon_id), access_id=access_id),
            )
        return IDEPrincipal(access_id, team=team)

    raise ResourceNotFoundError("IDE access", access_id)
