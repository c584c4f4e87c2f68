"""Team Routes — team lifecycle, invites, projects and organizer-issued IDE credentials.

Invariants:
    - A user belongs to at most one team per hackathon
    - The leader cannot leave; only the leader renames, invites, edits the project or deletes
    - Team size never exceeds max_team_members
    - IDE credentials are issued once per team (select-team or leader request)

Design Decisions:
    - Two routers: /teams for the team resource itself, /hackathons/{id}/... for
      views scoped to one event (caller's team, organizer overview, credentials)
    - Credential emails go out through BackgroundTasks: the response never waits on SMTP
    - JSON list columns are reassigned, never mutated in place (no mutation tracking)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hackshield.api.deps import (
    allocate_ide_username, allocate_invite_code, find_participant, find_user_team,
    get_current_user, get_hackathon_or_404, get_owned_hackathon, get_team_or_404,
    require_organization,
)
from hackshield.api.serializers import team_dict
from hackshield.config import get_settings
from hackshield.core.branch_ops import MAIN_BRANCH
from hackshield.core.credentials import (
    generate_access_password, generate_passkey,
    leader_ide_username, team_ide_username,
)
from hackshield.core.domain_types import (
    BranchType, HackathonStatus, IDEAccessStatus, NotificationCategory,
    NotificationPriority, NotificationType, TeamRole, TeamStatus,
)
from hackshield.core.errors import (
    BusinessRuleError, ConflictError, ErrorContext, PermissionDeniedError,
    ResourceNotFoundError,
)
from hackshield.core.hackathon_rules import registration_problem
from hackshield.core.time_utils import as_utc, isoformat, utc_now
from hackshield.core.user_levels import TEAM_CREATED_XP, award_xp
from hackshield.infrastructure.database import get_db
from hackshield.infrastructure.mailer import Mailer, get_mailer
from hackshield.models.team import Team, TeamMember
from hackshield.models.user import User
from hackshield.models.workspace import Branch
from hackshield.schemas.team import (
    ProjectUpdate, SelectTeamRequest, TeamCreate, TeamInvite, TeamJoin, TeamRename,
)
from hackshield.services.notifier import create_notifications

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/teams", tags=["teams"])
hackathon_router = APIRouter(prefix="/api/v1/hackathons", tags=["teams"])

def _require_leader(team: Team, user: User) -> None:
    if team.leader_id != user.id:
        raise PermissionDeniedError(
            "Only the team leader can perform this action",
            context=ErrorContext(team_id=str(team.id)),
        )


async def _link_participant(team: Team, user_id: UUID, db: AsyncSession, linked: bool) -> None:
    participant = await find_participant(team.hackathon_id, user_id, db)
    if participant is not None:
        participant.team_id = team.id if linked else None


async def _member_users(team: Team, db: AsyncSession) -> list[User]:
    ids = [m.user_id for m in team.members]
    if not ids:
        return []
    return list((await db.execute(select(User).where(User.id.in_(ids)))).scalars().all())


def _credentials_email(team: Team, hackathon_title: str, passkey: str) -> str:
    return (
        f"Your team '{team.name}' has been selected for {hackathon_title}.\n\n"
        f"IDE username: {team.ide_username}\n"
        f"IDE passkey: {passkey}\n"
        f"Main branch: {team.main_branch}\n\n"
        "Keep these credentials private. Leaving the IDE during the event is monitored."
    )


# ─── /teams ──────────────────────────────────────────────────────

@router.get("")
async def list_teams(
    hackathon: UUID | None = None,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    query = select(Team).order_by(Team.created_at.asc())
    if hackathon is not None:
        query = query.where(Team.hackathon_id == hackathon)
    teams = (await db.execute(query)).scalars().all()
    return {"teams": [team_dict(t, user.id) for t in teams]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_team(
    body: TeamCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    hackathon = await get_hackathon_or_404(body.hackathon_id, db)
    problem = registration_problem(
        HackathonStatus(hackathon.status), as_utc(hackathon.registration_end), utc_now(), 0, None,
    )
    if problem:
        raise BusinessRuleError(problem, context=ErrorContext(hackathon_id=str(hackathon.id)))
    if await find_user_team(hackathon.id, user.id, db) is not None:
        raise ConflictError("You are already in a team for this hackathon")

    team = Team(
        name=body.name,
        hackathon_id=hackathon.id,
        leader_id=user.id,
        invite_code=await allocate_invite_code(db),
        members=[TeamMember(user_id=user.id, role=TeamRole.LEADER.value, skills=user.skills)],
    )
    db.add(team)
    await db.flush()
    await _link_participant(team, user.id, db, linked=True)
    user.xp, user.level = award_xp(user.xp, TEAM_CREATED_XP)
    user.hackathons_participated += 1
    await db.commit()

    logger.info("Team created", extra={"team_id": team.id, "hackathon_id": hackathon.id})
    return {"message": "Team created successfully", "team": team_dict(team, user.id)}


@router.get("/mine")
async def my_teams(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    teams = (await db.execute(
        select(Team)
        .join(TeamMember, TeamMember.team_id == Team.id)
        .where(TeamMember.user_id == user.id)
        .order_by(Team.created_at.desc()),
    )).scalars().all()
    return {"teams": [team_dict(t, user.id) for t in teams]}


@router.post("/join")
async def join_team(
    body: TeamJoin,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    code = body.invite_code.strip().upper()
    team = (await db.execute(select(Team).where(Team.invite_code == code))).scalar_one_or_none()
    if team is None:
        raise ResourceNotFoundError("Team invite", code)
    if team.has_member(user.id):
        raise ConflictError("You are already a member of this team")
    if await find_user_team(team.hackathon_id, user.id, db) is not None:
        raise ConflictError("You are already in a team for this hackathon")
    if team.is_locked:
        raise BusinessRuleError("This team is locked", code="TEAM_LOCKED")
    if len(team.members) >= get_settings().max_team_members:
        raise BusinessRuleError("Team is full", code="TEAM_FULL")

    team.members.append(TeamMember(user_id=user.id, role=TeamRole.MEMBER.value, skills=user.skills))
    team.invited_emails = [e for e in team.invited_emails if e != user.email]
    await _link_participant(team, user.id, db, linked=True)
    await db.commit()

    logger.info("Joined team", extra={"team_id": team.id, "user_id": user.id})
    return {"message": "Joined team successfully", "team": team_dict(team, user.id)}


@router.get("/{team_id}")
async def get_team(
    team_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"team": team_dict(await get_team_or_404(team_id, db), user.id)}


@router.put("/{team_id}")
async def rename_team(
    team_id: UUID,
    body: TeamRename,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    team = await get_team_or_404(team_id, db)
    _require_leader(team, user)
    team.name = body.name.strip()
    await db.commit()
    return {"message": "Team updated", "team": team_dict(team, user.id)}


@router.delete("/{team_id}")
async def delete_team(
    team_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    team = await get_team_or_404(team_id, db)
    _require_leader(team, user)
    for member in team.members:
        await _link_participant(team, member.user_id, db, linked=False)
    await db.delete(team)
    await db.commit()

    logger.info("Team deleted", extra={"team_id": team_id})
    return {"message": "Team deleted"}


@router.post("/{team_id}/leave")
async def leave_team(
    team_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    team = await get_team_or_404(team_id, db)
    member = next((m for m in team.members if m.user_id == user.id), None)
    if member is None:
        raise BusinessRuleError("You are not a member of this team", code="NOT_A_MEMBER")
    if team.leader_id == user.id:
        raise BusinessRuleError(
            "The team leader cannot leave the team; delete it instead", code="LEADER_CANNOT_LEAVE",
        )

    team.members.remove(member)
    await _link_participant(team, user.id, db, linked=False)
    await db.commit()
    return {"message": "Left team successfully"}


@router.post("/{team_id}/invite")
async def invite_member(
    team_id: UUID,
    body: TeamInvite,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    team = await get_team_or_404(team_id, db)
    _require_leader(team, user)
    if body.email not in team.invited_emails:
        team.invited_emails = [*team.invited_emails, body.email]

    invitee = (await db.execute(select(User).where(User.email == body.email))).scalar_one_or_none()
    if invitee is not None:
        create_notifications(
            db, [invitee.id],
            title=f"Team invitation: {team.name}",
            message=f"{user.name} invited you to join '{team.name}'.",
            type=NotificationType.TEAM.value,
            category=NotificationCategory.TEAM_INVITATIONS.value,
            priority=NotificationPriority.MEDIUM.value,
            data={"team_id": str(team.id), "invite_code": team.invite_code},
            action_text="Join team",
            hackathon_id=team.hackathon_id,
            sender_id=user.id,
        )
    await db.commit()
    return {"message": "Invitation sent", "invite_code": team.invite_code}


@router.put("/{team_id}/project")
async def update_project(
    team_id: UUID,
    body: ProjectUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    team = await get_team_or_404(team_id, db)
    _require_leader(team, user)
    project = dict(team.project)
    for field, value in body.model_dump().items():
        if value:
            project[field] = value
    team.project = project
    await db.commit()
    return {"message": "Project updated", "team": team_dict(team, user.id)}


# ─── /hackathons/{id}/... ────────────────────────────────────────

@hackathon_router.get("/{hackathon_id}/team")
async def my_hackathon_team(
    hackathon_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    team = await find_user_team(hackathon_id, user.id, db)
    return {"team": team_dict(team, user.id) if team else None}


@hackathon_router.get("/{hackathon_id}/teams")
async def hackathon_teams(
    hackathon_id: UUID,
    user: User = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    await get_owned_hackathon(hackathon_id, user, db)
    teams = (await db.execute(
        select(Team).where(Team.hackathon_id == hackathon_id).order_by(Team.created_at.asc()),
    )).scalars().all()
    leader_ids = [t.leader_id for t in teams]
    leaders = {}
    if leader_ids:
        rows = (await db.execute(select(User).where(User.id.in_(leader_ids)))).scalars().all()
        leaders = {u.id: u for u in rows}

    formatted = []
    for team in teams:
        leader = leaders.get(team.leader_id)
        formatted.append({
            "id": str(team.id),
            "name": team.name,
            "leader": {"name": leader.name, "email": leader.email} if leader else None,
            "member_count": len(team.members),
            "has_credentials": bool(team.ide_username),
            "ide_access_status": team.ide_access_status,
            "status": team.status,
        })
    return {"teams": formatted, "total": len(formatted)}


@hackathon_router.post("/{hackathon_id}/select-team")
async def select_team(
    hackathon_id: UUID,
    body: SelectTeamRequest,
    background_tasks: BackgroundTasks,
    user: User = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    hackathon = await get_owned_hackathon(hackathon_id, user, db)
    team = await get_team_or_404(body.team_id, db)
    if team.hackathon_id != hackathon_id:
        raise ResourceNotFoundError("Team", str(body.team_id))
    if team.ide_username:
        raise BusinessRuleError(
            "Credentials have already been issued to this team", code="CREDENTIALS_EXIST",
            context=ErrorContext(team_id=str(team.id)),
        )

    now = utc_now()
    passkey = generate_passkey()
    team.ide_username = await allocate_ide_username(team_ide_username(team.name, str(hackathon_id)), db)
    team.ide_passkey = passkey
    team.main_branch = MAIN_BRANCH
    team.ide_access_status = IDEAccessStatus.APPROVED.value
    team.status = TeamStatus.ACTIVE.value
    team.credentials_sent_at = now

    members = await _member_users(team, db)
    leader = next((u for u in members if u.id == team.leader_id), None)
    db.add(Branch(
        hackathon_id=hackathon_id,
        access_id=team.ide_username,
        branch_name=MAIN_BRANCH,
        branch_type=BranchType.MAIN.value,
        created_by=leader.name if leader else team.name,
    ))
    await db.commit()

    recipients = [u.email for u in members]
    background_tasks.add_task(
        mailer.send, recipients,
        f"IDE access for {hackathon.title}",
        _credentials_email(team, hackathon.title, passkey),
    )
    logger.info("Team selected, credentials issued", extra={"team_id": team.id, "hackathon_id": hackathon_id})
    return {
        "message": "Team selected and credentials sent",
        "team": team_dict(team, user.id),
        "credentials": {"username": team.ide_username, "main_branch": team.main_branch},
        "recipients": recipients,
    }


@hackathon_router.post("/{hackathon_id}/ide-credentials")
async def request_ide_credentials(
    hackathon_id: UUID,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    hackathon = await get_hackathon_or_404(hackathon_id, db)
    team = await find_user_team(hackathon_id, user.id, db)
    if team is None:
        raise ResourceNotFoundError("Team", f"{hackathon_id}/{user.id}")
    _require_leader(team, user)
    if team.ide_username:
        return {
            "already_sent": True,
            "message": "Credentials were already issued for this team",
            "username": team.ide_username,
            "sent_at": isoformat(team.credentials_sent_at),
        }

    passkey = generate_access_password()
    team.ide_username = await allocate_ide_username(leader_ide_username(team.name, str(hackathon_id)), db)
    team.ide_passkey = passkey
    team.main_branch = MAIN_BRANCH
    team.credentials_sent_at = utc_now()
    await db.commit()

    background_tasks.add_task(
        mailer.send, [user.email],
        f"IDE access for {hackathon.title}",
        _credentials_email(team, hackathon.title, passkey),
    )
    return {
        "already_sent": False,
        "message": "Credentials generated and emailed to the team leader",
        "username": team.ide_username,
        "passkey": passkey,
    }
