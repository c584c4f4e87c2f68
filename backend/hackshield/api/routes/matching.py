"""Matching Routes — smart teammate matching and profile compatibility search.

Invariants:
    - Smart matching is only for registered participants who asked for it
    - Candidates: other participants with smart matching on, status pending and no team
    - accept leaves both participants in the same team, matched, with each other
      in matched_with
    - Scores come from core.matching; this module only loads and persists

Design Decisions:
    - accept reuses an existing team when either side already leads or belongs
      to one, otherwise it creates a team led by the caller
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hackshield.api.deps import (
    allocate_invite_code, find_participant, find_user_team, get_current_user,
    get_hackathon_or_404,
)
from hackshield.api.serializers import team_dict
from hackshield.config import get_settings
from hackshield.core.domain_types import (
    MatchingStatus, NotificationCategory, NotificationType, TeamRole,
)
from hackshield.core.errors import (
    BusinessRuleError, ErrorContext, ResourceNotFoundError,
)
from hackshield.core.matching import (
    MatchCandidate, compatibility_score, complementary_skills, rank_smart_matches,
    shared_interests,
)
from hackshield.infrastructure.database import get_db
from hackshield.models.participant import Participant
from hackshield.models.team import Team, TeamMember
from hackshield.models.user import User
from hackshield.schemas.team import SmartMatchAction, TeamMatchingRequest
from hackshield.services.notifier import create_notifications

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/hackathons", tags=["matching"])


async def _own_participant(hackathon_id: UUID, user: User, db: AsyncSession) -> Participant:
    participant = await find_participant(hackathon_id, user.id, db)
    if participant is None:
        raise BusinessRuleError("Not registered for this hackathon", code="NOT_REGISTERED")
    return participant


def _add_match(participant: Participant, other_id: UUID) -> None:
    if str(other_id) not in participant.matched_with:
        participant.matched_with = [*participant.matched_with, str(other_id)]
    participant.matching_status = MatchingStatus.MATCHED.value


@router.post("/{hackathon_id}/smart-matching")
async def find_smart_matches(
    hackathon_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await get_hackathon_or_404(hackathon_id, db)
    own = await _own_participant(hackathon_id, user, db)
    if not own.need_smart_matching:
        raise BusinessRuleError(
            "Smart matching is not enabled for your registration", code="MATCHING_DISABLED",
        )

    rows = (await db.execute(
        select(Participant).where(
            Participant.hackathon_id == hackathon_id,
            Participant.id != own.id,
            Participant.need_smart_matching.is_(True),
            Participant.matching_status == MatchingStatus.PENDING.value,
            Participant.team_id.is_(None),
        ),
    )).scalars().all()
    candidates = [
        MatchCandidate(
            participant_id=str(p.id),
            user_id=str(p.user_id),
            name=p.name,
            email=p.email,
            skills=p.skills,
            preferred_team_size=p.preferred_team_size,
        )
        for p in rows
    ]
    return {
        "matches": rank_smart_matches(own.skills, candidates),
        "total_potential": len(candidates),
    }


@router.patch("/{hackathon_id}/smart-matching")
async def act_on_match(
    hackathon_id: UUID,
    body: SmartMatchAction,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await get_hackathon_or_404(hackathon_id, db)
    own = await _own_participant(hackathon_id, user, db)
    target = await db.get(Participant, body.target_participant_id)
    if target is None or target.hackathon_id != hackathon_id or target.id == own.id:
        raise ResourceNotFoundError("Participant", str(body.target_participant_id))

    if body.action == "invite":
        _add_match(own, target.id)
        create_notifications(
            db, [target.user_id],
            title="New teammate match",
            message=f"{own.name} wants to team up with you.",
            type=NotificationType.TEAM.value,
            category=NotificationCategory.TEAM_INVITATIONS.value,
            data={"participant_id": str(own.id)},
            hackathon_id=hackathon_id,
            sender_id=user.id,
        )
        await db.commit()
        return {"message": "Match invitation sent", "matched_with": own.matched_with}

    team = await _team_for_pair(hackathon_id, own, target, user, db)
    for participant, other in ((own, target), (target, own)):
        _add_match(participant, other.id)
        participant.team_id = team.id
        participant.has_team = True
    await db.commit()

    logger.info("Smart match accepted", extra={"team_id": team.id, "hackathon_id": hackathon_id})
    return {"message": "Match accepted", "team": team_dict(team, user.id)}


async def _team_for_pair(
    hackathon_id: UUID, own: Participant, target: Participant, user: User, db: AsyncSession,
) -> Team:
    own_team = await find_user_team(hackathon_id, own.user_id, db)
    target_team = await find_user_team(hackathon_id, target.user_id, db)
    if own_team and target_team and own_team.id != target_team.id:
        raise BusinessRuleError(
            "Both participants already belong to different teams", code="ALREADY_IN_TEAM",
        )

    team = own_team or target_team
    if team is None:
        team = Team(
            name=f"{own.name} & {target.name}",
            hackathon_id=hackathon_id,
            leader_id=user.id,
            invite_code=await allocate_invite_code(db),
            members=[TeamMember(user_id=own.user_id, role=TeamRole.LEADER.value, skills=own.skills)],
        )
        db.add(team)
        await db.flush()

    for joining in (own, target):
        if team.has_member(joining.user_id):
            continue
        if len(team.members) >= get_settings().max_team_members:
            raise BusinessRuleError(
                "Team is full", code="TEAM_FULL", context=ErrorContext(team_id=str(team.id)),
            )
        team.members.append(TeamMember(
            user_id=joining.user_id, role=TeamRole.MEMBER.value, skills=joining.skills,
        ))
    return team


@router.post("/{hackathon_id}/team-matching")
async def team_matching(
    hackathon_id: UUID,
    body: TeamMatchingRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await get_hackathon_or_404(hackathon_id, db)
    own = await find_participant(hackathon_id, user.id, db)
    profile = {
        "skills": body.skills or (own.skills if own else user.skills),
        "experience": body.experience.value if body.experience else user.experience,
        "availability": body.availability or (own.availability if own else None),
    }

    query = select(Participant).where(
        Participant.hackathon_id == hackathon_id,
        Participant.user_id != user.id,
        Participant.team_id.is_(None),
    )
    rows = (await db.execute(query)).scalars().all()

    matches = []
    for p in rows:
        candidate = {"skills": p.skills, "experience": p.experience, "availability": p.availability}
        matches.append({
            "participant_id": str(p.id),
            "user_id": str(p.user_id),
            "name": p.name,
            "skills": p.skills,
            "experience": p.experience,
            "availability": p.availability,
            "compatibility_score": compatibility_score(profile, candidate),
            "complementary_skills": complementary_skills(profile["skills"], p.skills),
            "shared_interests": shared_interests(profile["skills"], p.skills),
        })
    matches.sort(key=lambda m: m["compatibility_score"], reverse=True)
    return {"matches": matches[:body.limit], "total": len(matches)}
