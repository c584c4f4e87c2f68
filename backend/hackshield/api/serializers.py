"""Serializers — ORM rows to JSON-ready dicts, shared by route modules.

Invariants:
    - UUIDs rendered as str, datetimes as UTC ISO-8601
    - Secrets (password hashes, IDE passwords/passkeys) never appear here;
      routes that intentionally reveal credentials add them explicitly
    - A team's invite code is shown only to that team's members
"""

from uuid import UUID

from hackshield.core.time_utils import isoformat
from hackshield.models.hackathon import Hackathon
from hackshield.models.notification import Notification
from hackshield.models.participant import Participant
from hackshield.models.team import Team
from hackshield.models.user import User
from hackshield.models.workspace import ActivityLog, Branch


def user_public(user: User) -> dict:
    return {
        "id": str(user.id),
        "email": user.email,
        "name": user.name,
        "role": user.role,
    }


def user_profile(user: User) -> dict:
    return {
        **user_public(user),
        "avatar": user.avatar,
        "bio": user.bio,
        "skills": user.skills,
        "experience": user.experience,
        "github": user.github,
        "linkedin": user.linkedin,
        "portfolio": user.portfolio,
        "location": user.location,
        "org_name": user.org_name,
        "org_type": user.org_type,
        "verified": user.verified,
        "xp": user.xp,
        "level": user.level,
        "badges": user.badges,
        "reputation": user.reputation,
        "looking_for_team": user.looking_for_team,
        "created_at": isoformat(user.created_at),
    }


_LIST_EXCLUDED = ("rules", "code_of_conduct", "long_description")


def hackathon_dict(h: Hackathon, summary: bool = False) -> dict:
    data = {
        "id": str(h.id),
        "title": h.title,
        "tagline": h.tagline,
        "description": h.description,
        "long_description": h.long_description,
        "theme": h.theme,
        "cover_image": h.cover_image,
        "organization_id": str(h.organization_id),
        "organization_name": h.organization_name,
        "organization_logo": h.organization_logo,
        "start_date": isoformat(h.start_date),
        "end_date": isoformat(h.end_date),
        "registration_start": isoformat(h.registration_start),
        "registration_end": isoformat(h.registration_end),
        "duration": h.duration,
        "mode": h.mode,
        "venue": h.venue,
        "geofence_radius": h.geofence_radius,
        "min_team_size": h.min_team_size,
        "max_team_size": h.max_team_size,
        "solo_allowed": h.solo_allowed,
        "allowed_technologies": h.allowed_technologies,
        "prohibited_technologies": h.prohibited_technologies,
        "external_libraries_allowed": h.external_libraries_allowed,
        "pre_built_code_allowed": h.pre_built_code_allowed,
        "ai_assistance_level": h.ai_assistance_level,
        "prizes": h.prizes,
        "total_prize_pool": h.total_prize_pool,
        "judging_criteria": h.judging_criteria,
        "status": h.status,
        "max_teams": h.max_teams,
        "max_participants": h.max_participants,
        "public_leaderboard": h.public_leaderboard,
        "enable_neural_fairness": h.enable_neural_fairness,
        "enable_blockchain": h.enable_blockchain,
        "enable_geolocation": h.enable_geolocation,
        "enable_identity_check": h.enable_identity_check,
        "enable_screenshot_detection": h.enable_screenshot_detection,
        "sponsors": h.sponsors,
        "rules": h.rules,
        "code_of_conduct": h.code_of_conduct,
        "views": h.views,
        "created_at": isoformat(h.created_at),
    }
    if summary:
        for key in _LIST_EXCLUDED:
            data.pop(key)
    return data


def participant_dict(p: Participant) -> dict:
    return {
        "id": str(p.id),
        "hackathon_id": str(p.hackathon_id),
        "user_id": str(p.user_id),
        "name": p.name,
        "email": p.email,
        "avatar": p.avatar,
        "registered_at": isoformat(p.registered_at),
        "status": p.status,
        "team_id": str(p.team_id) if p.team_id else None,
        "has_team": p.has_team,
        "need_smart_matching": p.need_smart_matching,
        "skills": p.skills,
        "preferred_team_size": p.preferred_team_size,
        "matching_status": p.matching_status,
        "matched_with": p.matched_with,
        "experience": p.experience,
        "availability": p.availability,
        "preferred_role": p.preferred_role,
        "team_name": p.team_name,
        "team_size": p.team_size,
        "team_leader": p.team_leader,
        "team_members": p.team_members,
        "project_idea": p.project_idea,
        "ppt_url": p.ppt_url,
        "ppt_uploaded_at": isoformat(p.ppt_uploaded_at),
        "selection_round1_status": p.selection_round1_status,
        "selection_feedback": p.selection_feedback,
        "has_ide_access": bool(p.ide_access_id),
        "ide_session_active": p.ide_session_active,
        "ide_disqualified": p.ide_disqualified,
    }


def team_dict(team: Team, viewer_id: UUID | None = None) -> dict:
    """invite_code is only shown to members of the team."""
    return {
        "id": str(team.id),
        "name": team.name,
        "hackathon_id": str(team.hackathon_id),
        "leader_id": str(team.leader_id),
        "members": [
            {
                "user_id": str(m.user_id),
                "role": m.role,
                "skills": m.skills,
                "joined_at": isoformat(m.joined_at),
            }
            for m in team.members
        ],
        "invited_emails": team.invited_emails,
        "invite_code": team.invite_code if viewer_id and team.has_member(viewer_id) else None,
        "status": team.status,
        "is_locked": team.is_locked,
        "project": team.project,
        "warning_strikes": team.warning_strikes,
        "has_credentials": bool(team.ide_username),
        "ide_access_status": team.ide_access_status,
        "created_at": isoformat(team.created_at),
    }


def notification_dict(n: Notification) -> dict:
    return {
        "id": str(n.id),
        "type": n.type,
        "category": n.category,
        "title": n.title,
        "message": n.message,
        "data": n.data,
        "priority": n.priority,
        "channels": n.channels,
        "read": n.read,
        "read_at": isoformat(n.read_at),
        "archived": n.archived,
        "action_url": n.action_url,
        "action_text": n.action_text,
        "hackathon_id": str(n.hackathon_id) if n.hackathon_id else None,
        "created_at": isoformat(n.created_at),
    }


def branch_dict(b: Branch, include_credentials: bool = False) -> dict:
    data = {
        "id": str(b.id),
        "access_id": b.access_id,
        "branch_name": b.branch_name,
        "branch_type": b.branch_type,
        "created_by": b.created_by,
        "assigned_to": b.assigned_to,
        "assigned_to_email": b.assigned_to_email,
        "files": b.files,
        "commits": b.commits,
        "pull_requests": b.pull_requests,
        "created_at": isoformat(b.created_at),
        "updated_at": isoformat(b.updated_at),
    }
    if include_credentials:
        data["branch_access_id"] = b.branch_access_id
        data["branch_access_password"] = b.branch_access_password
    return data


def activity_dict(a: ActivityLog) -> dict:
    return {
        "id": str(a.id),
        "team_id": a.team_id,
        "team_name": a.team_name,
        "participant_name": a.participant_name,
        "type": a.type,
        "details": a.details,
        "metadata": a.extra,
        "severity": a.severity,
        "timestamp": isoformat(a.created_at),
    }
