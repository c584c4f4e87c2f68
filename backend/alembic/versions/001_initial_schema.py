"""Initial schema — users, hackathons, teams, participants, notifications, IDE workspace.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="participant"),
        sa.Column("avatar", sa.String(500), nullable=True),
        sa.Column("phone", sa.String(40), nullable=True),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column("skills", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("experience", sa.String(20), nullable=False, server_default="beginner"),
        sa.Column("github", sa.String(300), nullable=True),
        sa.Column("linkedin", sa.String(300), nullable=True),
        sa.Column("portfolio", sa.String(300), nullable=True),
        sa.Column("location", sa.String(200), nullable=True),
        sa.Column("timezone", sa.String(64), nullable=True),
        sa.Column("org_name", sa.String(200), nullable=True),
        sa.Column("org_type", sa.String(50), nullable=True),
        sa.Column("org_logo", sa.String(500), nullable=True),
        sa.Column("org_website", sa.String(300), nullable=True),
        sa.Column("verified", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("xp", sa.Integer, nullable=False, server_default="0"),
        sa.Column("level", sa.Integer, nullable=False, server_default="1"),
        sa.Column("badges", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("reputation", sa.Integer, nullable=False, server_default="0"),
        sa.Column("hackathons_participated", sa.Integer, nullable=False, server_default="0"),
        sa.Column("hackathons_won", sa.Integer, nullable=False, server_default="0"),
        sa.Column("projects_created", sa.Integer, nullable=False, server_default="0"),
        sa.Column("looking_for_team", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("looking_for_hackathon_id", UUID(as_uuid=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"])
    op.create_index("ix_users_looking_for_hackathon_id", "users", ["looking_for_hackathon_id"])

    op.create_table(
        "hackathons",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("tagline", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=False),
        sa.Column("long_description", sa.Text, nullable=True),
        sa.Column("theme", sa.String(100), nullable=False),
        sa.Column("cover_image", sa.String(500), nullable=True),
        sa.Column("organization_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("organization_name", sa.String(200), nullable=False),
        sa.Column("organization_logo", sa.String(500), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("registration_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("registration_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration", sa.Integer, nullable=False, server_default="24"),
        sa.Column("mode", sa.String(20), nullable=False),
        sa.Column("venue", sa.JSON, nullable=True),
        sa.Column("geofence_radius", sa.Integer, nullable=False, server_default="500"),
        sa.Column("min_team_size", sa.Integer, nullable=False, server_default="1"),
        sa.Column("max_team_size", sa.Integer, nullable=False, server_default="4"),
        sa.Column("solo_allowed", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("allowed_technologies", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("prohibited_technologies", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("external_libraries_allowed", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("pre_built_code_allowed", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("ai_assistance_level", sa.String(20), nullable=False, server_default="moderate"),
        sa.Column("prizes", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("total_prize_pool", sa.Float, nullable=False, server_default="0"),
        sa.Column("judging_criteria", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("status", sa.String(20), nullable=False, server_default="draft"),
        sa.Column("max_teams", sa.Integer, nullable=True),
        sa.Column("max_participants", sa.Integer, nullable=True),
        sa.Column("public_leaderboard", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("enable_neural_fairness", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("enable_blockchain", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("enable_geolocation", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("enable_identity_check", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("enable_screenshot_detection", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("sponsors", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("rules", sa.Text, nullable=True),
        sa.Column("code_of_conduct", sa.Text, nullable=True),
        sa.Column("views", sa.Integer, nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_hackathons_organization_id", "hackathons", ["organization_id"])
    op.create_index("ix_hackathons_status", "hackathons", ["status"])

    op.create_table(
        "teams",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column(
            "hackathon_id", UUID(as_uuid=True),
            sa.ForeignKey("hackathons.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("leader_id", UUID(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("invited_emails", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("invite_code", sa.String(16), nullable=False, unique=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="forming"),
        sa.Column("is_locked", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("project", sa.JSON, nullable=False, server_default="{}"),
        sa.Column("activity_stats", sa.JSON, nullable=False, server_default="{}"),
        sa.Column("warning_strikes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("violations", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("ide_username", sa.String(120), nullable=True, unique=True),
        sa.Column("ide_passkey", sa.String(64), nullable=True),
        sa.Column("main_branch", sa.String(120), nullable=True),
        sa.Column("credentials_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ide_access_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("leader_activated", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("activated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ide_session_active", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("ide_last_activity", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ide_session_started", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_teams_hackathon_id", "teams", ["hackathon_id"])

    op.create_table(
        "team_members",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "team_id", UUID(as_uuid=True),
            sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "user_id", UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("role", sa.String(20), nullable=False, server_default="member"),
        sa.Column("skills", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("team_id", "user_id", name="uq_team_member"),
    )
    op.create_index("ix_team_members_team_id", "team_members", ["team_id"])

    op.create_table(
        "participants",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "hackathon_id", UUID(as_uuid=True),
            sa.ForeignKey("hackathons.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column(
            "user_id", UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("avatar", sa.String(500), nullable=True),
        sa.Column("registered_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("status", sa.String(20), nullable=False, server_default="registered"),
        sa.Column(
            "team_id", UUID(as_uuid=True),
            sa.ForeignKey("teams.id", ondelete="SET NULL"), nullable=True,
        ),
        sa.Column("has_team", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("need_smart_matching", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("skills", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("preferred_team_size", sa.Integer, nullable=True),
        sa.Column("matching_status", sa.String(20), nullable=False, server_default="not-needed"),
        sa.Column("matched_with", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("experience", sa.String(20), nullable=True),
        sa.Column("availability", sa.String(50), nullable=True),
        sa.Column("preferred_role", sa.String(100), nullable=True),
        sa.Column("team_name", sa.String(200), nullable=True),
        sa.Column("team_size", sa.Integer, nullable=True),
        sa.Column("team_leader", sa.JSON, nullable=True),
        sa.Column("team_members", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("project_idea", sa.Text, nullable=True),
        sa.Column("previous_experience", sa.Text, nullable=True),
        sa.Column("special_requirements", sa.Text, nullable=True),
        sa.Column("ppt_url", sa.String(500), nullable=True),
        sa.Column("ppt_uploaded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("selection_round1_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("selection_feedback", sa.Text, nullable=True),
        sa.Column("ide_access_id", sa.String(32), nullable=True, unique=True),
        sa.Column("ide_access_password", sa.String(64), nullable=True),
        sa.Column("ide_access_generated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ide_session_active", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("ide_last_activity", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ide_session_started", sa.DateTime(timezone=True), nullable=True),
        sa.Column("ide_attempted_leave", sa.Integer, nullable=False, server_default="0"),
        sa.Column("ide_disqualified", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("ide_disqualified_reason", sa.Text, nullable=True),
        sa.Column("ide_schedule", sa.JSON, nullable=True),
        sa.UniqueConstraint("hackathon_id", "user_id", name="uq_participant_hackathon_user"),
    )
    op.create_index("ix_participants_hackathon_id", "participants", ["hackathon_id"])

    op.create_table(
        "notifications",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id", UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("type", sa.String(20), nullable=False, server_default="system"),
        sa.Column("category", sa.String(40), nullable=True),
        sa.Column("title", sa.String(300), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("data", sa.JSON, nullable=False, server_default="{}"),
        sa.Column("priority", sa.String(20), nullable=False, server_default="medium"),
        sa.Column("channels", sa.JSON, nullable=False, server_default='["in_app"]'),
        sa.Column("read", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("archived", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("action_url", sa.String(500), nullable=True),
        sa.Column("action_text", sa.String(100), nullable=True),
        sa.Column("hackathon_id", UUID(as_uuid=True), nullable=True),
        sa.Column("sender_id", UUID(as_uuid=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index("ix_notifications_hackathon_id", "notifications", ["hackathon_id"])

    op.create_table(
        "notification_preferences",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "user_id", UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True,
        ),
        sa.Column("preferences", sa.JSON, nullable=False, server_default="{}"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "team_workspaces",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "hackathon_id", UUID(as_uuid=True),
            sa.ForeignKey("hackathons.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("access_id", sa.String(120), nullable=False),
        sa.Column("files", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("last_sync", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("hackathon_id", "access_id", name="uq_workspace_access"),
    )

    op.create_table(
        "branches",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "hackathon_id", UUID(as_uuid=True),
            sa.ForeignKey("hackathons.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("access_id", sa.String(120), nullable=False),
        sa.Column("branch_name", sa.String(120), nullable=False),
        sa.Column("branch_type", sa.String(20), nullable=False, server_default="feature"),
        sa.Column("created_by", sa.String(200), nullable=False),
        sa.Column("assigned_to", sa.String(200), nullable=True),
        sa.Column("assigned_to_email", sa.String(320), nullable=True),
        sa.Column("branch_access_id", sa.String(140), nullable=True),
        sa.Column("branch_access_password", sa.String(64), nullable=True),
        sa.Column("files", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("commits", sa.JSON, nullable=False, server_default="[]"),
        sa.Column("pull_requests", sa.JSON, nullable=False, server_default="[]"),
        *_timestamps(),
        sa.UniqueConstraint("hackathon_id", "access_id", "branch_name", name="uq_branch_name"),
    )
    op.create_index("ix_branches_access_id", "branches", ["access_id"])

    op.create_table(
        "activity_logs",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "hackathon_id", UUID(as_uuid=True),
            sa.ForeignKey("hackathons.id", ondelete="CASCADE"), nullable=False,
        ),
        sa.Column("team_id", sa.String(120), nullable=False),
        sa.Column("team_name", sa.String(200), nullable=True),
        sa.Column("participant_name", sa.String(200), nullable=True),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("details", sa.Text, nullable=False, server_default=""),
        sa.Column("extra", sa.JSON, nullable=False, server_default="{}"),
        sa.Column("severity", sa.String(20), nullable=False, server_default="info"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_activity_logs_hackathon_id", "activity_logs", ["hackathon_id"])
    op.create_index("ix_activity_logs_team_id", "activity_logs", ["team_id"])
    op.create_index("ix_activity_logs_created_at", "activity_logs", ["created_at"])


def downgrade() -> None:
    op.drop_table("activity_logs")
    op.drop_table("branches")
    op.drop_table("team_workspaces")
    op.drop_table("notification_preferences")
    op.drop_table("notifications")
    op.drop_table("participants")
    op.drop_table("team_members")
    op.drop_table("teams")
    op.drop_table("hackathons")
    op.drop_table("users")
