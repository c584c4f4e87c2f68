"""Participant ORM — one user's registration in one hackathon plus IDE session state.

Invariants:
    - (hackathon_id, user_id) unique: a user registers at most once per hackathon
    - ide_access_id is unique across participants when set
    - ide_disqualified implies status == "disqualified"
    - ide_attempted_leave only grows during an event

Design Decisions:
    - Its own table rather than an embedded array: registration, matching and IDE
      monitoring all query participants directly
    - Team-form details (leader + members) kept as JSON: they are display data
      filled in by the registrant, not references to user accounts
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from hackshield.db.base import Base


class Participant(Base):
    __tablename__ = "participants"
    __table_args__ = (
        UniqueConstraint("hackathon_id", "user_id", name="uq_participant_hackathon_user"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    hackathon_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("hackathons.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    avatar: Mapped[str | None] = mapped_column(String(500), nullable=True)
    registered_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="registered")
    team_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("teams.id", ondelete="SET NULL"), nullable=True,
    )

    # Team formation / smart matching
    has_team: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    need_smart_matching: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    skills: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    preferred_team_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    matching_status: Mapped[str] = mapped_column(String(20), nullable=False, default="not-needed")
    matched_with: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    experience: Mapped[str | None] = mapped_column(String(20), nullable=True)
    availability: Mapped[str | None] = mapped_column(String(50), nullable=True)
    preferred_role: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Registration form
    team_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    team_size: Mapped[int | None] = mapped_column(Integer, nullable=True)
    team_leader: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    team_members: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    project_idea: Mapped[str | None] = mapped_column(Text, nullable=True)
    previous_experience: Mapped[str | None] = mapped_column(Text, nullable=True)
    special_requirements: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Selection round 1 (pitch deck)
    ppt_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    ppt_uploaded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    selection_round1_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="pending",
    )
    selection_feedback: Mapped[str | None] = mapped_column(Text, nullable=True)

    # IDE access + session
    ide_access_id: Mapped[str | None] = mapped_column(String(32), nullable=True, unique=True)
    ide_access_password: Mapped[str | None] = mapped_column(String(64), nullable=True)
    ide_access_generated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    ide_session_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    ide_last_activity: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    ide_session_started: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    ide_attempted_leave: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ide_disqualified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    ide_disqualified_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    ide_schedule: Mapped[dict | None] = mapped_column(JSON, nullable=True)
