"""Team ORM — a leader and members competing together in one hackathon.

Invariants:
    - invite_code is unique, 8 chars from A–Z0–9
    - Exactly one member row has role "leader" and its user_id == leader_id
    - (team_id, user_id) unique in team_members
    - ide_username unique when set; credentials are issued once per team

Design Decisions:
    - members eager-loaded (selectin): nearly every team response lists them
    - project, violations and activity counters as JSON: display data, written whole
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, DateTime, ForeignKey, Integer, JSON, String, UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hackshield.db.base import Base


class Team(Base):
    __tablename__ = "teams"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    hackathon_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("hackathons.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    leader_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False,
    )
    invited_emails: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    invite_code: Mapped[str] = mapped_column(String(16), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="forming")
    is_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    project: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    activity_stats: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    warning_strikes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    violations: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    # IDE credentials issued by the organizer (select-team) or requested by the leader
    ide_username: Mapped[str | None] = mapped_column(String(120), nullable=True, unique=True)
    ide_passkey: Mapped[str | None] = mapped_column(String(64), nullable=True)
    main_branch: Mapped[str | None] = mapped_column(String(120), nullable=True)
    credentials_sent_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    ide_access_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    leader_activated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    activated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    ide_session_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    ide_last_activity: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    ide_session_started: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    members: Mapped[list["TeamMember"]] = relationship(
        "TeamMember", back_populates="team",
        cascade="all, delete-orphan", lazy="selectin",
        order_by="TeamMember.joined_at",
    )

    def has_member(self, user_id: uuid.UUID) -> bool:
        return any(m.user_id == user_id for m in self.members)


class TeamMember(Base):
    __tablename__ = "team_members"
    __table_args__ = (
        UniqueConstraint("team_id", "user_id", name="uq_team_member"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    team_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="member")
    skills: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    team: Mapped["Team"] = relationship("Team", back_populates="members")
