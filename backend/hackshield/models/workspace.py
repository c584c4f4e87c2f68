"""IDE Workspace ORM — team files, branches and the activity log.

Invariants:
    - TeamWorkspace: one row per (hackathon_id, access_id)
    - Branch: (hackathon_id, access_id, branch_name) unique; one "main" per access id
    - ActivityLog rows are append-only

Design Decisions:
    - files / commits / pull_requests as JSON arrays: the branch model is an
      emulation, reassigned whole by core.branch_ops (no diffing, no conflicts)
    - access_id is a plain string: it may be a participant access id or a team username
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, JSON, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from hackshield.db.base import Base


class TeamWorkspace(Base):
    __tablename__ = "team_workspaces"
    __table_args__ = (
        UniqueConstraint("hackathon_id", "access_id", name="uq_workspace_access"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    hackathon_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("hackathons.id", ondelete="CASCADE"), nullable=False,
    )
    access_id: Mapped[str] = mapped_column(String(120), nullable=False)
    files: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    last_sync: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


class Branch(Base):
    __tablename__ = "branches"
    __table_args__ = (
        UniqueConstraint("hackathon_id", "access_id", "branch_name", name="uq_branch_name"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    hackathon_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("hackathons.id", ondelete="CASCADE"), nullable=False,
    )
    access_id: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    branch_name: Mapped[str] = mapped_column(String(120), nullable=False)
    branch_type: Mapped[str] = mapped_column(String(20), nullable=False, default="feature")
    created_by: Mapped[str] = mapped_column(String(200), nullable=False)
    assigned_to: Mapped[str | None] = mapped_column(String(200), nullable=True)
    assigned_to_email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    branch_access_id: Mapped[str | None] = mapped_column(String(140), nullable=True)
    branch_access_password: Mapped[str | None] = mapped_column(String(64), nullable=True)
    files: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    commits: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    pull_requests: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    hackathon_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("hackathons.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    team_id: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    team_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    participant_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    details: Mapped[str] = mapped_column(Text, nullable=False, default="")
    extra: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    severity: Mapped[str] = mapped_column(String(20), nullable=False, default="info")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc), index=True,
    )
