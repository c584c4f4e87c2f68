"""User ORM — accounts for participants, organizations and contributors.

Invariants:
    - email is unique and stored lower-case
    - password_hash is a werkzeug hash; plaintext never persisted
    - level is always level_for_xp(xp) (core/user_levels.py)

Design Decisions:
    - One table for every role: organization-only columns are nullable
    - skills/badges as JSON lists: read whole, never queried element-wise
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, JSON, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from hackshield.db.base import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="participant")

    # Profile
    avatar: Mapped[str | None] = mapped_column(String(500), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    skills: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    experience: Mapped[str] = mapped_column(String(20), nullable=False, default="beginner")
    github: Mapped[str | None] = mapped_column(String(300), nullable=True)
    linkedin: Mapped[str | None] = mapped_column(String(300), nullable=True)
    portfolio: Mapped[str | None] = mapped_column(String(300), nullable=True)
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    timezone: Mapped[str | None] = mapped_column(String(64), nullable=True)

    # Organization
    org_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    org_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    org_logo: Mapped[str | None] = mapped_column(String(500), nullable=True)
    org_website: Mapped[str | None] = mapped_column(String(300), nullable=True)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Gamification
    xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    level: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    badges: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    reputation: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Stats
    hackathons_participated: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    hackathons_won: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    projects_created: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # "Looking for team" open invite, scoped to one hackathon at a time
    looking_for_team: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    looking_for_hackathon_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), nullable=True, index=True,
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
