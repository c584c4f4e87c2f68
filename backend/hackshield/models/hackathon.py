"""Hackathon ORM — the event aggregate: schedule, rules, prizes and security flags.

Invariants:
    - status ∈ HackathonStatus; lifecycle draft → published → active → judging → completed
    - total_prize_pool == sum(prize amounts), recomputed on every prize change
    - duration is whole hours between start_date and end_date
    - organization_id references the owning organization user

Design Decisions:
    - prizes, judging_criteria, sponsors, venue as JSON: always read and written whole
    - No ORM collections for participants/teams: routes query them explicitly
      (async sessions cannot lazy-load)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, DateTime, Float, ForeignKey, Integer, JSON, String, Text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from hackshield.db.base import Base


class Hackathon(Base):
    __tablename__ = "hackathons"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    tagline: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    long_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    theme: Mapped[str] = mapped_column(String(100), nullable=False)
    cover_image: Mapped[str | None] = mapped_column(String(500), nullable=True)

    organization_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True,
    )
    organization_name: Mapped[str] = mapped_column(String(200), nullable=False)
    organization_logo: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Schedule
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    registration_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    registration_end: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration: Mapped[int] = mapped_column(Integer, nullable=False, default=24)

    # Location
    mode: Mapped[str] = mapped_column(String(20), nullable=False)
    venue: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    geofence_radius: Mapped[int] = mapped_column(Integer, nullable=False, default=500)

    # Team rules
    min_team_size: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    max_team_size: Mapped[int] = mapped_column(Integer, nullable=False, default=4)
    solo_allowed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Technology rules
    allowed_technologies: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    prohibited_technologies: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    external_libraries_allowed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    pre_built_code_allowed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    ai_assistance_level: Mapped[str] = mapped_column(String(20), nullable=False, default="moderate")

    # Prizes + judging
    prizes: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    total_prize_pool: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    judging_criteria: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="draft", index=True)
    max_teams: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_participants: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Security / fairness flags
    public_leaderboard: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    enable_neural_fairness: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    enable_blockchain: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    enable_geolocation: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    enable_identity_check: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    enable_screenshot_detection: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    sponsors: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    rules: Mapped[str | None] = mapped_column(Text, nullable=True)
    code_of_conduct: Mapped[str | None] = mapped_column(Text, nullable=True)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

