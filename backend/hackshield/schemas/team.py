"""Team Schemas — team lifecycle, invites, project details and matching requests."""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from hackshield.core.domain_types import ExperienceLevel


class TeamCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    hackathon_id: UUID

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class TeamRename(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class TeamInvite(BaseModel):
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class TeamJoin(BaseModel):
    invite_code: str = Field(min_length=1, max_length=16)


class ProjectUpdate(BaseModel):
    title: str | None = Field(None, max_length=200)
    description: str | None = Field(None, max_length=5000)
    technologies: list[str] | None = None
    repo_url: str | None = Field(None, max_length=500)
    demo_url: str | None = Field(None, max_length=500)


class SelectTeamRequest(BaseModel):
    team_id: UUID


class SmartMatchAction(BaseModel):
    action: Literal["invite", "accept"]
    target_participant_id: UUID


class TeamMatchingRequest(BaseModel):
    skills: list[str] = Field(default_factory=list)
    experience: ExperienceLevel | None = None
    availability: str | None = None
    limit: int = Field(10, ge=1, le=50)
