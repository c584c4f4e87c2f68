"""Registration Schemas — registration form, selection review, open invites, IDE schedule."""

from pydantic import BaseModel, Field

from hackshield.core.domain_types import ExperienceLevel, SelectionStatus

_HHMM = r"^([01]\d|2[0-3]):[0-5]\d$"


class RegistrationForm(BaseModel):
    has_team: bool = True
    need_smart_matching: bool = False
    skills: list[str] = Field(default_factory=list)
    preferred_team_size: int | None = Field(None, ge=1, le=20)
    experience: ExperienceLevel | None = None
    availability: str | None = Field(None, max_length=50)
    preferred_role: str | None = Field(None, max_length=100)
    team_name: str | None = Field(None, max_length=200)
    team_size: int | None = Field(None, ge=1, le=20)
    team_leader: dict | None = None
    team_members: list[dict] = Field(default_factory=list)
    project_idea: str | None = Field(None, max_length=5000)
    previous_experience: str | None = Field(None, max_length=5000)
    special_requirements: str | None = Field(None, max_length=2000)


class SelectionUpdate(BaseModel):
    status: SelectionStatus
    feedback: str | None = Field(None, max_length=2000)


class OpenInviteRequest(BaseModel):
    bio: str | None = Field(None, max_length=2000)
    skills: list[str] | None = None
    experience: ExperienceLevel | None = None


class AccessWindow(BaseModel):
    day: str = Field(pattern=r"^(monday|tuesday|wednesday|thursday|friday|saturday|sunday)$")
    start_time: str = Field(pattern=_HHMM)
    end_time: str = Field(pattern=_HHMM)


class IDEScheduleUpdate(BaseModel):
    organization_approved: bool
    access_windows: list[AccessWindow] = Field(default_factory=list)
    allowed_days: list[str] = Field(default_factory=list)
    start_time: str | None = Field(None, pattern=_HHMM)
    end_time: str | None = Field(None, pattern=_HHMM)
