"""Hackathon Schemas — create/update payloads with field-level limits.

Invariants:
    - tagline ≤ 100 chars, description ≤ 500 chars
    - end_date after start_date, compared in UTC (naive values count as UTC);
      registration_end (or registration_deadline) optional
    - prizes accept "position" as an alias of "place"
    - security_settings flags map onto the hackathon's enable_* columns
"""

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from hackshield.core.domain_types import AIAssistanceLevel, HackathonMode, HackathonStatus
from hackshield.core.time_utils import as_utc


def _check_order(start: datetime, end: datetime) -> None:
    if as_utc(end) <= as_utc(start):
        raise ValueError("end_date must be after start_date")


class PrizeIn(BaseModel):
    place: str | int | None = None
    position: str | int | None = None
    amount: float = Field(0, ge=0)
    description: str | None = Field(None, max_length=500)


class SecuritySettings(BaseModel):
    ai_proctoring: bool = False
    neural_fairness: bool = False
    blockchain: bool = False
    geolocation: bool = False
    identity_check: bool = False
    screenshot_detection: bool = False


class HackathonBase(BaseModel):
    long_description: str | None = None
    cover_image: str | None = None
    venue: dict | None = None
    geofence_radius: int | None = Field(None, ge=0)
    min_team_size: int | None = Field(None, ge=1, le=20)
    max_team_size: int | None = Field(None, ge=1, le=20)
    allowed_technologies: list[str] | None = None
    prohibited_technologies: list[str] | None = None
    external_libraries_allowed: bool | None = None
    pre_built_code_allowed: bool | None = None
    ai_assistance_level: AIAssistanceLevel | None = None
    prizes: list[PrizeIn] | None = None
    judging_criteria: list[dict] | None = None
    max_teams: int | None = Field(None, ge=1)
    max_participants: int | None = Field(None, ge=1)
    public_leaderboard: bool | None = None
    sponsors: list[dict] | None = None
    rules: str | None = None
    code_of_conduct: str | None = None
    security_settings: SecuritySettings | None = None


class HackathonCreate(HackathonBase):
    title: str = Field(min_length=1, max_length=200)
    tagline: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=500)
    theme: str = Field(min_length=1, max_length=100)
    start_date: datetime
    end_date: datetime
    mode: HackathonMode
    registration_start: datetime | None = None
    registration_end: datetime | None = None
    registration_deadline: datetime | None = None

    @model_validator(mode="after")
    def validate_dates(self):
        _check_order(self.start_date, self.end_date)
        return self


class HackathonUpdate(HackathonBase):
    title: str | None = Field(None, min_length=1, max_length=200)
    tagline: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, min_length=1, max_length=500)
    theme: str | None = Field(None, min_length=1, max_length=100)
    start_date: datetime | None = None
    end_date: datetime | None = None
    registration_start: datetime | None = None
    registration_end: datetime | None = None
    mode: HackathonMode | None = None

    @model_validator(mode="after")
    def validate_dates(self):
        if self.start_date is not None and self.end_date is not None:
            _check_order(self.start_date, self.end_date)
        return self


class StatusUpdate(BaseModel):
    status: HackathonStatus
