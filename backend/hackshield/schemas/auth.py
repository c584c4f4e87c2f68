"""Auth Schemas — registration and login payloads.

Invariants:
    - email lower-cased and stripped before any lookup
    - password at least 6 characters
    - role must be a UserRole value (invalid role → 400 via the validation handler)
"""

from pydantic import BaseModel, Field, field_validator

from hackshield.core.domain_types import ExperienceLevel, UserRole

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def _normalize_email(v: str) -> str:
    return v.strip().lower()


class RegisterRequest(BaseModel):
    email: str = Field(pattern=_EMAIL_PATTERN, max_length=320)
    password: str = Field(min_length=6, max_length=200)
    name: str = Field(min_length=1, max_length=200)
    role: UserRole
    skills: list[str] = Field(default_factory=list)
    experience: ExperienceLevel = ExperienceLevel.BEGINNER
    bio: str | None = Field(None, max_length=2000)
    org_name: str | None = Field(None, max_length=200)
    org_type: str | None = Field(None, max_length=50)
    org_website: str | None = Field(None, max_length=300)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v) if isinstance(v, str) else v

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return _normalize_email(v) if isinstance(v, str) else v
