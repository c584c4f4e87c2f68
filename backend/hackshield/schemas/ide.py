"""IDE Schemas — access credentials, session activity, monitoring and workspace payloads."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from hackshield.core.domain_types import ActivitySeverity, ActivityType


# ─── Access ──────────────────────────────────────────────────────

class GenerateAccessRequest(BaseModel):
    participant_user_id: UUID | None = None


class IDEAuthRequest(BaseModel):
    """Either a participant's access_id/password or a team's username/passkey."""
    access_id: str | None = None
    password: str | None = None
    username: str | None = None
    passkey: str | None = None

    @model_validator(mode="after")
    def require_credential_pair(self):
        if not ((self.access_id and self.password) or (self.username and self.passkey)):
            raise ValueError("access_id and password (or username and passkey) are required")
        return self


class SendCredentialsRequest(BaseModel):
    participant_id: UUID
    team_member_emails: list[str] = Field(default_factory=list)


# ─── Monitoring ──────────────────────────────────────────────────

class IDEActivityReport(BaseModel):
    access_id: str = Field(min_length=1)
    activity_type: str = Field("heartbeat", max_length=50)
    leave_attempts: int | None = Field(None, ge=0)
    details: str | None = Field(None, max_length=2000)


class DisqualifyRequest(BaseModel):
    access_id: str = Field(min_length=1)
    reason: str = Field("Violated IDE rules", max_length=2000)


class ViolationReport(BaseModel):
    hackathon_id: UUID
    violation_type: str = Field(min_length=1, max_length=50)
    details: str | None = Field(None, max_length=2000)


class ActivityCreate(BaseModel):
    """Editor-reported event; team and participant come from the access id."""
    model_config = ConfigDict(populate_by_name=True)

    access_id: str = Field(min_length=1)
    type: ActivityType
    details: str = Field("", max_length=5000)
    extra: dict = Field(default_factory=dict, alias="metadata")
    severity: ActivitySeverity = ActivitySeverity.INFO


# ─── Workspace ───────────────────────────────────────────────────

class WorkspaceFileIn(BaseModel):
    id: str | None = None
    name: str | None = None
    language: str | None = None
    path: str | None = None
    content: str = ""


class TeamFileSave(BaseModel):
    access_id: str = Field(min_length=1)
    file: WorkspaceFileIn


class BranchCreate(BaseModel):
    access_id: str = Field(min_length=1)
    branch_name: str = Field(min_length=1, max_length=100, pattern=r"^[A-Za-z0-9._/-]+$")
    created_by: str = Field(min_length=1, max_length=200)
    assigned_to: str | None = None
    assigned_to_email: str | None = None


class BranchUpdate(BaseModel):
    access_id: str = Field(min_length=1)
    branch_name: str = Field(min_length=1)
    action: str
    data: dict = Field(default_factory=dict)


class ExecuteRequest(BaseModel):
    access_id: str = Field(min_length=1)
    code: str = Field(min_length=1)
    language: str = Field(min_length=1)
    file_name: str | None = None


class TerminalRequest(BaseModel):
    access_id: str = Field(min_length=1)
    command: str = Field(min_length=1, max_length=1000)


class SiteFile(BaseModel):
    name: str = Field(min_length=1)
    content: str = ""


class PreviewRequest(BaseModel):
    access_id: str = Field(min_length=1)
    files: list[SiteFile]


class DeployRequest(BaseModel):
    access_id: str = Field(min_length=1)
    files: list[SiteFile] = Field(min_length=1)
    project_name: str = Field(min_length=1, max_length=200)
    deployment_type: str = "static"


class AssistantRequest(BaseModel):
    query: str = Field(min_length=1, max_length=5000)
    context: dict | None = None
    access_id: str | None = None
