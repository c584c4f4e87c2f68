"""Domain Types — enums shared across the codebase.

Invariants:
    - All valid states encoded as Enums — no raw string matching
    - Enum values are the wire values (JSON and DB columns store .value)

Design Decisions:
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum


# ─── Accounts ────────────────────────────────────────────────────

class UserRole(str, Enum):
    PARTICIPANT = "participant"
    ORGANIZATION = "organization"
    CONTRIBUTOR = "contributor"


class ExperienceLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


# ─── Hackathons ──────────────────────────────────────────────────

class HackathonStatus(str, Enum):
    """Lifecycle: draft → published → active → judging → completed."""
    DRAFT = "draft"
    PUBLISHED = "published"
    ACTIVE = "active"
    JUDGING = "judging"
    COMPLETED = "completed"


class HackathonMode(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    HYBRID = "hybrid"


class AIAssistanceLevel(str, Enum):
    """strict disables the in-IDE assistant entirely."""
    STRICT = "strict"
    MODERATE = "moderate"
    PERMISSIVE = "permissive"


# ─── Participants ────────────────────────────────────────────────

class ParticipantStatus(str, Enum):
    REGISTERED = "registered"
    CHECKED_IN = "checked-in"
    DISQUALIFIED = "disqualified"


class MatchingStatus(str, Enum):
    PENDING = "pending"
    MATCHED = "matched"
    NOT_NEEDED = "not-needed"


class SelectionStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# ─── Teams ───────────────────────────────────────────────────────

class TeamStatus(str, Enum):
    FORMING = "forming"
    REGISTERED = "registered"
    ACTIVE = "active"
    SUBMITTED = "submitted"
    DISQUALIFIED = "disqualified"


class TeamRole(str, Enum):
    LEADER = "leader"
    MEMBER = "member"


class IDEAccessStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REVOKED = "revoked"


# ─── IDE ─────────────────────────────────────────────────────────

class BranchType(str, Enum):
    MAIN = "main"
    FEATURE = "feature"


class PullRequestStatus(str, Enum):
    OPEN = "open"
    APPROVED = "approved"
    REJECTED = "rejected"
    MERGED = "merged"


class ActivityType(str, Enum):
    CODE_CHANGE = "code_change"
    FILE_CREATED = "file_created"
    FILE_DELETED = "file_deleted"
    TERMINAL_COMMAND = "terminal_command"
    AI_QUERY = "ai_query"
    VIOLATION = "violation"
    SAVE = "save"
    EXECUTE = "execute"


class ActivitySeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class ViolationSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ─── Notifications ───────────────────────────────────────────────

class NotificationType(str, Enum):
    HACKATHON = "hackathon"
    TEAM = "team"
    PROJECT = "project"
    SYSTEM = "system"
    SOCIAL = "social"
    FINANCIAL = "financial"


class NotificationCategory(str, Enum):
    HACKATHON_UPDATES = "hackathon_updates"
    TEAM_INVITATIONS = "team_invitations"
    PROJECT_FEEDBACK = "project_feedback"
    MARKETPLACE_ACTIVITY = "marketplace_activity"
    SOCIAL_INTERACTIONS = "social_interactions"
    SYSTEM_ANNOUNCEMENTS = "system_announcements"
    SECURITY_ALERTS = "security_alerts"


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class NotificationChannel(str, Enum):
    EMAIL = "email"
    SMS = "sms"
    PUSH = "push"
    IN_APP = "in_app"
