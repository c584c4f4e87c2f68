"""ORM Models — SQLAlchemy declarative models for all domain entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Hackathon is the aggregate root; participants, teams and IDE data are scoped by hackathon_id

Design Decisions:
    - One file per entity group for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from hackshield.models.user import User  # noqa: F401
from hackshield.models.hackathon import Hackathon  # noqa: F401
from hackshield.models.team import Team, TeamMember  # noqa: F401
from hackshield.models.participant import Participant  # noqa: F401
from hackshield.models.notification import Notification, NotificationPreferences  # noqa: F401
from hackshield.models.workspace import ActivityLog, Branch, TeamWorkspace  # noqa: F401
