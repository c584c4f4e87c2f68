"""Notifier — creates in-app notifications and picks email recipients by preference.

Invariants:
    - One Notification row per recipient; callers commit
    - Email recipients honour category/channel preferences; quiet hours suppress
      everything below critical priority
    - Users without a preferences row get the defaults

Design Decisions:
    - Email sending is returned as a list of addresses and handed to BackgroundTasks
      by the route: the response never waits on SMTP
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hackshield.core.domain_types import NotificationChannel, NotificationPriority
from hackshield.core.notification_rules import default_preferences, in_quiet_hours, should_send
from hackshield.infrastructure.mailer import Mailer
from hackshield.models.notification import Notification, NotificationPreferences
from hackshield.models.user import User

logger = logging.getLogger(__name__)


def create_notifications(
    db: AsyncSession,
    user_ids: list[UUID],
    *,
    title: str,
    message: str,
    type: str = "system",
    category: str | None = None,
    priority: str = NotificationPriority.MEDIUM.value,
    channels: list[str] | None = None,
    data: dict | None = None,
    action_url: str | None = None,
    action_text: str | None = None,
    hackathon_id: UUID | None = None,
    sender_id: UUID | None = None,
) -> list[Notification]:
    created = []
    for user_id in dict.fromkeys(user_ids):
        notification = Notification(
            user_id=user_id,
            type=type,
            category=category,
            title=title,
            message=message,
            priority=priority,
            channels=channels or [NotificationChannel.IN_APP.value],
            data=data or {},
            action_url=action_url,
            action_text=action_text,
            hackathon_id=hackathon_id,
            sender_id=sender_id,
        )
        db.add(notification)
        created.append(notification)
    return created


async def email_recipients(
    db: AsyncSession, user_ids: list[UUID], category: str, priority: str, now: datetime,
) -> list[str]:
    if not user_ids:
        return []
    users = (await db.execute(select(User).where(User.id.in_(user_ids)))).scalars().all()
    prefs_rows = (await db.execute(
        select(NotificationPreferences).where(NotificationPreferences.user_id.in_(user_ids)),
    )).scalars().all()
    prefs_by_user = {p.user_id: p.preferences for p in prefs_rows}

    addresses = []
    for user in users:
        prefs = prefs_by_user.get(user.id) or default_preferences(user.email)
        if not should_send(prefs, category, NotificationChannel.EMAIL.value, priority):
            continue
        if priority != NotificationPriority.CRITICAL.value and in_quiet_hours(prefs, now):
            continue
        addresses.append(user.email)
    return addresses


async def send_notification_email(
    mailer: Mailer, recipients: list[str], title: str, message: str, action_url: str | None,
) -> None:
    """Background task body: one message per recipient, so addresses stay private."""
    body = message if not action_url else f"{message}\n\n{action_url}"
    for address in recipients:
        await mailer.send([address], title, body)
