"""Notification Routes — inbox, preferences, hackathon broadcasts and scheduled reminders.

Invariants:
    - Users only ever read or change their own notifications (others → 404)
    - Preferences are created with defaults on first read; updates deep-merge
    - Broadcasts reach every leader and member of every team in the hackathon
    - Reminder runs need the system API key and never send the same reminder twice

Design Decisions:
    - Email fan-out runs in BackgroundTasks after the rows are committed
    - Reminder de-duplication keys on (hackathon, title): titles are unique per
      reminder window
"""

import logging
import secrets
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Body, Depends, status
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from hackshield.api.deps import get_current_user, get_owned_hackathon, require_organization
from hackshield.api.serializers import notification_dict
from hackshield.config import get_settings
from hackshield.core.domain_types import (
    HackathonStatus, NotificationCategory, NotificationChannel, NotificationType, UserRole,
)
from hackshield.core.errors import AuthenticationError, PermissionDeniedError, ResourceNotFoundError
from hackshield.core.notification_rules import (
    deep_merge, default_preferences, due_reminders, in_quiet_hours, upcoming_summary,
)
from hackshield.core.time_utils import as_utc, isoformat, utc_now
from hackshield.infrastructure.database import get_db
from hackshield.infrastructure.mailer import Mailer, get_mailer
from hackshield.models.hackathon import Hackathon
from hackshield.models.notification import Notification, NotificationPreferences
from hackshield.models.participant import Participant
from hackshield.models.team import Team, TeamMember
from hackshield.models.user import User
from hackshield.schemas.notification import (
    BroadcastRequest, NotificationCreate, NotificationIds, ReminderTrigger,
)
from hackshield.services.notifier import (
    create_notifications, email_recipients, send_notification_email,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/notifications", tags=["notifications"])
hackathon_router = APIRouter(prefix="/api/v1/hackathons", tags=["notifications"])

UNREAD_LIMIT = 100
INBOX_LIMIT = 50
REMINDER_STATUSES = (HackathonStatus.PUBLISHED.value, HackathonStatus.ACTIVE.value)


async def _own_notification(notification_id: UUID, user: User, db: AsyncSession) -> Notification:
    notification = await db.get(Notification, notification_id)
    if notification is None or notification.user_id != user.id:
        raise ResourceNotFoundError("Notification", str(notification_id))
    return notification


async def _preferences_row(user: User, db: AsyncSession) -> NotificationPreferences:
    row = (await db.execute(
        select(NotificationPreferences).where(NotificationPreferences.user_id == user.id),
    )).scalar_one_or_none()
    if row is None:
        row = NotificationPreferences(user_id=user.id, preferences=default_preferences(user.email))
        db.add(row)
        await db.commit()
    return row


async def _hackathon_audience(hackathon_id: UUID, db: AsyncSession) -> list[UUID]:
    rows = (await db.execute(
        select(TeamMember.user_id)
        .join(Team, Team.id == TeamMember.team_id)
        .where(Team.hackathon_id == hackathon_id),
    )).scalars().all()
    leaders = (await db.execute(
        select(Team.leader_id).where(Team.hackathon_id == hackathon_id),
    )).scalars().all()
    return list(dict.fromkeys([*leaders, *rows]))


# ─── Inbox ───────────────────────────────────────────────────────

@router.get("")
async def list_notifications(
    unread_only: bool = False,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    query = select(Notification).where(
        Notification.user_id == user.id, Notification.archived.is_(False),
    )
    if unread_only:
        query = query.where(Notification.read.is_(False))
    rows = (await db.execute(
        query.order_by(Notification.created_at.desc())
        .limit(UNREAD_LIMIT if unread_only else INBOX_LIMIT),
    )).scalars().all()
    unread = (await db.execute(
        select(func.count()).select_from(Notification).where(
            Notification.user_id == user.id,
            Notification.read.is_(False),
            Notification.archived.is_(False),
        ),
    )).scalar_one()
    return {"notifications": [notification_dict(n) for n in rows], "unread_count": unread}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_notification(
    body: NotificationCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    recipient = body.user_id or user.id
    if recipient != user.id and user.role != UserRole.ORGANIZATION.value:
        raise PermissionDeniedError("Only organizations can notify other users")

    [notification] = create_notifications(
        db, [recipient],
        title=body.title,
        message=body.message,
        type=body.type.value,
        category=body.category.value if body.category else None,
        priority=body.priority.value,
        channels=[c.value for c in body.channels],
        data=body.data,
        action_url=body.action_url,
        action_text=body.action_text,
        sender_id=user.id,
    )
    await db.commit()
    return {"notification": notification_dict(notification)}


@router.put("/read-all")
async def mark_all_read(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user.id, Notification.read.is_(False))
        .values(read=True, read_at=utc_now()),
    )
    await db.commit()
    return {"message": "All notifications marked as read", "modified": result.rowcount}


@router.put("/{notification_id}/read")
async def mark_read(
    notification_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    notification = await _own_notification(notification_id, user, db)
    if not notification.read:
        notification.read = True
        notification.read_at = utc_now()
        await db.commit()
    return {"notification": notification_dict(notification)}


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    notification = await _own_notification(notification_id, user, db)
    await db.delete(notification)
    await db.commit()
    return {"message": "Notification deleted"}


@router.patch("/archive")
async def archive_notifications(
    body: NotificationIds,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user.id, Notification.id.in_(body.notification_ids))
        .values(archived=True),
    )
    await db.commit()
    return {"message": "Notifications archived", "modified": result.rowcount}


@router.delete("")
async def delete_notifications(
    body: NotificationIds,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        delete(Notification)
        .where(Notification.user_id == user.id, Notification.id.in_(body.notification_ids)),
    )
    await db.commit()
    return {"message": "Notifications deleted", "deleted": result.rowcount}


# ─── Preferences ─────────────────────────────────────────────────

@router.get("/preferences")
async def get_preferences(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    row = await _preferences_row(user, db)
    return {
        "preferences": row.preferences,
        "quiet_hours_active": in_quiet_hours(row.preferences, utc_now()),
    }


@router.patch("/preferences")
async def update_preferences(
    updates: dict = Body(...),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    row = await _preferences_row(user, db)
    row.preferences = deep_merge(row.preferences, updates)
    await db.commit()
    return {
        "message": "Preferences updated",
        "preferences": row.preferences,
        "quiet_hours_active": in_quiet_hours(row.preferences, utc_now()),
    }


# ─── Reminders ───────────────────────────────────────────────────

@router.post("/reminders")
async def send_reminders(
    body: ReminderTrigger,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    if not secrets.compare_digest(body.api_key.encode(), get_settings().system_api_key.encode()):
        raise AuthenticationError("Invalid system API key")

    now = utc_now()
    hackathons = (await db.execute(
        select(Hackathon).where(Hackathon.status.in_(REMINDER_STATUSES)),
    )).scalars().all()

    sent = []
    for hackathon in hackathons:
        reminders = due_reminders(as_utc(hackathon.start_date), as_utc(hackathon.end_date), now)
        if not reminders:
            continue
        audience = list(dict.fromkeys([
            *(await db.execute(
                select(Participant.user_id).where(Participant.hackathon_id == hackathon.id),
            )).scalars().all(),
            *await _hackathon_audience(hackathon.id, db),
        ]))
        for reminder in reminders:
            title = reminder.title(hackathon.title)
            already = (await db.execute(
                select(Notification.id)
                .where(Notification.hackathon_id == hackathon.id, Notification.title == title)
                .limit(1),
            )).first()
            if already is not None or not audience:
                continue
            message = reminder.message(hackathon.title)
            create_notifications(
                db, audience,
                title=title,
                message=message,
                type=NotificationType.HACKATHON.value,
                category=NotificationCategory.HACKATHON_UPDATES.value,
                priority=reminder.priority.value,
                channels=[NotificationChannel.IN_APP.value, NotificationChannel.EMAIL.value],
                data={"reminder": reminder.label},
                hackathon_id=hackathon.id,
            )
            emails = await email_recipients(
                db, audience, NotificationCategory.HACKATHON_UPDATES.value,
                reminder.priority.value, now,
            )
            background_tasks.add_task(send_notification_email, mailer, emails, title, message, None)
            sent.append({
                "hackathon_id": str(hackathon.id),
                "reminder": reminder.label,
                "recipients": len(audience),
            })
    await db.commit()

    logger.info(f"Reminder run sent {len(sent)} reminder(s)")
    return {"sent": sent, "total": len(sent)}


@router.get("/reminders")
async def upcoming_reminders(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    now = utc_now()
    hackathons = (await db.execute(
        select(Hackathon)
        .join(Participant, Participant.hackathon_id == Hackathon.id)
        .where(Participant.user_id == user.id, Hackathon.status.in_(REMINDER_STATUSES))
        .order_by(Hackathon.start_date.asc()),
    )).scalars().all()

    upcoming = []
    for hackathon in hackathons:
        summary = upcoming_summary(as_utc(hackathon.start_date), as_utc(hackathon.end_date), now)
        if summary is None:
            continue
        upcoming.append({
            "hackathon_id": str(hackathon.id),
            "title": hackathon.title,
            "start_date": isoformat(hackathon.start_date),
            "end_date": isoformat(hackathon.end_date),
            **summary,
        })
    return {"upcoming": upcoming}


# ─── Hackathon broadcasts ────────────────────────────────────────

@hackathon_router.post("/{hackathon_id}/notifications", status_code=status.HTTP_201_CREATED)
async def broadcast(
    hackathon_id: UUID,
    body: BroadcastRequest,
    background_tasks: BackgroundTasks,
    user: User = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    hackathon = await get_owned_hackathon(hackathon_id, user, db)
    audience = await _hackathon_audience(hackathon_id, db)
    channels = [c.value for c in body.channels]

    create_notifications(
        db, audience,
        title=body.title,
        message=body.message,
        type=body.type.value,
        category=NotificationCategory.HACKATHON_UPDATES.value,
        priority=body.priority.value,
        channels=channels,
        data={"hackathon_title": hackathon.title},
        action_url=body.action_url,
        hackathon_id=hackathon_id,
        sender_id=user.id,
    )
    emails: list[str] = []
    if NotificationChannel.EMAIL.value in channels:
        emails = await email_recipients(
            db, audience, NotificationCategory.HACKATHON_UPDATES.value, body.priority.value, utc_now(),
        )
    await db.commit()

    if emails:
        background_tasks.add_task(
            send_notification_email, mailer, emails, body.title, body.message, body.action_url,
        )
    logger.info(
        f"Broadcast to {len(audience)} user(s), {len(emails)} email(s)",
        extra={"hackathon_id": hackathon_id},
    )
    return {"message": "Notification sent", "recipients": len(audience), "emailed": len(emails)}


@hackathon_router.get("/{hackathon_id}/notifications")
async def broadcast_history(
    hackathon_id: UUID,
    user: User = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    await get_owned_hackathon(hackathon_id, user, db)
    rows = (await db.execute(
        select(Notification)
        .where(Notification.hackathon_id == hackathon_id, Notification.sender_id == user.id)
        .order_by(Notification.created_at.desc()),
    )).scalars().all()

    broadcasts: dict[tuple[str, str], dict] = {}
    for n in rows:
        key = (n.title, n.message)
        if key not in broadcasts:
            broadcasts[key] = {**notification_dict(n), "recipients": 0, "read_count": 0}
            broadcasts[key].pop("read")
            broadcasts[key].pop("read_at")
        broadcasts[key]["recipients"] += 1
        broadcasts[key]["read_count"] += int(n.read)
    return {"notifications": list(broadcasts.values())}
