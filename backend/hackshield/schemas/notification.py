"""Notification Schemas — inbox operations, broadcasts and reminder triggers."""

from uuid import UUID

from pydantic import BaseModel, Field

from hackshield.core.domain_types import (
    NotificationCategory, NotificationChannel, NotificationPriority, NotificationType,
)


class NotificationCreate(BaseModel):
    user_id: UUID | None = None
    type: NotificationType = NotificationType.SYSTEM
    category: NotificationCategory | None = None
    title: str = Field(min_length=1, max_length=300)
    message: str = Field(min_length=1, max_length=5000)
    data: dict = Field(default_factory=dict)
    priority: NotificationPriority = NotificationPriority.MEDIUM
    channels: list[NotificationChannel] = Field(
        default_factory=lambda: [NotificationChannel.IN_APP],
    )
    action_url: str | None = None
    action_text: str | None = None


class NotificationIds(BaseModel):
    notification_ids: list[UUID] = Field(min_length=1)


class BroadcastRequest(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    message: str = Field(min_length=1, max_length=5000)
    type: NotificationType = NotificationType.HACKATHON
    priority: NotificationPriority = NotificationPriority.MEDIUM
    channels: list[NotificationChannel] = Field(
        default_factory=lambda: [NotificationChannel.IN_APP, NotificationChannel.EMAIL],
    )
    action_url: str | None = None


class ReminderTrigger(BaseModel):
    api_key: str
