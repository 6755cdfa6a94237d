"""Utility helpers to push notifications to live subscribers."""

from __future__ import annotations

from typing import Any

from notifier.domain.entities import CreateNotificationResult, Notification
from notifier.utils import isoformat_or_none

from .manager import NotificationHub, notification_hub

LIVE_EVENT_TYPE = "notification"


class NotificationPublisher:
    """Serialize newly stored notifications and publish them to the hub."""

    def __init__(self, hub: NotificationHub) -> None:
        self._hub = hub

    async def publish_created(
        self,
        user_id: str,
        result: CreateNotificationResult,
        *,
        category: str,
        title: str,
    ) -> int:
        """Publish the live event for a freshly inserted notification."""

        message = build_live_event(
            notification_id=result.id,
            category=category,
            created_at=isoformat_or_none(result.created_at),
            title=title,
        )
        return await self._hub.publish(user_id, message)


def build_live_event(
    *, notification_id: str, category: str, created_at: str | None, title: str
) -> dict[str, Any]:
    """Return the frame sent to live subscribers."""

    return {
        "type": LIVE_EVENT_TYPE,
        "notificationId": notification_id,
        "category": category,
        "createdAt": created_at,
        "title": title,
    }


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the JSON representation used by the history endpoint."""

    return {
        "id": notification.id,
        "userId": notification.user_id,
        "practiceId": notification.practice_id,
        "category": notification.category,
        "entityType": notification.entity_type,
        "entityId": notification.entity_id,
        "title": notification.title,
        "body": notification.body,
        "link": notification.link,
        "senderName": notification.sender_name,
        "senderAvatarUrl": notification.sender_avatar_url,
        "severity": notification.severity,
        "metadata": notification.metadata,
        "createdAt": isoformat_or_none(notification.created_at),
    }


notification_publisher = NotificationPublisher(notification_hub)


__all__ = [
    "LIVE_EVENT_TYPE",
    "NotificationPublisher",
    "build_live_event",
    "notification_publisher",
    "serialize_notification",
]
