"""Reusable schemas for payloads exchanged through the notification queue."""

from .notification_event import (
    NotificationEventPayload,
    RecipientPreferencesPayload,
    RecipientSnapshotPayload,
    parse_notification_event,
)

__all__ = [
    "NotificationEventPayload",
    "RecipientPreferencesPayload",
    "RecipientSnapshotPayload",
    "parse_notification_event",
]
