"""Realtime notification helpers for the infrastructure layer."""

from .manager import LiveSubscriber, NotificationHub, UserChannel, notification_hub
from .publisher import (
    LIVE_EVENT_TYPE,
    NotificationPublisher,
    build_live_event,
    notification_publisher,
    serialize_notification,
)

__all__ = [
    "LiveSubscriber",
    "NotificationHub",
    "UserChannel",
    "notification_hub",
    "LIVE_EVENT_TYPE",
    "NotificationPublisher",
    "build_live_event",
    "notification_publisher",
    "serialize_notification",
]
