"""Aggregate application use cases."""

from .notifications import (
    NotificationQueueConsumer,
    list_destinations,
    list_notifications,
    process_notification_batch,
    register_destination,
    unregister_destination,
)

__all__ = [
    "NotificationQueueConsumer",
    "list_destinations",
    "list_notifications",
    "process_notification_batch",
    "register_destination",
    "unregister_destination",
]
