"""Notification fan-out and destination use cases."""

from .consumer import (
    AckableMessage,
    BatchReport,
    NotificationQueueConsumer,
    build_consumer,
    process_notification_batch,
)
from .destinations import list_destinations, register_destination, unregister_destination
from .history import list_notifications
from .preferences import should_process_recipient, should_send_email, should_send_push

__all__ = [
    "AckableMessage",
    "BatchReport",
    "NotificationQueueConsumer",
    "build_consumer",
    "process_notification_batch",
    "list_destinations",
    "list_notifications",
    "register_destination",
    "unregister_destination",
    "should_process_recipient",
    "should_send_email",
    "should_send_push",
]
