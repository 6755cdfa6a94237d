"""Domain entities exposed by the application."""

from .delivery_result import (
    DELIVERY_CHANNEL_EMAIL,
    DELIVERY_CHANNEL_PUSH,
    DELIVERY_STATUS_FAILURE,
    DELIVERY_STATUS_SUCCESS,
    DeliveryResult,
)
from .destination import DESTINATION_PROVIDER_ONESIGNAL, NotificationDestination
from .notification import (
    NOTIFICATION_CATEGORIES,
    NOTIFICATION_CATEGORY_MESSAGE,
    NOTIFICATION_CATEGORY_SYSTEM,
    NOTIFICATION_SEVERITIES,
    CreateNotificationResult,
    Notification,
    NotificationPage,
    normalize_category,
)
from .notification_event import (
    NotificationQueueMessage,
    RecipientPreferences,
    RecipientSnapshot,
)

__all__ = [
    "DELIVERY_CHANNEL_EMAIL",
    "DELIVERY_CHANNEL_PUSH",
    "DELIVERY_STATUS_FAILURE",
    "DELIVERY_STATUS_SUCCESS",
    "DESTINATION_PROVIDER_ONESIGNAL",
    "DeliveryResult",
    "NotificationDestination",
    "NOTIFICATION_CATEGORIES",
    "NOTIFICATION_CATEGORY_MESSAGE",
    "NOTIFICATION_CATEGORY_SYSTEM",
    "NOTIFICATION_SEVERITIES",
    "CreateNotificationResult",
    "Notification",
    "NotificationPage",
    "normalize_category",
    "NotificationQueueMessage",
    "RecipientPreferences",
    "RecipientSnapshot",
]
