"""Repository implementations for infrastructure layer."""

from .delivery_result_repository import DeliveryResultRepository
from .destination_repository import DestinationRepository
from .notification_repository import NotificationRepository

__all__ = [
    "DeliveryResultRepository",
    "DestinationRepository",
    "NotificationRepository",
]
