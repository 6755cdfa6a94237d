"""ORM models used by the application infrastructure."""

from .delivery_result import DeliveryResultModel
from .destination import NotificationDestinationModel
from .notification import NotificationModel

__all__ = [
    "DeliveryResultModel",
    "NotificationDestinationModel",
    "NotificationModel",
]
