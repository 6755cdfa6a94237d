from .destination import (
    DestinationDisableResponse,
    DestinationRead,
    DestinationRegisterRequest,
    EventAcceptedResponse,
)
from .notification import NotificationPageRead, NotificationRead

__all__ = [
    "DestinationDisableResponse",
    "DestinationRead",
    "DestinationRegisterRequest",
    "EventAcceptedResponse",
    "NotificationPageRead",
    "NotificationRead",
]
