"""Domain entity for the per-channel delivery audit trail."""

from dataclasses import dataclass
from datetime import datetime
from typing import Final

DELIVERY_CHANNEL_EMAIL: Final[str] = "email"
DELIVERY_CHANNEL_PUSH: Final[str] = "push"

DELIVERY_STATUS_SUCCESS: Final[str] = "success"
DELIVERY_STATUS_FAILURE: Final[str] = "failure"


@dataclass
class DeliveryResult:
    """Outcome of one attempt to deliver a notification over a channel."""

    id: str | None
    notification_id: str
    user_id: str
    channel: str
    provider: str
    status: str
    error_message: str | None
    external_user_id: str | None
    created_at: datetime | None


__all__ = [
    "DELIVERY_CHANNEL_EMAIL",
    "DELIVERY_CHANNEL_PUSH",
    "DELIVERY_STATUS_FAILURE",
    "DELIVERY_STATUS_SUCCESS",
    "DeliveryResult",
]
