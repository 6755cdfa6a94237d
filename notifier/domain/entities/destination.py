"""Domain entity representing a registered push destination."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Final

DESTINATION_PROVIDER_ONESIGNAL: Final[str] = "onesignal"


@dataclass
class NotificationDestination:
    """Identity registered with a push provider for one user device."""

    id: str | None
    user_id: str
    provider: str
    provider_id: str
    platform: str
    external_user_id: str
    user_agent: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_seen_at: datetime | None = None
    disabled_at: datetime | None = None

    @property
    def is_enabled(self) -> bool:
        return self.disabled_at is None


__all__ = ["DESTINATION_PROVIDER_ONESIGNAL", "NotificationDestination"]
