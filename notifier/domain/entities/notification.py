"""Domain entities describing persisted user notifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Final

NOTIFICATION_CATEGORY_MESSAGE: Final[str] = "message"
NOTIFICATION_CATEGORY_PAYMENT: Final[str] = "payment"
NOTIFICATION_CATEGORY_INTAKE: Final[str] = "intake"
NOTIFICATION_CATEGORY_MATTER: Final[str] = "matter"
NOTIFICATION_CATEGORY_SYSTEM: Final[str] = "system"

NOTIFICATION_CATEGORIES: Final[tuple[str, ...]] = (
    NOTIFICATION_CATEGORY_MESSAGE,
    NOTIFICATION_CATEGORY_PAYMENT,
    NOTIFICATION_CATEGORY_INTAKE,
    NOTIFICATION_CATEGORY_MATTER,
    NOTIFICATION_CATEGORY_SYSTEM,
)

NOTIFICATION_SEVERITIES: Final[tuple[str, ...]] = ("info", "success", "warning", "error")


@dataclass
class Notification:
    """Notification delivered to a single recipient.

    Rows are immutable once stored; ``dedupe_key`` collapses repeated creation
    attempts for the same recipient into one row.
    """

    id: str | None
    user_id: str
    category: str
    title: str
    body: str | None = None
    link: str | None = None
    practice_id: str | None = None
    entity_type: str | None = None
    entity_id: str | None = None
    sender_name: str | None = None
    sender_avatar_url: str | None = None
    severity: str | None = None
    metadata: dict[str, Any] | None = None
    dedupe_key: str | None = None
    source_event_id: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class CreateNotificationResult:
    """Outcome of an idempotent notification insert."""

    id: str
    created_at: datetime
    inserted: bool


@dataclass
class NotificationPage:
    """A page of notifications ordered from newest to oldest."""

    items: list[Notification] = field(default_factory=list)
    next_cursor: str | None = None
    has_more: bool = False


def normalize_category(category: str | None) -> str | None:
    """Return the canonical category name or ``None`` when unknown."""

    if not category:
        return None
    normalized = category.strip().lower()
    return normalized if normalized in NOTIFICATION_CATEGORIES else None


__all__ = [
    "CreateNotificationResult",
    "NOTIFICATION_CATEGORIES",
    "NOTIFICATION_CATEGORY_INTAKE",
    "NOTIFICATION_CATEGORY_MATTER",
    "NOTIFICATION_CATEGORY_MESSAGE",
    "NOTIFICATION_CATEGORY_PAYMENT",
    "NOTIFICATION_CATEGORY_SYSTEM",
    "NOTIFICATION_SEVERITIES",
    "Notification",
    "NotificationPage",
    "normalize_category",
]
