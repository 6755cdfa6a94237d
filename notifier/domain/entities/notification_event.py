"""Domain representation of a notification event taken from the queue."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Final

_MENTION_METADATA_KEYS: Final[tuple[str, ...]] = (
    "mentionedUserIds",
    "mentionUserIds",
    "mentions",
)


@dataclass(frozen=True)
class RecipientPreferences:
    """Channel preferences captured when the event was enqueued.

    ``None`` means the producer did not send the flag, which counts as enabled.
    """

    email_enabled: bool | None = None
    push_enabled: bool | None = None
    desktop_push_enabled: bool | None = None
    mentions_only: bool = False

    @property
    def allows_email(self) -> bool:
        return self.email_enabled is not False

    @property
    def allows_push(self) -> bool:
        return self.push_enabled is not False and self.desktop_push_enabled is not False


@dataclass(frozen=True)
class RecipientSnapshot:
    """Point-in-time copy of a recipient's contact details and preferences."""

    user_id: str
    email: str | None = None
    preferences: RecipientPreferences = field(default_factory=RecipientPreferences)


@dataclass(frozen=True)
class NotificationQueueMessage:
    """One notification event addressed to many recipients."""

    event_id: str
    category: str
    title: str
    recipients: tuple[RecipientSnapshot, ...] = ()
    body: str | None = None
    link: str | None = None
    entity_type: str | None = None
    entity_id: str | None = None
    practice_id: str | None = None
    sender_name: str | None = None
    sender_avatar_url: str | None = None
    severity: str | None = None
    metadata: dict[str, Any] | None = None
    dedupe_key: str | None = None
    created_at: str | None = None

    def mentioned_user_ids(self) -> list[str]:
        """Return the user ids explicitly mentioned in ``metadata``.

        The first metadata key holding a list wins; non-string entries are
        ignored.
        """

        if not self.metadata:
            return []
        for key in _MENTION_METADATA_KEYS:
            candidate = self.metadata.get(key)
            if isinstance(candidate, list):
                return [value for value in candidate if isinstance(value, str)]
        return []

    def channel_data(self) -> dict[str, Any]:
        """Return the data block attached to email and push payloads."""

        return {
            "link": self.link,
            "category": self.category,
            "entityType": self.entity_type,
            "entityId": self.entity_id,
        }


__all__ = ["NotificationQueueMessage", "RecipientPreferences", "RecipientSnapshot"]
