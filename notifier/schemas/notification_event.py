"""Pydantic model validating notification events received from the queue."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from notifier.domain.entities import (
    NotificationQueueMessage,
    RecipientPreferences,
    RecipientSnapshot,
)

NotificationCategory = Literal["message", "payment", "intake", "matter", "system"]
NotificationSeverity = Literal["info", "success", "warning", "error"]


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class RecipientPreferencesPayload(_WireModel):
    """Preference flags captured by the producer for one recipient."""

    email_enabled: bool | None = None
    push_enabled: bool | None = None
    desktop_push_enabled: bool | None = None
    mentions_only: bool | None = None


class RecipientSnapshotPayload(_WireModel):
    """Recipient entry of a queued notification event."""

    user_id: str = Field(..., min_length=1, max_length=64)
    email: str | None = None
    preferences: RecipientPreferencesPayload | None = None

    def to_entity(self) -> RecipientSnapshot:
        prefs = self.preferences or RecipientPreferencesPayload()
        return RecipientSnapshot(
            user_id=self.user_id,
            email=self.email or None,
            preferences=RecipientPreferences(
                email_enabled=prefs.email_enabled,
                push_enabled=prefs.push_enabled,
                desktop_push_enabled=prefs.desktop_push_enabled,
                mentions_only=bool(prefs.mentions_only),
            ),
        )


class NotificationEventPayload(_WireModel):
    """JSON envelope placed on the notification queue by producers."""

    event_id: str = Field(..., min_length=1, max_length=64)
    category: NotificationCategory
    title: str = Field(..., min_length=1, max_length=255)
    body: str | None = None
    link: str | None = None
    entity_type: str | None = Field(default=None, max_length=50)
    entity_id: str | None = Field(default=None, max_length=64)
    practice_id: str | None = Field(default=None, max_length=64)
    sender_name: str | None = Field(default=None, max_length=120)
    sender_avatar_url: str | None = None
    severity: NotificationSeverity | None = None
    metadata: dict[str, Any] | None = None
    dedupe_key: str | None = Field(default=None, max_length=255)
    created_at: str | None = None
    recipients: list[RecipientSnapshotPayload] = Field(default_factory=list)

    def to_entity(self) -> NotificationQueueMessage:
        return NotificationQueueMessage(
            event_id=self.event_id,
            category=self.category,
            title=self.title,
            recipients=tuple(recipient.to_entity() for recipient in self.recipients),
            body=self.body,
            link=self.link,
            entity_type=self.entity_type,
            entity_id=self.entity_id,
            practice_id=self.practice_id,
            sender_name=self.sender_name,
            sender_avatar_url=self.sender_avatar_url,
            severity=self.severity,
            metadata=self.metadata,
            dedupe_key=self.dedupe_key or None,
            created_at=self.created_at,
        )


def parse_notification_event(body: Any) -> NotificationQueueMessage:
    """Validate a raw queue body and return the domain message.

    ``body`` may be an already-built :class:`NotificationQueueMessage`, a
    payload model, a mapping, or a JSON string/bytes document. Raises
    :class:`pydantic.ValidationError` for malformed input.
    """

    if isinstance(body, NotificationQueueMessage):
        return body
    if isinstance(body, NotificationEventPayload):
        return body.to_entity()
    if isinstance(body, (str, bytes, bytearray)):
        return NotificationEventPayload.model_validate_json(body).to_entity()
    return NotificationEventPayload.model_validate(body).to_entity()


__all__ = [
    "NotificationEventPayload",
    "RecipientPreferencesPayload",
    "RecipientSnapshotPayload",
    "parse_notification_event",
]
