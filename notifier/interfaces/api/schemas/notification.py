"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class NotificationRead(BaseModel):
    """Representation of a stored notification delivered to the client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    user_id: str
    practice_id: str | None = None
    category: str
    entity_type: str | None = None
    entity_id: str | None = None
    title: str
    body: str | None = None
    link: str | None = None
    sender_name: str | None = None
    sender_avatar_url: str | None = None
    severity: str | None = None
    metadata: dict[str, Any] | None = None
    created_at: datetime | None = None


class NotificationPageRead(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: list[NotificationRead] = Field(default_factory=list)
    next_cursor: str | None = None
    has_more: bool = False


__all__ = ["NotificationPageRead", "NotificationRead"]
