"""Schemas for push destination registration."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DestinationRegisterRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    onesignal_id: str = Field(..., min_length=1, max_length=255)
    platform: str = Field(..., min_length=1, max_length=32)


class DestinationRead(BaseModel):
    """Push destination as returned to its owner."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    provider: str
    provider_id: str
    platform: str
    external_user_id: str
    user_agent: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_seen_at: datetime | None = None
    disabled_at: datetime | None = None


class DestinationDisableResponse(BaseModel):
    disabled: int


class EventAcceptedResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    event_id: str
    message_id: str


__all__ = [
    "DestinationDisableResponse",
    "DestinationRead",
    "DestinationRegisterRequest",
    "EventAcceptedResponse",
]
