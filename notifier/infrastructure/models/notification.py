"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import Column, DateTime, Index, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import JSON

from notifier.infrastructure.database import Base
from notifier.utils import now_in_app_timezone

_json_type = JSON().with_variant(JSONB(), "postgresql")


class NotificationModel(Base):
    """Database representation for user notifications."""

    __tablename__ = "notification"
    __table_args__ = (
        UniqueConstraint("dedupe_key", "user_id", name="uq_notification_dedupe_user"),
        Index("ix_notification_user_created", "user_id", "created_at"),
    )

    id = Column(String(36), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    practice_id = Column(String(64), nullable=True)
    category = Column(String(20), nullable=False)
    entity_type = Column(String(50), nullable=True)
    entity_id = Column(String(64), nullable=True)
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=True)
    link = Column(Text, nullable=True)
    sender_name = Column(String(120), nullable=True)
    sender_avatar_url = Column(Text, nullable=True)
    severity = Column(String(20), nullable=True)
    # ``metadata`` is reserved on declarative classes.
    metadata_json = Column("metadata", _json_type, nullable=True)
    dedupe_key = Column(String(255), nullable=True)
    source_event_id = Column(String(64), nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=now_in_app_timezone
    )


__all__ = ["NotificationModel"]
