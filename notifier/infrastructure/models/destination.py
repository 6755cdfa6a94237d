"""SQLAlchemy model for push destinations registered by users."""

from sqlalchemy import Column, DateTime, Index, String, Text, UniqueConstraint

from notifier.infrastructure.database import Base
from notifier.utils import now_in_app_timezone


class NotificationDestinationModel(Base):
    """Database representation of a provider subscription for one device."""

    __tablename__ = "notification_destination"
    __table_args__ = (
        UniqueConstraint(
            "provider", "provider_id", name="uq_notification_destination_provider_id"
        ),
        Index("ix_notification_destination_user", "user_id", "updated_at"),
    )

    id = Column(String(36), primary_key=True)
    user_id = Column(String(64), nullable=False)
    provider = Column(String(32), nullable=False, default="onesignal")
    provider_id = Column(String(128), nullable=False)
    platform = Column(String(32), nullable=False)
    external_user_id = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=now_in_app_timezone
    )
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=now_in_app_timezone
    )
    last_seen_at = Column(DateTime(timezone=True), nullable=True)
    disabled_at = Column(DateTime(timezone=True), nullable=True)


__all__ = ["NotificationDestinationModel"]
