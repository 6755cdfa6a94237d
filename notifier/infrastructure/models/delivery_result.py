"""SQLAlchemy model for the append-only delivery audit trail."""

from sqlalchemy import Column, DateTime, Index, String, Text

from notifier.infrastructure.database import Base
from notifier.utils import now_in_app_timezone


class DeliveryResultModel(Base):
    """Outcome of a single channel send attempt."""

    __tablename__ = "notification_delivery_result"
    __table_args__ = (
        Index("ix_delivery_result_user_created", "user_id", "created_at"),
        Index("ix_delivery_result_notification", "notification_id", "created_at"),
    )

    id = Column(String(36), primary_key=True)
    notification_id = Column(String(36), nullable=False)
    user_id = Column(String(64), nullable=False)
    channel = Column(String(16), nullable=False)
    provider = Column(String(32), nullable=False)
    status = Column(String(16), nullable=False)
    error_message = Column(Text, nullable=True)
    external_user_id = Column(String(64), nullable=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=now_in_app_timezone
    )


__all__ = ["DeliveryResultModel"]
