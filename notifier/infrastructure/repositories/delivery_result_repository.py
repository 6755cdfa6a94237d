"""Append-only ledger of per-channel delivery outcomes."""

from __future__ import annotations

import logging
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from notifier.domain.entities import DeliveryResult
from notifier.infrastructure.models import DeliveryResultModel
from notifier.utils import ensure_app_timezone, now_in_app_timezone

logger = logging.getLogger(__name__)


class DeliveryResultRepository:
    """Record :class:`DeliveryResult` entries for observability.

    Recording never raises: a persistence failure is logged and swallowed so
    the caller's channel attempts carry on.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def record_result(
        self,
        *,
        notification_id: str,
        user_id: str,
        channel: str,
        provider: str,
        status: str,
        error_message: str | None = None,
        external_user_id: str | None = None,
    ) -> DeliveryResult | None:
        model = DeliveryResultModel(
            id=str(uuid4()),
            notification_id=notification_id,
            user_id=user_id,
            channel=channel,
            provider=provider,
            status=status,
            error_message=error_message,
            external_user_id=external_user_id,
            created_at=now_in_app_timezone(),
        )
        try:
            self.session.add(model)
            self.session.commit()
            self.session.refresh(model)
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error(
                "Failed to record %s delivery result for notification %s: %s",
                channel,
                notification_id,
                exc,
                extra={"notification_id": notification_id, "recipient": user_id},
            )
            return None
        return self._to_entity(model)

    def list_for_notification(self, notification_id: str) -> list[DeliveryResult]:
        models = (
            self.session.query(DeliveryResultModel)
            .filter(DeliveryResultModel.notification_id == notification_id)
            .order_by(DeliveryResultModel.created_at, DeliveryResultModel.id)
            .all()
        )
        return [self._to_entity(model) for model in models]

    @staticmethod
    def _to_entity(model: DeliveryResultModel) -> DeliveryResult:
        return DeliveryResult(
            id=model.id,
            notification_id=model.notification_id,
            user_id=model.user_id,
            channel=model.channel,
            provider=model.provider,
            status=model.status,
            error_message=model.error_message,
            external_user_id=model.external_user_id,
            created_at=ensure_app_timezone(model.created_at),
        )


__all__ = ["DeliveryResultRepository"]
