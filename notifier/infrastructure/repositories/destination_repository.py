"""Persistence helpers for push destinations and their lifecycle."""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import uuid4

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from notifier.domain.entities import DESTINATION_PROVIDER_ONESIGNAL, NotificationDestination
from notifier.infrastructure.models import NotificationDestinationModel
from notifier.utils import ensure_app_timezone, now_in_app_timezone

logger = logging.getLogger(__name__)


class DestinationRepository:
    """Register, list and disable :class:`NotificationDestination` rows."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def upsert_destination(
        self,
        *,
        user_id: str,
        provider_id: str,
        platform: str,
        external_user_id: str,
        user_agent: str | None = None,
        provider: str = DESTINATION_PROVIDER_ONESIGNAL,
    ) -> NotificationDestination:
        """Create or refresh the destination keyed by ``(provider, provider_id)``.

        Registering always re-enables the destination.
        """

        now = now_in_app_timezone()
        fields = {
            "user_id": user_id,
            "platform": platform,
            "external_user_id": external_user_id,
            "user_agent": user_agent,
        }
        try:
            model = self._get_model(provider, provider_id)
            if model is None:
                model = NotificationDestinationModel(
                    id=str(uuid4()),
                    provider=provider,
                    provider_id=provider_id,
                    created_at=now,
                )
                self._apply_registration(model, fields, now)
                self.session.add(model)
                try:
                    self.session.commit()
                except IntegrityError:
                    # A concurrent registration inserted the row first.
                    self.session.rollback()
                    model = self._get_model(provider, provider_id)
                    if model is None:
                        raise
                    self._apply_registration(model, fields, now)
                    self.session.commit()
            else:
                self._apply_registration(model, fields, now)
                self.session.commit()
            self.session.refresh(model)
        except SQLAlchemyError:
            self.session.rollback()
            raise
        return self._to_entity(model)

    def disable_destinations_for_user(self, user_id: str) -> int:
        """Disable every enabled destination of ``user_id``; return the count."""

        now = now_in_app_timezone()
        statement = (
            update(NotificationDestinationModel)
            .where(NotificationDestinationModel.user_id == user_id)
            .where(NotificationDestinationModel.disabled_at.is_(None))
            .values(disabled_at=now, updated_at=now)
        )
        return self._execute_disable(statement)

    def disable_destination(
        self,
        provider_id: str,
        user_id: str,
        *,
        provider: str = DESTINATION_PROVIDER_ONESIGNAL,
    ) -> int:
        """Disable one destination owned by ``user_id``; return the count."""

        now = now_in_app_timezone()
        statement = (
            update(NotificationDestinationModel)
            .where(NotificationDestinationModel.provider == provider)
            .where(NotificationDestinationModel.provider_id == provider_id)
            .where(NotificationDestinationModel.user_id == user_id)
            .where(NotificationDestinationModel.disabled_at.is_(None))
            .values(disabled_at=now, updated_at=now)
        )
        return self._execute_disable(statement)

    def get_by_provider_id(
        self, provider_id: str, *, provider: str = DESTINATION_PROVIDER_ONESIGNAL
    ) -> NotificationDestination | None:
        model = self._get_model(provider, provider_id)
        if model is None:
            return None
        return self._to_entity(model)

    def list_for_user(
        self, user_id: str, *, include_disabled: bool = False
    ) -> list[NotificationDestination]:
        query = self.session.query(NotificationDestinationModel).filter(
            NotificationDestinationModel.user_id == user_id
        )
        if not include_disabled:
            query = query.filter(NotificationDestinationModel.disabled_at.is_(None))
        query = query.order_by(NotificationDestinationModel.updated_at.desc())
        return [self._to_entity(model) for model in query.all()]

    def _execute_disable(self, statement) -> int:
        try:
            result = self.session.execute(
                statement.execution_options(synchronize_session=False)
            )
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        return int(result.rowcount or 0)

    def _get_model(self, provider: str, provider_id: str) -> NotificationDestinationModel | None:
        return (
            self.session.query(NotificationDestinationModel)
            .filter(NotificationDestinationModel.provider == provider)
            .filter(NotificationDestinationModel.provider_id == provider_id)
            .one_or_none()
        )

    @staticmethod
    def _apply_registration(
        model: NotificationDestinationModel,
        fields: dict[str, str | None],
        now: datetime,
    ) -> None:
        model.user_id = fields["user_id"]
        model.platform = fields["platform"]
        model.external_user_id = fields["external_user_id"]
        model.user_agent = fields["user_agent"]
        model.updated_at = now
        model.last_seen_at = now
        model.disabled_at = None

    @staticmethod
    def _to_entity(model: NotificationDestinationModel) -> NotificationDestination:
        return NotificationDestination(
            id=model.id,
            user_id=model.user_id,
            provider=model.provider,
            provider_id=model.provider_id,
            platform=model.platform,
            external_user_id=model.external_user_id,
            user_agent=model.user_agent,
            created_at=ensure_app_timezone(model.created_at),
            updated_at=ensure_app_timezone(model.updated_at),
            last_seen_at=ensure_app_timezone(model.last_seen_at),
            disabled_at=ensure_app_timezone(model.disabled_at),
        )


__all__ = ["DestinationRepository"]
