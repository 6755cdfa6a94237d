"""Persistence helpers for notification entities."""

from __future__ import annotations

import base64
import json
import logging
from uuid import uuid4

from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from notifier.domain.entities import (
    CreateNotificationResult,
    Notification,
    NotificationPage,
    normalize_category,
)
from notifier.infrastructure.models import NotificationModel
from notifier.utils import (
    ensure_app_timezone,
    isoformat_or_none,
    now_in_app_timezone,
    parse_timestamp,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 50


class NotificationRepository:
    """Durable, idempotent log of :class:`Notification` rows."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def create_notification(self, notification: Notification) -> CreateNotificationResult:
        """Insert ``notification`` unless its dedupe key already exists.

        Rows are unique on ``(dedupe_key, user_id)``. When another writer wins
        the race the unique constraint rejects this insert and the winning
        row's identity is returned with ``inserted=False``.
        """

        dedupe_key = notification.dedupe_key or None
        if dedupe_key is not None:
            existing = self._get_by_dedupe_key(dedupe_key, notification.user_id)
            if existing is not None:
                return self._duplicate_result(existing)

        notification_id = str(uuid4())
        created_at = ensure_app_timezone(notification.created_at) or now_in_app_timezone()
        model = NotificationModel(id=notification_id, created_at=created_at)
        self._apply_entity_to_model(model, notification)
        self.session.add(model)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            if dedupe_key is None:
                raise
            winner = self._get_by_dedupe_key(dedupe_key, notification.user_id)
            if winner is None:
                raise
            logger.debug(
                "Notification dedupe race lost for user %s key %s",
                notification.user_id,
                dedupe_key,
            )
            return self._duplicate_result(winner)
        except SQLAlchemyError:
            self.session.rollback()
            raise

        return CreateNotificationResult(
            id=notification_id, created_at=created_at, inserted=True
        )

    def get(self, notification_id: str) -> Notification | None:
        model = self.session.get(NotificationModel, notification_id)
        if model is None:
            return None
        return self._to_entity(model)

    def count_for_user(self, user_id: str) -> int:
        return (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id)
            .count()
        )

    def list_for_user(
        self,
        user_id: str,
        *,
        category: str | None = None,
        limit: int | None = None,
        cursor: str | None = None,
    ) -> NotificationPage:
        """Return one page of ``user_id``'s notifications, newest first.

        ``cursor`` is the opaque value returned as ``next_cursor`` by the
        previous page. Raises :class:`ValueError` for malformed cursors.
        """

        page_size = _coerce_limit(limit)
        query = self.session.query(NotificationModel).filter(
            NotificationModel.user_id == user_id
        )

        normalized_category = normalize_category(category)
        if normalized_category:
            query = query.filter(NotificationModel.category == normalized_category)

        if cursor:
            cursor_created_at, cursor_id = decode_cursor(cursor)
            query = query.filter(
                or_(
                    NotificationModel.created_at < cursor_created_at,
                    and_(
                        NotificationModel.created_at == cursor_created_at,
                        NotificationModel.id < cursor_id,
                    ),
                )
            )

        models = (
            query.order_by(
                NotificationModel.created_at.desc(), NotificationModel.id.desc()
            )
            .limit(page_size + 1)
            .all()
        )
        has_more = len(models) > page_size
        items = [self._to_entity(model) for model in models[:page_size]]
        next_cursor = None
        if has_more and items:
            last = items[-1]
            next_cursor = encode_cursor(last.created_at, last.id or "")
        return NotificationPage(items=items, next_cursor=next_cursor, has_more=has_more)

    def _get_by_dedupe_key(self, dedupe_key: str, user_id: str) -> NotificationModel | None:
        return (
            self.session.query(NotificationModel)
            .filter(NotificationModel.dedupe_key == dedupe_key)
            .filter(NotificationModel.user_id == user_id)
            .one_or_none()
        )

    @staticmethod
    def _duplicate_result(model: NotificationModel) -> CreateNotificationResult:
        return CreateNotificationResult(
            id=model.id,
            created_at=ensure_app_timezone(model.created_at),
            inserted=False,
        )

    @staticmethod
    def _apply_entity_to_model(model: NotificationModel, notification: Notification) -> None:
        model.user_id = notification.user_id
        model.practice_id = notification.practice_id
        model.category = notification.category
        model.entity_type = notification.entity_type
        model.entity_id = notification.entity_id
        model.title = notification.title
        model.body = notification.body
        model.link = notification.link
        model.sender_name = notification.sender_name
        model.sender_avatar_url = notification.sender_avatar_url
        model.severity = notification.severity
        model.metadata_json = notification.metadata
        model.dedupe_key = notification.dedupe_key or None
        model.source_event_id = notification.source_event_id

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            id=model.id,
            user_id=model.user_id,
            category=model.category,
            title=model.title,
            body=model.body,
            link=model.link,
            practice_id=model.practice_id,
            entity_type=model.entity_type,
            entity_id=model.entity_id,
            sender_name=model.sender_name,
            sender_avatar_url=model.sender_avatar_url,
            severity=model.severity,
            metadata=model.metadata_json,
            dedupe_key=model.dedupe_key,
            source_event_id=model.source_event_id,
            created_at=ensure_app_timezone(model.created_at),
        )


def _coerce_limit(limit: int | None) -> int:
    if limit is None or limit <= 0:
        return DEFAULT_PAGE_SIZE
    return min(int(limit), MAX_PAGE_SIZE)


def encode_cursor(created_at, notification_id: str) -> str:
    """Encode the position after ``(created_at, notification_id)``."""

    payload = json.dumps(
        {"createdAt": isoformat_or_none(created_at), "id": notification_id},
        separators=(",", ":"),
    )
    token = base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")
    return token.rstrip("=")


def decode_cursor(cursor: str):
    """Return the ``(created_at, id)`` pair stored in ``cursor``."""

    padding = "=" * (-len(cursor) % 4)
    try:
        raw = base64.urlsafe_b64decode(cursor + padding)
        parsed = json.loads(raw.decode("utf-8"))
    except (ValueError, UnicodeDecodeError) as exc:
        raise ValueError("Invalid cursor") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Invalid cursor")
    raw_created_at = parsed.get("createdAt")
    created_at = parse_timestamp(raw_created_at) if isinstance(raw_created_at, str) else None
    notification_id = parsed.get("id")
    if created_at is None or not notification_id:
        raise ValueError("Invalid cursor")
    return created_at, str(notification_id)


__all__ = ["NotificationRepository", "decode_cursor", "encode_cursor"]
