"""Use case for reading a user's notification history."""

from sqlalchemy.orm import Session

from notifier.domain.entities import NotificationPage
from notifier.infrastructure.repositories import NotificationRepository


def list_notifications(
    session: Session,
    user_id: str,
    *,
    category: str | None = None,
    limit: int | None = None,
    cursor: str | None = None,
) -> NotificationPage:
    """Return one page of notifications for ``user_id``, newest first."""

    return NotificationRepository(session).list_for_user(
        user_id, category=category, limit=limit, cursor=cursor
    )
