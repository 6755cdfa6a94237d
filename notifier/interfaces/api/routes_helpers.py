"""Helper utilities shared across API route handlers."""

from notifier.domain.entities import Notification, NotificationDestination
from notifier.interfaces.api.schemas import DestinationRead, NotificationRead


def is_origin_allowed(origin: str | None, allowed_origins: list[str]) -> bool:
    """Return whether a websocket ``origin`` may connect.

    An empty allow-list disables the check.
    """

    if not allowed_origins:
        return True
    if not origin:
        return False
    return origin.rstrip("/") in {value.rstrip("/") for value in allowed_origins}


def notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead(
        id=notification.id or "",
        user_id=notification.user_id,
        practice_id=notification.practice_id,
        category=notification.category,
        entity_type=notification.entity_type,
        entity_id=notification.entity_id,
        title=notification.title,
        body=notification.body,
        link=notification.link,
        sender_name=notification.sender_name,
        sender_avatar_url=notification.sender_avatar_url,
        severity=notification.severity,
        metadata=notification.metadata,
        created_at=notification.created_at,
    )


def destination_to_schema(destination: NotificationDestination) -> DestinationRead:
    return DestinationRead(
        id=destination.id or "",
        provider=destination.provider,
        provider_id=destination.provider_id,
        platform=destination.platform,
        external_user_id=destination.external_user_id,
        user_agent=destination.user_agent,
        created_at=destination.created_at,
        updated_at=destination.updated_at,
        last_seen_at=destination.last_seen_at,
        disabled_at=destination.disabled_at,
    )
