"""Internal endpoint enqueueing notification events from other services."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, status

from notifier.config import Settings, get_settings
from notifier.infrastructure.queue import NotificationQueue, NotificationQueueFull
from notifier.infrastructure.security import tokens_match
from notifier.interfaces.api.dependencies import get_notification_queue
from notifier.interfaces.api.schemas import EventAcceptedResponse
from notifier.schemas import NotificationEventPayload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/internal/notifications", tags=["ingest"])


def require_ingest_token(
    x_ingest_token: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Check the shared secret sent by producers."""

    expected = settings.notification_ingest_token
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Event ingestion is not configured",
        )
    if not tokens_match(x_ingest_token, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid ingest token",
        )


@router.post(
    "/events",
    response_model=EventAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    dependencies=[Depends(require_ingest_token)],
)
def ingest_notification_event(
    payload: NotificationEventPayload,
    queue: NotificationQueue = Depends(get_notification_queue),
) -> EventAcceptedResponse:
    """Validate a notification event and hand it to the queue worker."""

    message = payload.to_entity()
    try:
        queued = queue.send_nowait(message)
    except NotificationQueueFull as exc:
        logger.warning("Rejecting notification event %s: queue is full", message.event_id)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    return EventAcceptedResponse(event_id=message.event_id, message_id=queued.id)
