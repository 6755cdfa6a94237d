"""Endpoints and websocket handler for notification history and live updates."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from notifier.application.use_cases.notifications import list_notifications
from notifier.config import get_settings
from notifier.infrastructure.database import get_db
from notifier.infrastructure.notifications import notification_hub
from notifier.infrastructure.repositories.notification_repository import MAX_PAGE_SIZE
from notifier.interfaces.api.dependencies import get_current_user_id, resolve_current_user_id
from notifier.interfaces.api.routes_helpers import is_origin_allowed, notification_to_schema
from notifier.interfaces.api.schemas import NotificationPageRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=NotificationPageRead)
def list_user_notifications(
    category: str | None = Query(default=None),
    limit: int | None = Query(default=None, ge=1, le=MAX_PAGE_SIZE),
    cursor: str | None = Query(default=None),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> NotificationPageRead:
    """Return one page of the authenticated user's notifications, newest first."""

    try:
        page = list_notifications(db, user_id, category=category, limit=limit, cursor=cursor)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return NotificationPageRead(
        items=[notification_to_schema(notification) for notification in page.items],
        next_cursor=page.next_cursor,
        has_more=page.has_more,
    )


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams live notification events to their owner."""

    if not is_origin_allowed(websocket.headers.get("origin"), get_settings().ws_origins):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    try:
        user_id = resolve_current_user_id(token)
    except HTTPException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await notification_hub.connect(user_id, websocket)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except ValueError:
                continue

            if isinstance(message, dict) and message.get("type") == "ping":
                # Replies share the hub channel so the socket keeps a single writer.
                if not await notification_hub.reply(user_id, websocket, {"type": "pong"}):
                    break
    except WebSocketDisconnect:
        logger.debug("Live subscriber for user %s disconnected", user_id)
    finally:
        notification_hub.disconnect(user_id, websocket)
