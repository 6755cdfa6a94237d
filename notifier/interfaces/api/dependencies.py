"""FastAPI dependency utilities."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from notifier.infrastructure.channels import ChannelProvider
from notifier.infrastructure.queue import NotificationQueue
from notifier.infrastructure.security import resolve_user_id

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")


def resolve_current_user_id(token: str) -> str:
    """Resolve the authenticated user id for the provided token."""

    try:
        return resolve_user_id(token)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


def get_current_user_id(token: str = Depends(oauth2_scheme)) -> str:
    """Return the id of the user owning the bearer token."""

    return resolve_current_user_id(token)


def get_channel_provider(request: Request) -> ChannelProvider | None:
    return getattr(request.app.state, "channels", None)


def get_notification_queue(request: Request) -> NotificationQueue:
    """Return the queue started by the application lifespan."""

    queue = getattr(request.app.state, "notification_queue", None)
    if queue is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Notification queue is not running",
        )
    return queue
