"""Endpoints to register and remove push destinations."""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from notifier.application.use_cases.notifications import (
    list_destinations,
    register_destination,
    unregister_destination,
)
from notifier.infrastructure.channels import ChannelProvider
from notifier.infrastructure.database import get_db
from notifier.interfaces.api.dependencies import get_channel_provider, get_current_user_id
from notifier.interfaces.api.routes_helpers import destination_to_schema
from notifier.interfaces.api.schemas import (
    DestinationDisableResponse,
    DestinationRead,
    DestinationRegisterRequest,
)

router = APIRouter(prefix="/api/notifications/destinations", tags=["destinations"])


@router.post("", response_model=DestinationRead, status_code=status.HTTP_201_CREATED)
async def register_push_destination(
    payload: DestinationRegisterRequest,
    request: Request,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    channels: ChannelProvider | None = Depends(get_channel_provider),
) -> DestinationRead:
    """Register (or re-enable) the caller's device for push notifications."""

    try:
        destination = await register_destination(
            db,
            user_id=user_id,
            provider_id=payload.onesignal_id,
            platform=payload.platform,
            user_agent=request.headers.get("user-agent"),
            channels=channels,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
    return destination_to_schema(destination)


@router.delete("/{onesignal_id}", response_model=DestinationDisableResponse)
def remove_push_destination(
    onesignal_id: str,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> DestinationDisableResponse:
    disabled = unregister_destination(db, user_id=user_id, provider_id=onesignal_id)
    return DestinationDisableResponse(disabled=disabled)


@router.get("", response_model=list[DestinationRead])
def list_push_destinations(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> list[DestinationRead]:
    """Return the caller's enabled destinations, most recently updated first."""

    return [destination_to_schema(destination) for destination in list_destinations(db, user_id)]
