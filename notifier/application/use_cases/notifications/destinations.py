"""Use cases for registering and removing push destinations."""

from __future__ import annotations

import logging
from functools import partial

import anyio.to_thread
from sqlalchemy.orm import Session

from notifier.domain.entities import NotificationDestination
from notifier.infrastructure.channels import ChannelProvider
from notifier.infrastructure.repositories import DestinationRepository

logger = logging.getLogger(__name__)


async def register_destination(
    session: Session,
    *,
    user_id: str,
    provider_id: str,
    platform: str,
    user_agent: str | None = None,
    channels: ChannelProvider | None = None,
) -> NotificationDestination:
    """Upsert the device identity for ``user_id`` and link it at the provider.

    The destination is addressed by the user id, so ``external_user_id`` is
    always ``user_id``. Linking the identity at the push provider is best
    effort and never fails the registration.
    """

    provider_id = provider_id.strip()
    if not provider_id:
        msg = "provider_id must not be empty"
        raise ValueError(msg)

    upsert = partial(
        DestinationRepository(session).upsert_destination,
        user_id=user_id,
        provider_id=provider_id,
        platform=platform,
        external_user_id=user_id,
        user_agent=user_agent,
    )
    destination = await anyio.to_thread.run_sync(upsert)

    if channels is not None and channels.push_configured:
        try:
            await channels.link_push_destination(provider_id, user_id)
        except Exception as exc:
            logger.warning(
                "Failed to link push destination %s to user %s: %s",
                provider_id,
                user_id,
                exc,
            )
    return destination


def unregister_destination(session: Session, *, user_id: str, provider_id: str) -> int:
    """Disable ``provider_id`` for ``user_id``; return how many rows changed."""

    return DestinationRepository(session).disable_destination(provider_id, user_id)


def list_destinations(session: Session, user_id: str) -> list[NotificationDestination]:
    return DestinationRepository(session).list_for_user(user_id)


__all__ = ["list_destinations", "register_destination", "unregister_destination"]
