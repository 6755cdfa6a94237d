"""Channel provider adapter combining the email and push clients."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import anyio.to_thread

from notifier.config import Settings

from .base import ChannelContent, ChannelNotConfiguredError
from .email import SendGridEmailClient
from .onesignal import OneSignalPushClient

logger = logging.getLogger(__name__)


class EmailClient(Protocol):
    provider: str

    @property
    def is_configured(self) -> bool: ...

    def send_email(self, address: str, content: ChannelContent) -> Any: ...


class PushClient(Protocol):
    provider: str

    @property
    def is_configured(self) -> bool: ...

    async def send_push(self, external_user_id: str, content: ChannelContent) -> Any: ...


class ChannelProvider:
    """Uniform async entry point for email and push sends.

    Whether a channel is configured is decided once, when the provider is
    built; an unconfigured channel stays disabled for the process lifetime.
    """

    def __init__(
        self,
        *,
        email_client: EmailClient | None = None,
        push_client: PushClient | None = None,
    ) -> None:
        self._email_client = email_client if email_client and email_client.is_configured else None
        self._push_client = push_client if push_client and push_client.is_configured else None

    @property
    def email_configured(self) -> bool:
        return self._email_client is not None

    @property
    def push_configured(self) -> bool:
        return self._push_client is not None

    @property
    def email_provider(self) -> str | None:
        return self._email_client.provider if self._email_client else None

    @property
    def push_provider(self) -> str | None:
        return self._push_client.provider if self._push_client else None

    async def send_email(self, address: str, content: ChannelContent) -> Any:
        if self._email_client is None:
            raise ChannelNotConfiguredError("Email channel is not configured")
        # The SendGrid client is blocking.
        return await anyio.to_thread.run_sync(
            self._email_client.send_email, address, content
        )

    async def send_push(self, user_id: str, content: ChannelContent) -> Any:
        if self._push_client is None:
            raise ChannelNotConfiguredError("Push channel is not configured")
        return await self._push_client.send_push(user_id, content)

    async def link_push_destination(self, provider_id: str, external_user_id: str) -> bool:
        """Tell the push provider which user owns ``provider_id``.

        Returns ``False`` when the push client has no such capability.
        """

        link = getattr(self._push_client, "link_external_user_id", None)
        if link is None:
            return False
        await link(provider_id, external_user_id)
        return True

    async def aclose(self) -> None:
        close = getattr(self._push_client, "aclose", None)
        if close is not None:
            await close()


def build_channel_provider(settings: Settings) -> ChannelProvider:
    """Create the channel provider from the configured credentials."""

    email_client = SendGridEmailClient(settings.sendgrid_api_key, settings.sendgrid_sender)
    push_client = OneSignalPushClient(
        settings.onesignal_app_id,
        settings.onesignal_rest_api_key,
        api_base=settings.onesignal_api_base,
        timeout_seconds=settings.onesignal_timeout_seconds,
    )
    provider = ChannelProvider(email_client=email_client, push_client=push_client)
    if not provider.email_configured:
        logger.warning("SendGrid configuration incomplete; email delivery disabled")
    if not provider.push_configured:
        logger.warning("OneSignal delivery disabled - missing credentials")
    return provider


__all__ = ["ChannelProvider", "EmailClient", "PushClient", "build_channel_provider"]
