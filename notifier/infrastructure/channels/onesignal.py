"""Push delivery through the OneSignal REST API."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from notifier.config import DEFAULT_ONESIGNAL_API_BASE

from .base import ChannelContent, ChannelDeliveryError, ChannelNotConfiguredError

logger = logging.getLogger(__name__)

PROVIDER_NAME = "onesignal"


def _parse_json(text: str) -> Any:
    if not text:
        return {}
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return {}


def _error_codes(errors: Any) -> list[str]:
    """Return structured error codes from a OneSignal ``errors`` value.

    OneSignal reports either a list of messages or a mapping such as
    ``{"invalid_external_user_ids": [...]}``; only the mapping keys are codes.
    """

    if isinstance(errors, dict):
        return [str(key) for key in errors]
    return []


class OneSignalPushClient:
    """Thin async wrapper over the OneSignal notifications endpoint."""

    provider = PROVIDER_NAME

    def __init__(
        self,
        app_id: str | None,
        rest_api_key: str | None,
        *,
        api_base: str = DEFAULT_ONESIGNAL_API_BASE,
        timeout_seconds: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._app_id = app_id or ""
        self._rest_api_key = rest_api_key or ""
        self._api_base = api_base.rstrip("/")
        self._timeout = httpx.Timeout(timeout_seconds)
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def is_configured(self) -> bool:
        return bool(self._app_id and self._rest_api_key)

    async def send_push(self, external_user_id: str, content: ChannelContent) -> dict[str, Any]:
        """Send ``content`` to every push subscription of ``external_user_id``."""

        payload: dict[str, Any] = {
            "app_id": self._app_id,
            "headings": {"en": content.title},
            "contents": {"en": content.body or ""},
            "include_external_user_ids": [external_user_id],
            "channel_for_external_user_ids": "push",
        }
        if content.url:
            payload["url"] = content.url
        if content.data:
            payload["data"] = content.data
        return await self._send(payload)

    async def link_external_user_id(self, provider_id: str, external_user_id: str) -> None:
        """Attach ``external_user_id`` to the subscription ``provider_id``."""

        self._ensure_configured()
        response = await self._request(
            "PATCH",
            f"/apps/{self._app_id}/subscriptions/{provider_id}/user/identity",
            {"app_id": self._app_id, "external_user_id": external_user_id},
        )
        if response.is_error:
            raise ChannelDeliveryError(
                f"OneSignal player update failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
                provider=PROVIDER_NAME,
            )

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _send(self, payload: dict[str, Any]) -> dict[str, Any]:
        self._ensure_configured()
        response = await self._request("POST", "/notifications", payload)
        text = response.text
        parsed = _parse_json(text)
        errors = parsed.get("errors") if isinstance(parsed, dict) else None

        if response.is_error:
            raise ChannelDeliveryError(
                f"OneSignal request failed ({response.status_code}): {text}",
                status_code=response.status_code,
                error_codes=_error_codes(errors),
                provider=PROVIDER_NAME,
            )

        # A 200 without a notification id means nothing was sent.
        if errors and not parsed.get("id"):
            raise ChannelDeliveryError(
                f"OneSignal request failed ({response.status_code}): {text}",
                status_code=response.status_code,
                error_codes=_error_codes(errors),
                provider=PROVIDER_NAME,
            )

        if errors:
            logger.warning("OneSignal accepted notification with errors: %s", errors)
        return parsed if isinstance(parsed, dict) else {}

    async def _request(self, method: str, path: str, payload: dict[str, Any]) -> httpx.Response:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
            self._owns_client = True
        try:
            return await self._client.request(
                method,
                f"{self._api_base}{path}",
                json=payload,
                headers={
                    "Authorization": f"Basic {self._rest_api_key}",
                    "Content-Type": "application/json",
                },
            )
        except httpx.TimeoutException as exc:
            raise ChannelDeliveryError(
                "OneSignal request timed out", provider=PROVIDER_NAME
            ) from exc
        except httpx.RequestError as exc:
            raise ChannelDeliveryError(
                f"OneSignal request error: {exc!s}", provider=PROVIDER_NAME
            ) from exc

    def _ensure_configured(self) -> None:
        if not self.is_configured:
            raise ChannelNotConfiguredError("OneSignal is not configured")


__all__ = ["OneSignalPushClient", "PROVIDER_NAME"]
