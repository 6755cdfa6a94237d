"""Email delivery for notifications via SendGrid."""

from __future__ import annotations

import html
import json
import logging
from typing import Any

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from .base import ChannelContent, ChannelDeliveryError, ChannelNotConfiguredError

logger = logging.getLogger(__name__)

PROVIDER_NAME = "sendgrid"


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages: list[str] = []
            for item in errors:
                if not isinstance(item, dict):
                    continue
                message = item.get("message")
                help_link = item.get("help")
                if message and help_link:
                    messages.append(f"{message} (help: {help_link})")
                elif message:
                    messages.append(str(message))
            if messages:
                return "; ".join(messages)
        # Fall back to a JSON string for unrecognised payloads
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        try:
            return "; ".join(str(item) for item in parsed)
        except TypeError:
            return None

    return None


def _sendgrid_error_fields(body: Any) -> list[str]:
    """Return the ``field`` names SendGrid flagged in an error payload."""

    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except json.JSONDecodeError:
            return []
    if not isinstance(body, dict) or not isinstance(body.get("errors"), list):
        return []
    return [
        str(item["field"])
        for item in body["errors"]
        if isinstance(item, dict) and item.get("field")
    ]


def build_email_html(content: ChannelContent) -> str:
    """Render the escaped notification body, plus the link, as HTML."""

    lines = [content.body] if content.body else []
    if content.url:
        lines.append(f"Open: {content.url}")
    escaped = html.escape("\n".join(lines))
    return "<p>" + escaped.replace("\n", "<br>") + "</p>"


class SendGridEmailClient:
    """Send notification emails through the SendGrid REST API."""

    provider = PROVIDER_NAME

    def __init__(self, api_key: str | None, sender: str | None) -> None:
        self._api_key = api_key
        self._sender = sender

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key and self._sender)

    def send_email(self, address: str, content: ChannelContent) -> dict[str, Any]:
        """Send ``content`` to ``address``.

        Raises :class:`ChannelDeliveryError` when SendGrid rejects the request
        so the caller can record the failure detail.
        """

        if not self.is_configured:
            raise ChannelNotConfiguredError("SendGrid is not configured")

        message = Mail(
            from_email=self._sender,
            to_emails=address,
            subject=content.title,
            html_content=build_email_html(content),
        )

        try:
            client = SendGridAPIClient(self._api_key)
            response = client.send(message)
        except Exception as exc:
            raise self._error_from_exception(exc) from exc

        status_code = getattr(response, "status_code", None)
        if not isinstance(status_code, int) or not 200 <= status_code < 300:
            body = getattr(response, "body", None)
            details = _extract_sendgrid_error_details(body)
            logger.error(
                "SendGrid API responded with status %s: %s", status_code, details
            )
            message_text = f"SendGrid request failed ({status_code})"
            if details:
                message_text = f"{message_text}: {details}"
            raise ChannelDeliveryError(
                message_text,
                status_code=status_code if isinstance(status_code, int) else None,
                error_codes=_sendgrid_error_fields(body),
                provider=PROVIDER_NAME,
            )

        headers = getattr(response, "headers", None) or {}
        message_id = headers.get("X-Message-Id") if hasattr(headers, "get") else None
        return {"status_code": status_code, "message_id": message_id}

    @staticmethod
    def _error_from_exception(exc: Exception) -> ChannelDeliveryError:
        """Log a SendGrid API error and wrap it with troubleshooting details."""

        status_code = getattr(exc, "status_code", None)
        body = getattr(exc, "body", None)
        details = _extract_sendgrid_error_details(body)

        if status_code and details:
            logger.error(
                "SendGrid API request failed with status %s: %s", status_code, details
            )
            message = f"SendGrid request failed ({status_code}): {details}"
        elif status_code:
            logger.error("SendGrid API request failed with status %s", status_code)
            message = f"SendGrid request failed ({status_code})"
        elif details:
            logger.error("SendGrid API request failed: %s", details)
            message = f"SendGrid request failed: {details}"
        else:
            logger.exception("Error sending email via SendGrid: %s", exc)
            message = f"SendGrid request failed: {exc}"

        return ChannelDeliveryError(
            message,
            status_code=status_code if isinstance(status_code, int) else None,
            error_codes=_sendgrid_error_fields(body),
            provider=PROVIDER_NAME,
        )


__all__ = ["PROVIDER_NAME", "SendGridEmailClient", "build_email_html"]
