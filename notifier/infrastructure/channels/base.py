"""Shared types and error classification for outbound delivery channels."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Final, Iterable

# Structured provider error codes meaning the addressed destination is gone.
INVALID_DESTINATION_ERROR_CODES: Final[frozenset[str]] = frozenset(
    {
        "invalid_external_user_ids",
        "invalid_player_ids",
        "invalid_aliases",
    }
)

# Fallback substrings matched against the lower-cased provider error text.
INVALID_DESTINATION_MESSAGE_MARKERS: Final[tuple[str, ...]] = (
    "no recipients",
    "no users with this external user id",
    "not subscribed",
    "invalid_player_ids",
)


@dataclass(frozen=True)
class ChannelContent:
    """Content rendered by an email or push provider."""

    title: str
    body: str = ""
    url: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


class ChannelNotConfiguredError(RuntimeError):
    """Raised when a channel is used without its provider credentials."""


class ChannelDeliveryError(Exception):
    """A provider rejected or failed to accept a delivery request."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error_codes: Iterable[str] = (),
        provider: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_codes = frozenset(error_codes)
        self.provider = provider


def is_invalid_destination_error(error: BaseException | str | None) -> bool:
    """Return whether ``error`` says the push destination no longer exists.

    Structured error codes are checked first; the message substrings are only
    a fallback for providers that report plain text.
    """

    if isinstance(error, ChannelDeliveryError) and error.error_codes & INVALID_DESTINATION_ERROR_CODES:
        return True
    message = str(error or "").lower()
    return any(marker in message for marker in INVALID_DESTINATION_MESSAGE_MARKERS)


__all__ = [
    "ChannelContent",
    "ChannelDeliveryError",
    "ChannelNotConfiguredError",
    "INVALID_DESTINATION_ERROR_CODES",
    "INVALID_DESTINATION_MESSAGE_MARKERS",
    "is_invalid_destination_error",
]
