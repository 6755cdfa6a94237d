"""Outbound delivery channels (email and push)."""

from .base import (
    ChannelContent,
    ChannelDeliveryError,
    ChannelNotConfiguredError,
    is_invalid_destination_error,
)
from .email import SendGridEmailClient, build_email_html
from .onesignal import OneSignalPushClient
from .provider import ChannelProvider, build_channel_provider

__all__ = [
    "ChannelContent",
    "ChannelDeliveryError",
    "ChannelNotConfiguredError",
    "ChannelProvider",
    "OneSignalPushClient",
    "SendGridEmailClient",
    "build_channel_provider",
    "build_email_html",
    "is_invalid_destination_error",
]
