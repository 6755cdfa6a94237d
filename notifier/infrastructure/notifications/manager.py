"""Per-user live fan-out of notification events."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

import anyio

logger = logging.getLogger(__name__)

DEFAULT_SEND_TIMEOUT_SECONDS = 5.0


class LiveSubscriber(Protocol):
    """Anything that can receive JSON frames, e.g. a FastAPI ``WebSocket``."""

    async def send_json(self, data: Any) -> None: ...


class UserChannel:
    """Single-writer actor owning the live subscribers of one user.

    Publishes are serialized behind a FIFO lock so every subscriber receives a
    user's events in the order ``publish`` was called. A subscriber that does
    not take a frame within ``send_timeout`` seconds is dropped.
    """

    def __init__(
        self, user_id: str, *, send_timeout: float = DEFAULT_SEND_TIMEOUT_SECONDS
    ) -> None:
        self.user_id = user_id
        self.send_timeout = send_timeout
        self._subscribers: set[LiveSubscriber] = set()
        self._lock = asyncio.Lock()
        self._pending = 0

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def is_idle(self) -> bool:
        return not self._subscribers and self._pending == 0

    def subscribe(self, subscriber: LiveSubscriber) -> None:
        self._subscribers.add(subscriber)

    def unsubscribe(self, subscriber: LiveSubscriber) -> None:
        self._subscribers.discard(subscriber)

    async def publish(self, message: dict[str, Any]) -> int:
        """Send ``message`` to every subscriber and return how many got it."""

        self._pending += 1
        try:
            async with self._lock:
                delivered = 0
                for subscriber in list(self._subscribers):
                    if await self._send(subscriber, message):
                        delivered += 1
                return delivered
        finally:
            self._pending -= 1

    async def reply(self, subscriber: LiveSubscriber, message: dict[str, Any]) -> bool:
        """Send ``message`` to one subscriber, queued behind pending publishes."""

        self._pending += 1
        try:
            async with self._lock:
                if subscriber not in self._subscribers:
                    return False
                return await self._send(subscriber, message)
        finally:
            self._pending -= 1

    async def _send(self, subscriber: LiveSubscriber, message: dict[str, Any]) -> bool:
        try:
            with anyio.fail_after(self.send_timeout):
                await subscriber.send_json(dict(message))
        except TimeoutError:
            logger.warning(
                "Dropping live subscriber for user %s after %ss send timeout",
                self.user_id,
                self.send_timeout,
            )
        except Exception as exc:
            logger.debug(
                "Dropping live subscriber for user %s after send failure: %s",
                self.user_id,
                exc,
            )
        else:
            return True
        self._subscribers.discard(subscriber)
        return False


class NotificationHub:
    """Supervisor addressing one :class:`UserChannel` per user id.

    Events published for a user without connected subscribers are dropped;
    clients recover missed notifications from the notification history.
    """

    def __init__(self, *, send_timeout: float = DEFAULT_SEND_TIMEOUT_SECONDS) -> None:
        self._channels: dict[str, UserChannel] = {}
        self._send_timeout = send_timeout

    async def connect(self, user_id: str, websocket: Any) -> None:
        """Accept the websocket connection and register it for ``user_id``."""

        await websocket.accept()
        self.subscribe(user_id, websocket)

    def disconnect(self, user_id: str, websocket: Any) -> None:
        """Remove ``websocket`` from the pool for ``user_id``."""

        self.unsubscribe(user_id, websocket)

    def subscribe(self, user_id: str, subscriber: LiveSubscriber) -> None:
        channel = self._channels.get(user_id)
        if channel is None:
            channel = UserChannel(user_id, send_timeout=self._send_timeout)
            self._channels[user_id] = channel
        channel.subscribe(subscriber)

    def unsubscribe(self, user_id: str, subscriber: LiveSubscriber) -> None:
        channel = self._channels.get(user_id)
        if channel is None:
            return
        channel.unsubscribe(subscriber)
        self._release_if_idle(channel)

    def subscriber_count(self, user_id: str) -> int:
        channel = self._channels.get(user_id)
        return channel.subscriber_count if channel else 0

    async def publish(self, user_id: str, event: dict[str, Any]) -> int:
        """Fan ``event`` out to the live subscribers of ``user_id``."""

        channel = self._channels.get(user_id)
        if channel is None:
            return 0
        try:
            return await channel.publish(event)
        finally:
            self._release_if_idle(channel)

    async def reply(
        self, user_id: str, subscriber: LiveSubscriber, message: dict[str, Any]
    ) -> bool:
        """Send ``message`` to one subscriber of ``user_id`` through its channel."""

        channel = self._channels.get(user_id)
        if channel is None:
            return False
        try:
            return await channel.reply(subscriber, message)
        finally:
            self._release_if_idle(channel)

    def _release_if_idle(self, channel: UserChannel) -> None:
        if channel.is_idle and self._channels.get(channel.user_id) is channel:
            self._channels.pop(channel.user_id, None)


notification_hub = NotificationHub()


__all__ = [
    "DEFAULT_SEND_TIMEOUT_SECONDS",
    "LiveSubscriber",
    "NotificationHub",
    "UserChannel",
    "notification_hub",
]
