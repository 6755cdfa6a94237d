"""In-process notification queue and the worker draining it in batches."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

import anyio
from anyio.abc import TaskStatus
from sqlalchemy.orm import Session

from notifier.application.use_cases.notifications import process_notification_batch
from notifier.config import Settings
from notifier.infrastructure.channels import ChannelProvider
from notifier.infrastructure.notifications import NotificationPublisher

logger = logging.getLogger(__name__)


class NotificationQueueFull(RuntimeError):
    """Raised when the queue buffer cannot take another message."""


@dataclass
class QueuedMessage:
    """One queue delivery; ``ack`` removes it from the in-flight set."""

    body: Any
    id: str = field(default_factory=lambda: str(uuid4()))
    acked: bool = False

    def ack(self) -> None:
        self.acked = True


class NotificationQueue:
    """Bounded FIFO of :class:`QueuedMessage` built on an anyio memory stream."""

    def __init__(self, *, max_buffer: int = 1000) -> None:
        self._send_stream, self._receive_stream = anyio.create_memory_object_stream(
            max_buffer
        )

    async def send(self, body: Any) -> QueuedMessage:
        message = QueuedMessage(body=body)
        await self._send_stream.send(message)
        return message

    def send_nowait(self, body: Any) -> QueuedMessage:
        message = QueuedMessage(body=body)
        try:
            self._send_stream.send_nowait(message)
        except anyio.WouldBlock as exc:
            raise NotificationQueueFull("Notification queue is full") from exc
        return message

    async def receive_batch(
        self, max_messages: int, *, wait_seconds: float = 1.0
    ) -> list[QueuedMessage]:
        """Wait for one message, then collect more for up to ``wait_seconds``.

        Returns an empty list once the queue is closed and drained.
        """

        try:
            batch = [await self._receive_stream.receive()]
        except anyio.EndOfStream:
            return []

        with anyio.move_on_after(wait_seconds):
            while len(batch) < max_messages:
                try:
                    batch.append(await self._receive_stream.receive())
                except anyio.EndOfStream:
                    break
        return batch

    def pending(self) -> int:
        return self._receive_stream.statistics().current_buffer_used

    def close(self) -> None:
        """Stop accepting messages; buffered ones are still delivered."""

        self._send_stream.close()


async def run_notification_worker(
    queue: NotificationQueue,
    *,
    session_factory: Callable[[], Session],
    publisher: NotificationPublisher,
    channels: ChannelProvider | None,
    settings: Settings,
    task_status: TaskStatus[None] = anyio.TASK_STATUS_IGNORED,
) -> None:
    """Drain ``queue`` batch by batch until it is closed.

    A batch that has been received is processed to acknowledgement even if
    the worker is cancelled meanwhile.
    """

    if not settings.enable_email_notifications:
        logger.info("Email notifications are disabled")
    if not settings.enable_push_notifications:
        logger.info("Push notifications are disabled")

    task_status.started()
    logger.info("Notification worker started")
    while True:
        batch = await queue.receive_batch(
            settings.notification_queue_batch_size,
            wait_seconds=settings.notification_queue_batch_wait_seconds,
        )
        if not batch:
            break
        with anyio.CancelScope(shield=True):
            try:
                await process_notification_batch(
                    batch,
                    session_factory=session_factory,
                    publisher=publisher,
                    channels=channels,
                    settings=settings,
                )
            except Exception:
                logger.exception(
                    "Error processing notification batch of %s message(s)", len(batch)
                )
    logger.info("Notification worker stopped")


__all__ = [
    "NotificationQueue",
    "NotificationQueueFull",
    "QueuedMessage",
    "run_notification_worker",
]
