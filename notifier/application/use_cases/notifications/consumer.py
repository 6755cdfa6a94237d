"""Queue consumer fanning notification events out to their recipients."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Protocol, Sequence

import anyio.to_thread
from pydantic import ValidationError
from sqlalchemy.orm import Session

from notifier.config import Settings
from notifier.domain.entities import (
    DELIVERY_CHANNEL_EMAIL,
    DELIVERY_CHANNEL_PUSH,
    DELIVERY_STATUS_FAILURE,
    DELIVERY_STATUS_SUCCESS,
    CreateNotificationResult,
    Notification,
    NotificationQueueMessage,
    RecipientSnapshot,
)
from notifier.infrastructure.channels import (
    ChannelContent,
    ChannelProvider,
    is_invalid_destination_error,
)
from notifier.infrastructure.notifications import NotificationPublisher
from notifier.infrastructure.repositories import (
    DeliveryResultRepository,
    DestinationRepository,
    NotificationRepository,
)
from notifier.schemas import parse_notification_event
from notifier.utils import parse_timestamp

from .preferences import should_process_recipient, should_send_email, should_send_push

logger = logging.getLogger(__name__)


class AckableMessage(Protocol):
    """A queue delivery carrying a raw ``body`` that must be acknowledged."""

    id: str
    body: Any

    def ack(self) -> None: ...


@dataclass
class BatchReport:
    """Summary of one processed batch."""

    messages: int = 0
    acknowledged: int = 0
    malformed: int = 0
    created: int = 0
    duplicates: int = 0
    filtered: int = 0
    failed_event_ids: list[str] = field(default_factory=list)


class NotificationQueueConsumer:
    """Process notification batches with per-recipient failure isolation.

    For every recipient the notification row is created idempotently; only a
    first insert is published live and sent over email and push. Failures are
    logged and recorded but never requeued, and every message of the batch is
    acknowledged.
    """

    def __init__(
        self,
        *,
        notifications: NotificationRepository,
        deliveries: DeliveryResultRepository,
        destinations: DestinationRepository,
        publisher: NotificationPublisher,
        channels: ChannelProvider | None = None,
        email_enabled: bool = True,
        push_enabled: bool = True,
    ) -> None:
        self._notifications = notifications
        self._deliveries = deliveries
        self._destinations = destinations
        self._publisher = publisher
        self._channels = channels
        self._email_enabled = email_enabled
        self._push_enabled = push_enabled

    async def process_batch(self, messages: Sequence[AckableMessage]) -> BatchReport:
        report = BatchReport(messages=len(messages))
        for queued in messages:
            try:
                await self._process_queued(queued, report)
            finally:
                queued.ack()
                report.acknowledged += 1
        return report

    async def process_message(
        self, message: NotificationQueueMessage, report: BatchReport | None = None
    ) -> bool:
        """Fan ``message`` out to its recipients; return whether any step failed."""

        report = report if report is not None else BatchReport(messages=1)
        had_failure = False
        for recipient in message.recipients:
            try:
                if not should_process_recipient(recipient, message):
                    report.filtered += 1
                    continue
                if not await self._process_recipient(recipient, message, report):
                    had_failure = True
            except Exception as exc:
                had_failure = True
                logger.warning(
                    "Failed to process notification message %s for recipient %s: %s",
                    message.event_id,
                    recipient.user_id,
                    exc,
                    extra={"event_id": message.event_id, "recipient": recipient.user_id},
                )

        if had_failure:
            report.failed_event_ids.append(message.event_id)
            logger.warning(
                "Notification message %s partially failed; skipping retry to avoid duplicates",
                message.event_id,
                extra={"event_id": message.event_id},
            )
        return had_failure

    async def _process_queued(self, queued: AckableMessage, report: BatchReport) -> None:
        try:
            message = parse_notification_event(queued.body)
        except ValidationError as exc:
            report.malformed += 1
            logger.error(
                "Discarding malformed notification message %s: %s",
                getattr(queued, "id", None),
                exc,
            )
            return
        await self.process_message(message, report)

    async def _process_recipient(
        self,
        recipient: RecipientSnapshot,
        message: NotificationQueueMessage,
        report: BatchReport,
    ) -> bool:
        result = await anyio.to_thread.run_sync(
            self._notifications.create_notification,
            _build_notification(recipient, message),
        )
        if not result.inserted:
            report.duplicates += 1
            return True
        report.created += 1

        succeeded = await self._publish_live(recipient, message, result)
        content = ChannelContent(
            title=message.title,
            body=message.body or "",
            url=message.link,
            data=message.channel_data(),
        )
        if not await self._deliver_email(recipient, message, result, content):
            succeeded = False
        await self._deliver_push(recipient, message, result, content)
        return succeeded

    async def _publish_live(
        self,
        recipient: RecipientSnapshot,
        message: NotificationQueueMessage,
        result: CreateNotificationResult,
    ) -> bool:
        try:
            await self._publisher.publish_created(
                recipient.user_id, result, category=message.category, title=message.title
            )
        except Exception as exc:
            logger.warning(
                "Failed to publish notification %s to hub for recipient %s: %s",
                result.id,
                recipient.user_id,
                exc,
                extra={"event_id": message.event_id, "recipient": recipient.user_id},
            )
            return False
        return True

    async def _deliver_email(
        self,
        recipient: RecipientSnapshot,
        message: NotificationQueueMessage,
        result: CreateNotificationResult,
        content: ChannelContent,
    ) -> bool:
        channels = self._channels
        if not (
            self._email_enabled
            and channels is not None
            and channels.email_configured
            and should_send_email(recipient)
        ):
            return True

        provider = channels.email_provider or "unknown"
        try:
            await channels.send_email(recipient.email, content)
        except Exception as exc:
            await self._record_result(
                notification_id=result.id,
                user_id=recipient.user_id,
                channel=DELIVERY_CHANNEL_EMAIL,
                provider=provider,
                status=DELIVERY_STATUS_FAILURE,
                error_message=str(exc),
            )
            logger.warning(
                "Failed to send email notification %s to recipient %s: %s",
                result.id,
                recipient.user_id,
                exc,
                extra={"event_id": message.event_id, "recipient": recipient.user_id},
            )
            return False

        await self._record_result(
            notification_id=result.id,
            user_id=recipient.user_id,
            channel=DELIVERY_CHANNEL_EMAIL,
            provider=provider,
            status=DELIVERY_STATUS_SUCCESS,
        )
        return True

    async def _deliver_push(
        self,
        recipient: RecipientSnapshot,
        message: NotificationQueueMessage,
        result: CreateNotificationResult,
        content: ChannelContent,
    ) -> None:
        """Send the push notification; failures are recorded then re-raised."""

        channels = self._channels
        if not (
            self._push_enabled
            and channels is not None
            and channels.push_configured
            and should_send_push(recipient)
        ):
            return

        provider = channels.push_provider or "unknown"
        try:
            await channels.send_push(recipient.user_id, content)
        except Exception as exc:
            await self._record_result(
                notification_id=result.id,
                user_id=recipient.user_id,
                channel=DELIVERY_CHANNEL_PUSH,
                provider=provider,
                status=DELIVERY_STATUS_FAILURE,
                error_message=str(exc),
                external_user_id=recipient.user_id,
            )
            if is_invalid_destination_error(exc):
                await self._disable_destinations(recipient.user_id, message.event_id)
            raise

        await self._record_result(
            notification_id=result.id,
            user_id=recipient.user_id,
            channel=DELIVERY_CHANNEL_PUSH,
            provider=provider,
            status=DELIVERY_STATUS_SUCCESS,
            external_user_id=recipient.user_id,
        )

    async def _record_result(self, **fields: Any) -> None:
        await anyio.to_thread.run_sync(partial(self._deliveries.record_result, **fields))

    async def _disable_destinations(self, user_id: str, event_id: str) -> None:
        disabled = await anyio.to_thread.run_sync(
            self._destinations.disable_destinations_for_user, user_id
        )
        logger.info(
            "Disabled %s push destination(s) for user %s after provider rejection",
            disabled,
            user_id,
            extra={"event_id": event_id, "recipient": user_id},
        )


def _build_notification(
    recipient: RecipientSnapshot, message: NotificationQueueMessage
) -> Notification:
    return Notification(
        id=None,
        user_id=recipient.user_id,
        category=message.category,
        title=message.title,
        body=message.body,
        link=message.link,
        practice_id=message.practice_id,
        entity_type=message.entity_type,
        entity_id=message.entity_id,
        sender_name=message.sender_name,
        sender_avatar_url=message.sender_avatar_url,
        severity=message.severity,
        metadata=message.metadata,
        dedupe_key=message.dedupe_key,
        source_event_id=message.event_id,
        created_at=parse_timestamp(message.created_at),
    )


def build_consumer(
    session: Session,
    *,
    publisher: NotificationPublisher,
    channels: ChannelProvider | None,
    email_enabled: bool = True,
    push_enabled: bool = True,
) -> NotificationQueueConsumer:
    """Wire a consumer whose repositories share ``session``."""

    return NotificationQueueConsumer(
        notifications=NotificationRepository(session),
        deliveries=DeliveryResultRepository(session),
        destinations=DestinationRepository(session),
        publisher=publisher,
        channels=channels,
        email_enabled=email_enabled,
        push_enabled=push_enabled,
    )


async def process_notification_batch(
    messages: Sequence[AckableMessage],
    *,
    session_factory: Callable[[], Session],
    publisher: NotificationPublisher,
    channels: ChannelProvider | None,
    settings: Settings,
) -> BatchReport:
    """Process ``messages`` on a fresh session that is closed afterwards."""

    session = session_factory()
    try:
        consumer = build_consumer(
            session,
            publisher=publisher,
            channels=channels,
            email_enabled=settings.enable_email_notifications,
            push_enabled=settings.enable_push_notifications,
        )
        report = await consumer.process_batch(messages)
    finally:
        await anyio.to_thread.run_sync(session.close)

    logger.info(
        "Processed notification batch: %s message(s), %s created, %s duplicate(s), "
        "%s filtered, %s malformed, %s partially failed",
        report.messages,
        report.created,
        report.duplicates,
        report.filtered,
        report.malformed,
        len(report.failed_event_ids),
    )
    return report


__all__ = [
    "AckableMessage",
    "BatchReport",
    "NotificationQueueConsumer",
    "build_consumer",
    "process_notification_batch",
]
