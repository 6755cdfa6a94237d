"""Recipient filtering and channel gating rules."""

from __future__ import annotations

from notifier.domain.entities import (
    NOTIFICATION_CATEGORY_MESSAGE,
    NotificationQueueMessage,
    RecipientSnapshot,
)


def should_process_recipient(
    recipient: RecipientSnapshot, message: NotificationQueueMessage
) -> bool:
    """Return whether ``recipient`` should get a notification for ``message``.

    Only chat messages honour ``mentions_only``: such recipients are skipped
    unless the message metadata mentions them.
    """

    if message.category != NOTIFICATION_CATEGORY_MESSAGE:
        return True
    if not recipient.preferences.mentions_only:
        return True
    return recipient.user_id in message.mentioned_user_ids()


def should_send_email(recipient: RecipientSnapshot) -> bool:
    return recipient.preferences.allows_email and bool(recipient.email)


def should_send_push(recipient: RecipientSnapshot) -> bool:
    return recipient.preferences.allows_push


__all__ = ["should_process_recipient", "should_send_email", "should_send_push"]
