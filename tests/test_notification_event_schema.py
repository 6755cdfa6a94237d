"""Tests for queue message validation."""

import json

import pytest
from pydantic import ValidationError

from notifier.domain.entities import NotificationQueueMessage
from notifier.schemas import NotificationEventPayload, parse_notification_event


def test_parse_camel_case_event():
    message = parse_notification_event(
        {
            "eventId": "evt-1",
            "category": "intake",
            "title": "New intake",
            "practiceId": "p1",
            "senderName": "Ada",
            "senderAvatarUrl": "https://example.com/a.png",
            "severity": "warning",
            "unknownField": "ignored",
            "recipients": [
                {
                    "userId": "u1",
                    "email": "u1@example.com",
                    "preferences": {"emailEnabled": False, "mentionsOnly": True},
                },
                {"userId": "u2"},
            ],
        }
    )

    assert isinstance(message, NotificationQueueMessage)
    assert message.practice_id == "p1"
    assert message.sender_avatar_url == "https://example.com/a.png"
    first, second = message.recipients
    assert first.preferences.allows_email is False
    assert first.preferences.allows_push is True
    assert first.preferences.mentions_only is True
    assert second.email is None
    assert second.preferences.allows_email is True
    assert second.preferences.mentions_only is False


def test_parse_accepts_json_documents_and_entities():
    document = json.dumps({"eventId": "evt-1", "category": "system", "title": "Hi"})

    message = parse_notification_event(document)

    assert message.recipients == ()
    assert parse_notification_event(message) is message
    assert parse_notification_event(document.encode()) == message


@pytest.mark.parametrize(
    "body",
    [
        {"eventId": "evt-1", "category": "billing", "title": "Hi"},
        {"eventId": "", "category": "system", "title": "Hi"},
        {"eventId": "evt-1", "category": "system", "title": "Hi", "severity": "fatal"},
        {"eventId": "evt-1", "category": "system", "title": "Hi", "recipients": [{"email": "x"}]},
        {"eventId": "evt-1", "category": "system", "title": "x" * 256},
        {"eventId": "evt-1", "category": "system", "title": "Hi", "senderName": "x" * 121},
        {"eventId": "evt-1", "category": "system", "title": "Hi", "dedupeKey": "k" * 256},
        {"eventId": "evt-1", "category": "system", "title": "Hi", "recipients": [{"userId": "u" * 65}]},
        "[]",
    ],
)
def test_parse_rejects_invalid_events(body):
    with pytest.raises(ValidationError):
        parse_notification_event(body)


def test_payload_populates_by_field_name():
    payload = NotificationEventPayload(event_id="evt-1", category="matter", title="Updated")

    assert payload.to_entity().event_id == "evt-1"


def test_parse_accepts_values_at_column_limits():
    message = parse_notification_event(
        {
            "eventId": "e" * 64,
            "category": "system",
            "title": "t" * 255,
            "senderName": "s" * 120,
            "recipients": [{"userId": "u" * 64}],
        }
    )

    assert len(message.title) == 255
    assert len(message.sender_name) == 120
