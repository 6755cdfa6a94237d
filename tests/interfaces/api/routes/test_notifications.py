"""Tests for the notification history and websocket endpoints."""

from datetime import datetime, timedelta, timezone

import pytest
from starlette.websockets import WebSocketDisconnect

from notifier.config import reset_settings_cache
from notifier.domain.entities import Notification
from notifier.infrastructure.notifications import notification_hub
from notifier.infrastructure.repositories import NotificationRepository

BASE_TIME = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def seed(session, count: int, user_id: str = "u1") -> None:
    repository = NotificationRepository(session)
    for index in range(count):
        repository.create_notification(
            Notification(
                id=None,
                user_id=user_id,
                category="payment" if index % 2 else "matter",
                title=f"n{index}",
                metadata={"index": index},
                created_at=BASE_TIME + timedelta(minutes=index),
            )
        )


def test_list_notifications_pages_with_cursor(client, auth_headers, session):
    seed(session, 3)
    seed(session, 2, user_id="u2")

    first = client.get("/api/notifications", params={"limit": 2}, headers=auth_headers).json()
    second = client.get(
        "/api/notifications",
        params={"limit": 2, "cursor": first["nextCursor"]},
        headers=auth_headers,
    ).json()

    assert [item["title"] for item in first["items"]] == ["n2", "n1"]
    assert first["hasMore"] is True
    assert [item["title"] for item in second["items"]] == ["n0"]
    assert second["hasMore"] is False
    assert second["nextCursor"] is None
    assert first["items"][0]["userId"] == "u1"
    assert first["items"][0]["metadata"] == {"index": 2}


def test_list_notifications_filters_category(client, auth_headers, session):
    seed(session, 4)

    response = client.get(
        "/api/notifications", params={"category": "payment"}, headers=auth_headers
    )

    assert [item["title"] for item in response.json()["items"]] == ["n3", "n1"]


def test_list_notifications_rejects_bad_input(client, auth_headers):
    assert client.get(
        "/api/notifications", params={"cursor": "garbage!"}, headers=auth_headers
    ).status_code == 400
    assert client.get(
        "/api/notifications", params={"limit": 500}, headers=auth_headers
    ).status_code == 422
    assert client.get("/api/notifications").status_code == 401


def test_websocket_answers_ping_and_registers_subscriber(client, token):
    with client.websocket_connect(f"/api/notifications/ws?token={token}") as websocket:
        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}
        assert notification_hub.subscriber_count("u1") == 1

        websocket.send_text("not json")
        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}


def test_websocket_pong_is_sent_through_hub_channel(client, token, monkeypatch):
    replies = []
    unpatched = notification_hub.reply

    async def recording_reply(user_id, subscriber, message):
        replies.append((user_id, message))
        return await unpatched(user_id, subscriber, message)

    monkeypatch.setattr(notification_hub, "reply", recording_reply)

    with client.websocket_connect(f"/api/notifications/ws?token={token}") as websocket:
        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}

    assert replies == [("u1", {"type": "pong"})]


def test_websocket_rejects_missing_or_invalid_token(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/api/notifications/ws"):
            pass
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/api/notifications/ws?token=bad"):
            pass


def test_websocket_checks_origin(client, token, monkeypatch):
    monkeypatch.setenv("ALLOWED_WS_ORIGINS", "https://app.example")
    reset_settings_cache()
    url = f"/api/notifications/ws?token={token}"

    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(url, headers={"Origin": "https://evil.example"}):
            pass

    with client.websocket_connect(url, headers={"Origin": "https://app.example"}) as websocket:
        websocket.send_json({"type": "ping"})
        assert websocket.receive_json() == {"type": "pong"}
