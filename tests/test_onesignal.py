"""Tests for the OneSignal push client."""

from __future__ import annotations

import json

import httpx
import pytest

from notifier.infrastructure.channels import (
    ChannelContent,
    ChannelDeliveryError,
    ChannelNotConfiguredError,
    OneSignalPushClient,
    is_invalid_destination_error,
)

CONTENT = ChannelContent(
    title="Invoice paid",
    body="Invoice #42 was paid",
    url="/invoices/42",
    data={"category": "payment"},
)


def make_client(handler) -> OneSignalPushClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OneSignalPushClient(
        "app-1",
        "rest-key",
        api_base="https://onesignal.test/api/v1/",
        http_client=http_client,
    )


@pytest.mark.anyio
async def test_send_push_targets_external_user_id():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"id": "notif-1", "recipients": 1})

    client = make_client(handler)

    result = await client.send_push("u1", CONTENT)

    assert result["id"] == "notif-1"
    request = requests[0]
    assert request.method == "POST"
    assert str(request.url) == "https://onesignal.test/api/v1/notifications"
    assert request.headers["Authorization"] == "Basic rest-key"
    payload = json.loads(request.content)
    assert payload["app_id"] == "app-1"
    assert payload["include_external_user_ids"] == ["u1"]
    assert payload["channel_for_external_user_ids"] == "push"
    assert payload["headings"] == {"en": "Invoice paid"}
    assert payload["contents"] == {"en": "Invoice #42 was paid"}
    assert payload["url"] == "/invoices/42"
    assert payload["data"] == {"category": "payment"}


@pytest.mark.anyio
async def test_success_status_without_id_is_a_failure():
    """OneSignal answers 200 with errors when no subscription matched."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"id": "", "errors": {"invalid_external_user_ids": ["u1"]}})

    client = make_client(handler)

    with pytest.raises(ChannelDeliveryError) as excinfo:
        await client.send_push("u1", CONTENT)

    assert excinfo.value.error_codes == frozenset({"invalid_external_user_ids"})
    assert str(excinfo.value).startswith("OneSignal request failed (200)")
    assert is_invalid_destination_error(excinfo.value)


@pytest.mark.anyio
async def test_error_status_raises_with_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"errors": ["All included players are not subscribed"]})

    client = make_client(handler)

    with pytest.raises(ChannelDeliveryError) as excinfo:
        await client.send_push("u1", CONTENT)

    assert excinfo.value.status_code == 400
    assert excinfo.value.error_codes == frozenset()
    assert "not subscribed" in str(excinfo.value)
    assert is_invalid_destination_error(excinfo.value)


@pytest.mark.anyio
async def test_transport_errors_are_wrapped():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)

    with pytest.raises(ChannelDeliveryError, match="OneSignal request error"):
        await client.send_push("u1", CONTENT)


@pytest.mark.anyio
async def test_link_external_user_id_patches_subscription_identity():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"identity": {"external_id": "u1"}})

    client = make_client(handler)

    await client.link_external_user_id("sub-1", "u1")

    assert requests[0].method == "PATCH"
    assert requests[0].url.path == "/api/v1/apps/app-1/subscriptions/sub-1/user/identity"
    assert json.loads(requests[0].content)["external_user_id"] == "u1"


@pytest.mark.anyio
async def test_unconfigured_client_refuses_to_send():
    client = OneSignalPushClient(None, None)

    assert client.is_configured is False
    with pytest.raises(ChannelNotConfiguredError):
        await client.send_push("u1", CONTENT)


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (ChannelDeliveryError("x", error_codes=["invalid_player_ids"]), True),
        (ChannelDeliveryError("x", error_codes=["invalid_aliases"]), True),
        (ChannelDeliveryError("x", error_codes=["rate_limited"]), False),
        (RuntimeError("No recipients matched"), True),
        (RuntimeError("No users with this external user id found"), True),
        ("invalid_player_ids: [abc]", True),
        (RuntimeError("Internal server error"), False),
        (None, False),
    ],
)
def test_is_invalid_destination_error(error, expected):
    assert is_invalid_destination_error(error) is expected
