"""Tests for the push destination endpoints."""

from notifier.infrastructure.channels import ChannelProvider
from notifier.infrastructure.repositories import DestinationRepository

from tests.fakes import FakePushClient


def test_register_destination(client, auth_headers, session):
    """Registering stores the device under the caller with its user agent."""

    response = client.post(
        "/api/notifications/destinations",
        json={"onesignalId": "sub-1", "platform": "web"},
        headers={**auth_headers, "User-Agent": "Mozilla/5.0 (X11)"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["providerId"] == "sub-1"
    assert body["externalUserId"] == "u1"
    assert body["userAgent"] == "Mozilla/5.0 (X11)"
    assert body["disabledAt"] is None
    assert DestinationRepository(session).get_by_provider_id("sub-1").user_id == "u1"


def test_register_destination_links_identity_at_provider(app, client, auth_headers):
    push_client = FakePushClient()
    app.state.channels = ChannelProvider(push_client=push_client)

    response = client.post(
        "/api/notifications/destinations",
        json={"onesignalId": "sub-1", "platform": "ios"},
        headers=auth_headers,
    )

    assert response.status_code == 201
    assert push_client.linked == [("sub-1", "u1")]


def test_register_destination_survives_link_failure(app, client, auth_headers):
    class BrokenPushClient(FakePushClient):
        async def link_external_user_id(self, provider_id, external_user_id):
            raise RuntimeError("OneSignal unavailable")

    app.state.channels = ChannelProvider(push_client=BrokenPushClient())

    response = client.post(
        "/api/notifications/destinations",
        json={"onesignalId": "sub-1", "platform": "ios"},
        headers=auth_headers,
    )

    assert response.status_code == 201


def test_register_destination_validates_payload(client, auth_headers):
    response = client.post(
        "/api/notifications/destinations", json={"platform": "web"}, headers=auth_headers
    )
    blank = client.post(
        "/api/notifications/destinations",
        json={"onesignalId": "   ", "platform": "web"},
        headers=auth_headers,
    )

    assert response.status_code == 422
    assert blank.status_code == 422


def test_destination_endpoints_require_token(client):
    assert client.get("/api/notifications/destinations").status_code == 401
    bad = client.get(
        "/api/notifications/destinations", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert bad.status_code == 401


def test_delete_and_list_destinations(client, auth_headers, session):
    repository = DestinationRepository(session)
    repository.upsert_destination(user_id="u1", provider_id="sub-1", platform="web", external_user_id="u1")
    repository.upsert_destination(user_id="u1", provider_id="sub-2", platform="ios", external_user_id="u1")
    repository.upsert_destination(user_id="u2", provider_id="sub-3", platform="ios", external_user_id="u2")

    deleted = client.delete("/api/notifications/destinations/sub-1", headers=auth_headers)
    foreign = client.delete("/api/notifications/destinations/sub-3", headers=auth_headers)
    listed = client.get("/api/notifications/destinations", headers=auth_headers)

    assert deleted.json() == {"disabled": 1}
    assert foreign.json() == {"disabled": 0}
    assert [item["providerId"] for item in listed.json()] == ["sub-2"]
