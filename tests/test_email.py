"""Unit tests for the SendGrid email channel."""

from __future__ import annotations

import json
import logging
import types

import pytest

from notifier.infrastructure.channels import (
    ChannelContent,
    ChannelDeliveryError,
    ChannelNotConfiguredError,
    SendGridEmailClient,
    build_email_html,
)
from notifier.infrastructure.channels import email as email_module

CONTENT = ChannelContent(title="Invoice paid", body="Invoice <42>\nwas paid", url="https://app/inv/42")


class RecordingSendGridClient:
    """Stand-in for ``SendGridAPIClient`` keeping the sent messages."""

    sent: list = []
    response = types.SimpleNamespace(status_code=202, body=None, headers={"X-Message-Id": "m-1"})

    def __init__(self, api_key: str):
        self.api_key = api_key

    def send(self, message):
        RecordingSendGridClient.sent.append(message)
        return self.response


@pytest.fixture
def sendgrid_client(monkeypatch: pytest.MonkeyPatch):
    RecordingSendGridClient.sent = []
    monkeypatch.setattr(email_module, "SendGridAPIClient", RecordingSendGridClient)
    return RecordingSendGridClient


def test_build_email_html_escapes_body_and_appends_link():
    assert build_email_html(CONTENT) == (
        "<p>Invoice &lt;42&gt;<br>was paid<br>Open: https://app/inv/42</p>"
    )


def test_send_email_without_configuration():
    """Missing SendGrid settings make the client refuse to send."""

    client = SendGridEmailClient(None, None)

    assert client.is_configured is False
    with pytest.raises(ChannelNotConfiguredError):
        client.send_email("user@example.com", CONTENT)


def test_send_email_success(sendgrid_client):
    """A successful SendGrid response returns the message id."""

    client = SendGridEmailClient("SG.fake", "sender@example.com")

    result = client.send_email("user@example.com", CONTENT)

    assert result == {"status_code": 202, "message_id": "m-1"}
    mail = sendgrid_client.sent[0].get()
    assert mail["subject"] == "Invoice paid"
    assert mail["from"]["email"] == "sender@example.com"


def test_send_email_non_success_status(sendgrid_client, monkeypatch):
    body = json.dumps({"errors": [{"message": "Invalid to address", "field": "to"}]})
    monkeypatch.setattr(
        sendgrid_client,
        "response",
        types.SimpleNamespace(status_code=400, body=body, headers={}),
    )
    client = SendGridEmailClient("SG.fake", "sender@example.com")

    with pytest.raises(ChannelDeliveryError) as excinfo:
        client.send_email("user@example.com", CONTENT)

    assert str(excinfo.value) == "SendGrid request failed (400): Invalid to address"
    assert excinfo.value.error_codes == frozenset({"to"})


def test_send_email_logs_forbidden_error(monkeypatch: pytest.MonkeyPatch, caplog):
    """Forbidden responses from SendGrid should surface meaningful log details."""

    class FakeForbiddenError(Exception):
        status_code = 403
        body = json.dumps(
            {
                "errors": [
                    {
                        "message": "The provided authorization grant is invalid.",
                        "help": "https://sendgrid.com/docs/for-developers/sending-email/authentication/",
                    }
                ]
            }
        ).encode()

    class FailingClient(RecordingSendGridClient):
        def send(self, message):
            raise FakeForbiddenError()

    monkeypatch.setattr(email_module, "SendGridAPIClient", FailingClient)
    client = SendGridEmailClient("SG.fake", "sender@example.com")

    with caplog.at_level(logging.ERROR):
        with pytest.raises(ChannelDeliveryError) as excinfo:
            client.send_email("user@example.com", CONTENT)

    assert excinfo.value.status_code == 403
    assert "status 403" in caplog.text
    assert "authorization grant is invalid" in caplog.text
