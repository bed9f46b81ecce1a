"""Tests for the REST endpoints."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from webmail_api.app import create_app
from webmail_api.config import Settings
from webmail_api.deps import get_mail_service
from webmail_core import Mailbox, MailService, MessageSummary
from webmail_core.errors import MailConnectionError, MailProtocolError, SendError


@pytest.fixture
def mail() -> AsyncMock:
    return AsyncMock(spec=MailService)


@pytest.fixture
async def app(mail: AsyncMock):
    application = create_app(Settings())
    application.dependency_overrides[get_mail_service] = lambda: mail
    return application


@pytest.fixture
async def client(app):
    """Async HTTP test client. Lifespan is not started; the service is overridden."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "service": "webmail-backend"}


@pytest.mark.asyncio
async def test_list_mailboxes(client, mail):
    mail.list_mailboxes.return_value = [
        Mailbox(name="INBOX", path="INBOX"),
        Mailbox(name="Archive", path="INBOX/Archive"),
    ]
    resp = await client.get("/api/v1/mailboxes")
    assert resp.status_code == 200
    assert resp.json() == [
        {"name": "INBOX", "path": "INBOX"},
        {"name": "Archive", "path": "INBOX/Archive"},
    ]


@pytest.mark.asyncio
async def test_list_messages_uses_from_key(client, mail):
    mail.list_messages.return_value = [
        MessageSummary(id="1", date="Mon, 02 Jun 2025 12:00:00 +0000",
                       from_address="alice@example.com", subject="Hi"),
    ]
    resp = await client.get("/api/v1/mailboxes/INBOX")
    assert resp.status_code == 200
    assert resp.json() == [{
        "id": "1",
        "date": "Mon, 02 Jun 2025 12:00:00 +0000",
        "from": "alice@example.com",
        "subject": "Hi",
    }]
    mail.list_messages.assert_awaited_once_with("INBOX")


@pytest.mark.asyncio
async def test_list_messages_nested_mailbox(client, mail):
    mail.list_messages.return_value = []
    resp = await client.get("/api/v1/mailboxes/INBOX/Archive/2024")
    assert resp.status_code == 200
    assert resp.json() == []
    mail.list_messages.assert_awaited_once_with("INBOX/Archive/2024")


@pytest.mark.asyncio
async def test_get_message_body(client, mail):
    mail.get_message_body.return_value = "First part\nSecond part"
    resp = await client.get("/api/v1/messages/INBOX/Archive/7")
    assert resp.status_code == 200
    assert resp.text == "First part\nSecond part"
    assert resp.headers["content-type"].startswith("text/plain")
    mail.get_message_body.assert_awaited_once_with("INBOX/Archive", 7)


@pytest.mark.asyncio
async def test_get_message_body_not_found(client, mail):
    mail.get_message_body.return_value = None
    resp = await client.get("/api/v1/messages/INBOX/999")
    assert resp.status_code == 404
    assert resp.json() == {"detail": "Message not found"}


@pytest.mark.asyncio
async def test_get_message_invalid_uid(client, mail):
    resp = await client.get("/api/v1/messages/INBOX/0")
    assert resp.status_code == 422
    mail.get_message_body.assert_not_called()


@pytest.mark.asyncio
async def test_delete_message(client, mail):
    resp = await client.delete("/api/v1/messages/INBOX/3")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    mail.delete_message.assert_awaited_once_with("INBOX", 3)


@pytest.mark.asyncio
async def test_send_message(client, mail):
    resp = await client.post("/api/v1/messages", json={
        "to": "bob@example.com",
        "from": "alice@example.com",
        "subject": "Lunch?",
        "text": "Noon?",
    })
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    sent = mail.send_message.call_args.args[0]
    assert sent.to == "bob@example.com"
    assert sent.from_address == "alice@example.com"


@pytest.mark.asyncio
async def test_send_message_missing_recipient(client, mail):
    resp = await client.post("/api/v1/messages", json={"from": "alice@example.com"})
    assert resp.status_code == 422
    mail.send_message.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    MailConnectionError("connection refused"),
    MailProtocolError("SELECT", "NO", "Mailbox does not exist"),
])
async def test_imap_failure_maps_to_502(client, mail, error):
    mail.list_messages.side_effect = error
    resp = await client.get("/api/v1/mailboxes/Nope")
    assert resp.status_code == 502
    assert resp.json() == {"detail": "Mail server error"}


@pytest.mark.asyncio
async def test_send_failure_maps_to_502(client, mail):
    mail.send_message.side_effect = SendError("550 rejected")
    resp = await client.post("/api/v1/messages", json={
        "to": "bob@example.com",
        "from": "alice@example.com",
    })
    assert resp.status_code == 502
    assert resp.json() == {"detail": "Mail server error"}


@pytest.mark.asyncio
async def test_send_message_header_injection_rejected(client, mail):
    resp = await client.post("/api/v1/messages", json={
        "to": "bob@example.com",
        "from": "alice@example.com",
        "subject": "hi\r\nBcc: eve@example.com",
    })
    assert resp.status_code == 422
    mail.send_message.assert_not_called()
