"""Shared test fixtures for the webmail test suite."""

from __future__ import annotations

from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email import encoders
from unittest.mock import MagicMock

import pytest

from webmail_core.config import AuthConfig, ImapServerConfig, ServerConfig, SmtpServerConfig


@pytest.fixture
def imap_config() -> ImapServerConfig:
    return ImapServerConfig(
        host="imap.test.com",
        port=993,
        use_ssl=True,
        timeout_seconds=10.0,
        auth=AuthConfig(user="testuser", password="testpass"),
    )


@pytest.fixture
def smtp_config() -> SmtpServerConfig:
    return SmtpServerConfig(
        host="smtp.test.com",
        port=587,
        timeout_seconds=10.0,
        auth=AuthConfig(user="testuser", password="testpass"),
    )


@pytest.fixture
def server_config(imap_config: ImapServerConfig, smtp_config: SmtpServerConfig) -> ServerConfig:
    return ServerConfig(imap=imap_config, smtp=smtp_config)


# ------------------------------------------------------------------
# Sample EML builders
# ------------------------------------------------------------------


def _build_plain_email(
    *,
    subject: str = "Test Subject",
    from_addr: str = "sender@example.com",
    to_addr: str = "recipient@example.com",
    body: str = "Hello, World!",
    date: str = "Mon, 02 Jun 2025 12:00:00 +0000",
) -> bytes:
    """Build a simple plain-text email as raw bytes."""
    msg = MIMEText(body, "plain")
    msg["Subject"] = subject
    msg["From"] = from_addr
    msg["To"] = to_addr
    msg["Date"] = date
    return msg.as_bytes()


def _build_html_email(*, body_html: str = "<p>Hello</p>") -> bytes:
    msg = MIMEText(body_html, "html")
    msg["Subject"] = "HTML Email"
    msg["From"] = "sender@example.com"
    msg["To"] = "recipient@example.com"
    return msg.as_bytes()


def _build_multipart_email(
    *,
    text_parts: list[str] | None = None,
    body_html: str = "<p>HTML body</p>",
    attachments: list[tuple[str, str, bytes]] | None = None,
) -> bytes:
    """Build a multipart email with text parts, HTML, and optional attachments."""
    msg = MIMEMultipart("mixed")
    msg["Subject"] = "Multipart Email"
    msg["From"] = "sender@example.com"
    msg["To"] = "recipient@example.com"

    parts = text_parts if text_parts is not None else ["Plain body"]

    # First text part as an alternative to the HTML
    alt = MIMEMultipart("alternative")
    if parts:
        alt.attach(MIMEText(parts[0], "plain"))
    alt.attach(MIMEText(body_html, "html"))
    msg.attach(alt)

    # Remaining inline text parts
    for text in parts[1:]:
        msg.attach(MIMEText(text, "plain"))

    for filename, content_type, payload in attachments or []:
        maintype, subtype = content_type.split("/", 1)
        part = MIMEBase(maintype, subtype)
        part.set_payload(payload)
        encoders.encode_base64(part)
        part.add_header("Content-Disposition", "attachment", filename=filename)
        msg.attach(part)

    return msg.as_bytes()


def _header_block(*, date: str = "", from_addr: str = "", subject: str = "") -> bytes:
    """Header block as returned for BODY[HEADER.FIELDS (DATE FROM SUBJECT)]."""
    lines = []
    if date:
        lines.append(f"Date: {date}")
    if from_addr:
        lines.append(f"From: {from_addr}")
    if subject:
        lines.append(f"Subject: {subject}")
    return ("\r\n".join(lines) + "\r\n\r\n").encode()


@pytest.fixture
def plain_eml_bytes() -> bytes:
    return _build_plain_email()


@pytest.fixture
def html_eml_bytes() -> bytes:
    return _build_html_email()


@pytest.fixture
def multipart_eml_bytes() -> bytes:
    return _build_multipart_email(
        text_parts=["First part", "Second part"],
        attachments=[("notes.txt", "text/plain", b"attached text, not body")],
    )


# ------------------------------------------------------------------
# imaplib mocks
# ------------------------------------------------------------------


def _envelope_fetch_data(entries: list[tuple[int, bytes]]) -> list:
    """FETCH response data in the shape imaplib returns it."""
    data: list = []
    for seq, (uid, headers) in enumerate(entries, start=1):
        head = b"%d (UID %d BODY[HEADER.FIELDS (DATE FROM SUBJECT)] {%d}" % (seq, uid, len(headers))
        data.append((head, headers))
        data.append(b")")
    return data


def make_mock_imap(
    *,
    exists: int = 0,
    list_lines: list | None = None,
    envelopes: list[tuple[int, bytes]] | None = None,
    messages: dict[str, bytes] | None = None,
    capabilities: str = "IMAP4rev1 UIDPLUS",
) -> MagicMock:
    """Create a mock imaplib.IMAP4_SSL with programmed responses."""
    mock = MagicMock()
    mock.state = "AUTH"
    mock.capabilities = ("IMAP4REV1",)
    mock.login.return_value = ("OK", [b"Logged in"])
    mock.capability.return_value = ("OK", [capabilities.encode()])
    mock.list.return_value = ("OK", list_lines or [])
    mock.close.return_value = ("OK", [b"Closed"])
    mock.logout.return_value = ("BYE", [b"Bye"])
    mock.expunge.return_value = ("OK", [None])

    def select(mailbox, readonly=False):
        mock.state = "SELECTED"
        return ("OK", [str(exists).encode()])

    mock.select.side_effect = select
    mock.fetch.return_value = ("OK", _envelope_fetch_data(envelopes or []))
    mock.uid.side_effect = _make_uid_handler(messages or {})
    return mock


def _make_uid_handler(messages: dict[str, bytes]):
    """Build a side_effect function for mock.uid() that handles FETCH, STORE and EXPUNGE."""

    def handler(command: str, *args):
        if command == "FETCH":
            uid = args[0]
            raw = messages.get(uid)
            if raw is None:
                return ("OK", [None])
            return ("OK", [(b"1 (UID %s BODY[] {%d}" % (uid.encode(), len(raw)), raw), b")"])
        if command == "STORE":
            return ("OK", [None])
        if command == "EXPUNGE":
            return ("OK", [None])
        return ("OK", [b""])

    return handler
