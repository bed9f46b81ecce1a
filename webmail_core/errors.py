"""Error kinds raised by the mail-session layer.

Not-found conditions (an empty mailbox, an unknown UID) are never errors:
they surface as an empty list or ``None``.
"""

from __future__ import annotations


class MailError(Exception):
    """Base class for every failure surfaced by ``webmail_core``."""


class MailConnectionError(MailError, ConnectionError):
    """Connecting or authenticating to the IMAP server failed, or the
    session broke mid-operation."""


class MailProtocolError(MailConnectionError):
    """The server refused a command or sent a response we cannot map."""

    def __init__(self, command: str, status: str, detail: object = None) -> None:
        self.command = command
        self.status = status
        self.detail = detail
        super().__init__(f"IMAP {command} failed: {status} {detail!r}")


class SendError(MailError):
    """Handing a message to the SMTP server failed."""
