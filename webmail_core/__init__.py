"""Webmail mail-session layer: one short-lived IMAP/SMTP session per operation."""

from .config import (
    AuthConfig,
    ImapServerConfig,
    ServerConfig,
    SmtpServerConfig,
    load_server_config,
)
from .errors import MailConnectionError, MailError, MailProtocolError, SendError
from .logging import setup_logging
from .mailboxes import MailboxNode, build_mailbox_tree, flatten_mailboxes, parse_list_response
from .models import Mailbox, MessageSummary, OutgoingMessage
from .parser import BodyTextParser, ParsedMessage
from .service import MailService
from .session import ImapSession, RawEnvelopeEntry, open_session

__all__ = [
    "AuthConfig",
    "BodyTextParser",
    "ImapServerConfig",
    "ImapSession",
    "MailConnectionError",
    "MailError",
    "MailProtocolError",
    "MailService",
    "Mailbox",
    "MailboxNode",
    "MessageSummary",
    "OutgoingMessage",
    "ParsedMessage",
    "RawEnvelopeEntry",
    "SendError",
    "ServerConfig",
    "SmtpServerConfig",
    "build_mailbox_tree",
    "flatten_mailboxes",
    "load_server_config",
    "open_session",
    "parse_list_response",
    "setup_logging",
]
