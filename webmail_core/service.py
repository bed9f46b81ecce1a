"""MailService: the five mail operations, each in its own session."""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

import structlog

from . import mailboxes, messages, smtp
from .config import ImapServerConfig, ServerConfig
from .models import Mailbox, MessageSummary, OutgoingMessage
from .session import ImapSession, open_session

logger = structlog.get_logger()

SessionOpener = Callable[[ImapServerConfig], AbstractAsyncContextManager[ImapSession]]


class MailService:
    """Entry point used by the REST layer.

    Holds only the read-only :class:`ServerConfig`.  Every call opens a
    fresh IMAP session, performs one logical operation and closes the
    session before returning or raising; nothing is shared between calls.
    UIDs are validated before a session is opened.
    """

    def __init__(
        self,
        config: ServerConfig,
        *,
        session_opener: SessionOpener = open_session,
    ) -> None:
        self._config = config
        self._open_session = session_opener

    @property
    def config(self) -> ServerConfig:
        return self._config

    async def list_mailboxes(self) -> list[Mailbox]:
        async with self._open_session(self._config.imap) as session:
            return await mailboxes.list_mailboxes(session)

    async def list_messages(self, mailbox: str) -> list[MessageSummary]:
        async with self._open_session(self._config.imap) as session:
            return await messages.list_messages(session, mailbox)

    async def get_message_body(self, mailbox: str, uid: int | str) -> str | None:
        uid = messages.normalize_uid(uid)
        async with self._open_session(self._config.imap) as session:
            return await messages.get_message_body(session, mailbox, uid)

    async def delete_message(self, mailbox: str, uid: int | str) -> None:
        uid = messages.normalize_uid(uid)
        async with self._open_session(self._config.imap) as session:
            await messages.delete_message(session, mailbox, uid)

    async def send_message(self, outgoing: OutgoingMessage) -> None:
        await smtp.send_message(self._config.smtp, outgoing)
