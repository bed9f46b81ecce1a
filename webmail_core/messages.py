"""Message operations inside one open session: list, read, delete."""

from __future__ import annotations

import structlog

from .envelope import to_summary
from .models import MessageSummary
from .parser import BodyTextParser
from .session import ImapSession

logger = structlog.get_logger()

_parser = BodyTextParser()


def normalize_uid(uid: int | str) -> str:
    """Return *uid* as the canonical decimal string the server uses."""
    value = int(uid)
    if value <= 0:
        raise ValueError(f"UID must be positive, got {uid!r}")
    return str(value)


async def list_messages(session: ImapSession, mailbox: str) -> list[MessageSummary]:
    """Summaries of every message in *mailbox*, in the server's order.

    An empty mailbox returns ``[]`` without issuing a fetch.
    """
    count = await session.select(mailbox, readonly=True)
    logger.debug("mailbox_selected", mailbox=mailbox, exists=count)
    if count == 0:
        return []

    entries = await session.fetch_envelopes("1:*")
    summaries = [to_summary(entry) for entry in entries]
    logger.info("messages_listed", mailbox=mailbox, count=len(summaries))
    return summaries


async def get_message_body(session: ImapSession, mailbox: str, uid: int | str) -> str | None:
    """Plain-text body of message *uid*, or ``None`` if there is no such
    message or it has no text part."""
    uid = normalize_uid(uid)
    await session.select(mailbox, readonly=True)
    raw = await session.fetch_raw_by_uid(uid)
    if raw is None:
        logger.info("message_not_found", mailbox=mailbox, uid=uid)
        return None
    return _parser.text_of(raw)


async def delete_message(session: ImapSession, mailbox: str, uid: int | str) -> None:
    """Delete message *uid* and expunge it.  Unknown UIDs are a no-op."""
    uid = normalize_uid(uid)
    await session.select(mailbox, readonly=False)
    await session.delete_by_uid(uid)
    logger.info("message_deleted", mailbox=mailbox, uid=uid)
