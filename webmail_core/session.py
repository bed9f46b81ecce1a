"""Single-use async IMAP session wrapping stdlib imaplib with asyncio.to_thread."""

from __future__ import annotations

import asyncio
import imaplib
import re
import ssl
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, TypeVar

import structlog

from .config import ImapServerConfig
from .errors import MailConnectionError, MailError, MailProtocolError

logger = structlog.get_logger()

T = TypeVar("T")

ENVELOPE_FIELDS = "DATE FROM SUBJECT"

_UID_RE = re.compile(rb"\bUID (\d+)", re.IGNORECASE)


@dataclass
class RawEnvelopeEntry:
    """One entry of a bulk metadata fetch: UID plus the raw header block."""

    uid: str
    header_bytes: bytes


def quote_mailbox(name: str) -> str:
    """Quote a mailbox name for use as an IMAP astring."""
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_ssl_context(allow_invalid_certs: bool) -> ssl.SSLContext:
    context = ssl.create_default_context()
    if allow_invalid_certs:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def parse_fetch_response(data: list[Any]) -> list[tuple[str, bytes]]:
    """Pair each FETCH response entry with its UID and literal payload.

    ``imaplib`` returns a literal-bearing entry as a ``(head, literal)``
    tuple followed by a bytes trailer holding the rest of the line, which
    may carry the UID when the server sends it after the literal.  Entries
    without a literal (``NIL`` bodies) arrive as bare bytes.  Unsolicited
    FETCH responses without a UID (flag updates) are skipped.
    """
    entries: list[tuple[str, bytes]] = []
    pending: tuple[bytes, bytes] | None = None

    def flush(meta: bytes, payload: bytes) -> None:
        match = _UID_RE.search(meta)
        if match is None:
            raise MailProtocolError("FETCH", "MALFORMED", meta)
        entries.append((match.group(1).decode(), payload))

    for item in data:
        if isinstance(item, tuple):
            if pending is not None:
                flush(*pending)
            pending = (item[0], item[1])
        elif isinstance(item, bytes):
            if pending is not None:
                flush(pending[0] + item, pending[1])
                pending = None
            elif _UID_RE.search(item) and b"BODY[" in item.upper():
                flush(item, b"")

    if pending is not None:
        flush(*pending)
    return entries


class ImapSession:
    """Async-friendly, single-use IMAP session.

    All blocking ``imaplib`` operations are wrapped with
    ``asyncio.to_thread()`` to avoid blocking the event loop.  A session
    serves exactly one logical operation; use :func:`open_session` to get
    one that is always closed afterwards.
    """

    def __init__(self, config: ImapServerConfig) -> None:
        self._config = config
        self._conn: imaplib.IMAP4_SSL | imaplib.IMAP4 | None = None
        self._capabilities: frozenset[str] = frozenset()

    @property
    def capabilities(self) -> frozenset[str]:
        return self._capabilities

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Connect and login.  Raises :class:`MailConnectionError`."""
        try:
            await asyncio.to_thread(self._connect_sync)
        except (imaplib.IMAP4.error, OSError) as exc:
            logger.warning(
                "imap_connect_failed",
                host=self._config.host,
                port=self._config.port,
                error=str(exc),
            )
            raise MailConnectionError(
                f"Cannot connect to {self._config.host}:{self._config.port}: {exc}"
            ) from exc
        logger.info("imap_connected", host=self._config.host, port=self._config.port)

    def _connect_sync(self) -> None:
        cfg = self._config
        if cfg.use_ssl:
            conn: imaplib.IMAP4 = imaplib.IMAP4_SSL(
                cfg.host,
                cfg.port,
                ssl_context=build_ssl_context(cfg.allow_invalid_certs),
                timeout=cfg.timeout_seconds,
            )
        else:
            conn = imaplib.IMAP4(cfg.host, cfg.port, timeout=cfg.timeout_seconds)

        try:
            conn.login(cfg.auth.user, cfg.auth.password.get_secret_value())
            # Servers may advertise more capabilities once authenticated.
            status, data = conn.capability()
        except BaseException:
            self._logout_quietly(conn)
            raise

        if status == "OK" and data and data[-1]:
            self._capabilities = frozenset(data[-1].decode().upper().split())
        else:
            self._capabilities = frozenset(c.upper() for c in conn.capabilities)
        self._conn = conn

    async def close(self) -> None:
        """Close the mailbox and logout; failures are logged, never raised."""
        if self._conn is not None:
            conn, self._conn = self._conn, None
            await asyncio.to_thread(self._close_sync, conn)
            logger.info("imap_disconnected", host=self._config.host)

    def _close_sync(self, conn: imaplib.IMAP4) -> None:
        try:
            # CLOSE is only valid in the SELECTED state
            if conn.state == "SELECTED":
                conn.close()
        except Exception as exc:
            logger.debug("imap_close_failed", step="close", error=str(exc))
        self._logout_quietly(conn)

    @staticmethod
    def _logout_quietly(conn: imaplib.IMAP4) -> None:
        try:
            conn.logout()
        except Exception as exc:
            logger.debug("imap_close_failed", step="logout", error=str(exc))

    # ------------------------------------------------------------------
    # Protocol actions
    # ------------------------------------------------------------------

    async def list_mailboxes(self) -> list[Any]:
        """Return the raw ``LIST "" *`` response lines."""
        return await self._call("LIST", self._list_sync)

    async def select(self, mailbox: str, *, readonly: bool = True) -> int:
        """Select *mailbox* and return its message count."""
        return await self._call("SELECT", self._select_sync, mailbox, readonly)

    async def fetch_envelopes(self, message_set: str = "1:*") -> list[RawEnvelopeEntry]:
        """Bulk-fetch UID and envelope headers for *message_set*."""
        entries = await self._call("FETCH", self._fetch_envelopes_sync, message_set)
        return [RawEnvelopeEntry(uid=uid, header_bytes=raw) for uid, raw in entries]

    async def fetch_raw_by_uid(self, uid: str) -> bytes | None:
        """Fetch the full raw message with *uid*, or ``None`` if absent."""
        return await self._call("UID FETCH", self._fetch_raw_sync, uid)

    async def delete_by_uid(self, uid: str) -> None:
        """Flag *uid* as deleted and expunge it immediately."""
        await self._call("UID STORE", self._delete_sync, uid)

    # ------------------------------------------------------------------
    # Synchronous helpers (run in thread)
    # ------------------------------------------------------------------

    async def _call(self, command: str, func: Callable[..., T], *args: Any) -> T:
        assert self._conn is not None, "Not connected"
        try:
            return await asyncio.to_thread(func, *args)
        except MailError:
            raise
        except UnicodeEncodeError as exc:
            # imaplib sends arguments as ASCII only
            raise MailProtocolError(command, "UNENCODABLE", exc.object) from exc
        except (imaplib.IMAP4.error, OSError) as exc:
            raise MailConnectionError(f"IMAP {command} failed: {exc}") from exc

    def _list_sync(self) -> list[Any]:
        assert self._conn is not None
        status, data = self._conn.list()
        if status != "OK":
            raise MailProtocolError("LIST", status, data)
        return [item for item in data if item is not None]

    def _select_sync(self, mailbox: str, readonly: bool) -> int:
        assert self._conn is not None
        status, data = self._conn.select(quote_mailbox(mailbox), readonly=readonly)
        if status != "OK":
            raise MailProtocolError("SELECT", status, data)
        try:
            return int(data[-1])
        except (TypeError, ValueError, IndexError) as exc:
            raise MailProtocolError("SELECT", "MALFORMED", data) from exc

    def _fetch_envelopes_sync(self, message_set: str) -> list[tuple[str, bytes]]:
        assert self._conn is not None
        status, data = self._conn.fetch(
            message_set, f"(UID BODY.PEEK[HEADER.FIELDS ({ENVELOPE_FIELDS})])"
        )
        if status != "OK":
            raise MailProtocolError("FETCH", status, data)
        return parse_fetch_response(data)

    def _fetch_raw_sync(self, uid: str) -> bytes | None:
        assert self._conn is not None
        status, data = self._conn.uid("FETCH", uid, "(BODY.PEEK[])")
        if status != "OK":
            raise MailProtocolError("UID FETCH", status, data)
        for entry_uid, raw in parse_fetch_response(data):
            if entry_uid == uid and raw:
                return raw
        return None

    def _delete_sync(self, uid: str) -> None:
        assert self._conn is not None
        status, data = self._conn.uid("STORE", uid, "+FLAGS.SILENT", r"(\Deleted)")
        if status != "OK":
            raise MailProtocolError("UID STORE", status, data)

        if "UIDPLUS" in self._capabilities:
            status, data = self._conn.uid("EXPUNGE", uid)
        else:
            status, data = self._conn.expunge()
        if status != "OK":
            raise MailProtocolError("EXPUNGE", status, data)


@asynccontextmanager
async def open_session(config: ImapServerConfig) -> AsyncIterator[ImapSession]:
    """Open an authenticated session and close it unconditionally on exit.

    Usage::

        async with open_session(config.imap) as session:
            count = await session.select("INBOX")
    """
    session = ImapSession(config)
    await session.connect()
    try:
        yield session
    finally:
        await session.close()
