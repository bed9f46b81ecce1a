"""Mailbox hierarchy: parse LIST output, build the tree, flatten it.

The server reports every folder as a ``(flags) "delimiter" name`` line.
The lines are assembled into a tree of :class:`MailboxNode` (creating any
intermediate folder the server did not list) and then flattened in
pre-order into :class:`~webmail_core.models.Mailbox` values.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog

from .errors import MailProtocolError
from .models import Mailbox
from .session import ImapSession

logger = structlog.get_logger()

_LIST_RE = re.compile(
    r'^\((?P<flags>[^)]*)\)\s+(?P<delim>"(?:[^"\\]|\\.)*"|NIL)\s*(?P<name>.*)$',
    re.IGNORECASE | re.DOTALL,
)


@dataclass
class ListEntry:
    """One parsed line of a LIST response."""

    path: str
    delimiter: str | None
    flags: tuple[str, ...] = ()


@dataclass
class MailboxNode:
    """A server-reported folder and its child folders."""

    name: str
    path: str
    delimiter: str | None = None
    flags: tuple[str, ...] = ()
    children: list[MailboxNode] = field(default_factory=list)


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return re.sub(r"\\(.)", r"\1", value[1:-1])
    return value


def _decode(value: bytes | str) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def parse_list_response(lines: Iterable[Any]) -> list[ListEntry]:
    """Parse raw ``LIST`` response items as returned by ``imaplib``.

    Items are bytes lines, or ``(head, literal)`` tuples when the server
    sent the mailbox name as a literal.
    """
    entries: list[ListEntry] = []
    for item in lines:
        literal: str | None = None
        if isinstance(item, tuple):
            head, literal = _decode(item[0]), _decode(item[1])
        else:
            head = _decode(item)

        match = _LIST_RE.match(head.strip())
        if match is None:
            raise MailProtocolError("LIST", "MALFORMED", item)

        delim = match.group("delim")
        delimiter = None if delim.upper() == "NIL" else _unquote(delim)
        path = literal if literal is not None else _unquote(match.group("name").strip())
        flags = tuple(match.group("flags").split())
        entries.append(ListEntry(path=path, delimiter=delimiter, flags=flags))
    return entries


def build_mailbox_tree(entries: Iterable[ListEntry]) -> list[MailboxNode]:
    """Assemble LIST entries into a tree and return the root's children.

    Siblings keep the order in which the server first mentioned them.
    """
    roots: list[MailboxNode] = []
    index: dict[str, MailboxNode] = {}

    for entry in entries:
        delim = entry.delimiter
        parts = entry.path.split(delim) if delim else [entry.path]

        siblings = roots
        path = ""
        node: MailboxNode | None = None
        for depth, part in enumerate(parts):
            path = part if depth == 0 else f"{path}{delim}{part}"
            node = index.get(path)
            if node is None:
                node = MailboxNode(name=part, path=path, delimiter=delim)
                index[path] = node
                siblings.append(node)
            siblings = node.children

        assert node is not None
        node.flags = entry.flags

    return roots


def flatten_mailboxes(root_children: Sequence[MailboxNode]) -> list[Mailbox]:
    """Flatten a mailbox tree in pre-order depth-first order.

    A node is emitted before its children and siblings keep their order.
    Uses an explicit stack, so depth is bounded only by memory.
    """
    flat: list[Mailbox] = []
    stack: list[MailboxNode] = list(reversed(root_children))
    while stack:
        node = stack.pop()
        flat.append(Mailbox(name=node.name, path=node.path))
        stack.extend(reversed(node.children))
    return flat


async def list_mailboxes(session: ImapSession) -> list[Mailbox]:
    """List every mailbox on the server as a flat list."""
    raw = await session.list_mailboxes()
    tree = build_mailbox_tree(parse_list_response(raw))
    mailboxes = flatten_mailboxes(tree)
    logger.info("mailboxes_listed", count=len(mailboxes))
    return mailboxes
