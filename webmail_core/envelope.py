"""Envelope extraction from a fetched header block.

Uses ``email.parser.BytesHeaderParser`` which parses *only* the headers,
matching the ``BODY.PEEK[HEADER.FIELDS (DATE FROM SUBJECT)]`` section the
message listing requests.
"""

from __future__ import annotations

import email.parser
import email.policy

from .models import MessageSummary
from .session import RawEnvelopeEntry

_parser = email.parser.BytesHeaderParser(policy=email.policy.default)


def extract_envelope(header_bytes: bytes) -> dict[str, str]:
    """Extract date, sender address and subject from raw header bytes.

    Missing headers map to ``""``; so does a From header without any
    address.  Only the first From address is kept.
    """
    headers = _parser.parsebytes(header_bytes)

    return {
        "date": str(headers.get("Date", "") or ""),
        "from": _first_address(headers.get("From")),
        "subject": str(headers.get("Subject", "") or ""),
    }


def to_summary(entry: RawEnvelopeEntry) -> MessageSummary:
    """Map one bulk-fetch entry to a :class:`MessageSummary`."""
    return MessageSummary(id=entry.uid, **extract_envelope(entry.header_bytes))


def _first_address(header: object) -> str:
    # policy.default parses From into an AddressHeader
    for address in getattr(header, "addresses", ()):
        if address.username:
            return address.addr_spec
    return ""
