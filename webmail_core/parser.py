"""MIME parser reducing a raw message to its plain-text body."""

from __future__ import annotations

import email
import email.message
import email.policy
from dataclasses import dataclass

import html2text


@dataclass
class ParsedMessage:
    """Bodies of a raw RFC 822 message."""

    text: str | None
    html: str | None


class BodyTextParser:
    """Stateless parser: raw RFC 822 bytes to ParsedMessage.

    ``text`` is the concatenation of every inline ``text/plain`` part in
    document order.  A message with only HTML gets the HTML converted to
    text instead; one with neither has ``text=None``.
    """

    separator = "\n"

    def parse(self, raw_bytes: bytes) -> ParsedMessage:
        msg = email.message_from_bytes(raw_bytes, policy=email.policy.default)

        texts, html = self._extract_bodies(msg)

        if texts:
            text: str | None = self.separator.join(texts)
        elif html is not None:
            text = self._html_to_text(html)
        else:
            text = None

        return ParsedMessage(text=text, html=html)

    def text_of(self, raw_bytes: bytes) -> str | None:
        return self.parse(raw_bytes).text

    @staticmethod
    def _html_to_text(html: str) -> str:
        h = html2text.HTML2Text()
        h.ignore_links = False
        h.ignore_images = False
        h.body_width = 0
        return h.handle(html).strip()

    def _extract_bodies(self, msg: email.message.Message) -> tuple[list[str], str | None]:
        """Walk MIME parts and return (plain_text_parts, first_html)."""
        texts: list[str] = []
        html: str | None = None

        for part in msg.walk():
            # Skip multipart containers; they have no content of their own
            if part.get_content_maintype() == "multipart":
                continue

            # Skip attachment parts
            if part.get_content_disposition() == "attachment":
                continue

            content_type = part.get_content_type()
            if content_type not in ("text/plain", "text/html"):
                continue

            try:
                payload = part.get_content()
            except (LookupError, UnicodeDecodeError):
                # Unknown or lying charset
                raw = part.get_payload(decode=True) or b""
                payload = raw.decode("utf-8", errors="replace")

            if not isinstance(payload, str):
                continue
            if content_type == "text/plain":
                texts.append(payload)
            elif html is None:
                html = payload

        return texts, html
