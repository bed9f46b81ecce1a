"""Application data shapes returned by the mail-session layer.

Uses ``Field(alias="from")`` because ``"from"`` is a Python reserved word.
``populate_by_name=True`` allows construction via either key.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class Mailbox(BaseModel):
    """A flattened mailbox: leaf label plus fully-qualified path."""

    model_config = {"frozen": True}

    name: str
    path: str


class MessageSummary(BaseModel):
    """Envelope-level view of one message; ``id`` is the server UID."""

    model_config = {"frozen": True, "populate_by_name": True}

    id: str = Field(min_length=1)
    date: str = ""
    from_address: str = Field(default="", alias="from")
    subject: str = ""


class OutgoingMessage(BaseModel):
    """A message to hand to the SMTP server, as composed by the caller."""

    model_config = {"frozen": True, "populate_by_name": True}

    to: str
    from_address: str = Field(alias="from")
    subject: str = ""
    text: str = ""

    @field_validator("to", "from_address", "subject")
    @classmethod
    def _single_line(cls, value: str) -> str:
        # Header values end up in the MIME headers verbatim
        if "\r" in value or "\n" in value:
            raise ValueError("must not contain line breaks")
        return value
