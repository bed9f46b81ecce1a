"""Mailbox listing and per-mailbox message listing."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from webmail_api.deps import get_mail_service
from webmail_core import Mailbox, MailService, MessageSummary

router = APIRouter(prefix="/api/v1/mailboxes", tags=["mailboxes"])


@router.get("", response_model=list[Mailbox])
async def list_mailboxes(
    mail: Annotated[MailService, Depends(get_mail_service)],
):
    """Every mailbox on the server, flattened in pre-order."""
    return await mail.list_mailboxes()


@router.get("/{mailbox:path}", response_model=list[MessageSummary])
async def list_messages(
    mailbox: str,
    mail: Annotated[MailService, Depends(get_mail_service)],
):
    """Message summaries for *mailbox*, oldest first."""
    return await mail.list_messages(mailbox)
