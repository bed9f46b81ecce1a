"""Single-message endpoints: read body, delete, send."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, status
from fastapi.responses import PlainTextResponse

from webmail_api.deps import get_mail_service
from webmail_api.schemas import StatusResponse
from webmail_core import MailService, OutgoingMessage

router = APIRouter(prefix="/api/v1/messages", tags=["messages"])

Uid = Annotated[int, Path(gt=0, description="Message UID")]


@router.get("/{mailbox:path}/{uid}", response_class=PlainTextResponse)
async def get_message_body(
    mailbox: str,
    uid: Uid,
    mail: Annotated[MailService, Depends(get_mail_service)],
):
    """Plain-text body of one message."""
    body = await mail.get_message_body(mailbox, uid)
    if body is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    return PlainTextResponse(body)


@router.delete("/{mailbox:path}/{uid}", response_model=StatusResponse)
async def delete_message(
    mailbox: str,
    uid: Uid,
    mail: Annotated[MailService, Depends(get_mail_service)],
):
    """Delete one message; unknown UIDs succeed as a no-op."""
    await mail.delete_message(mailbox, uid)
    return StatusResponse()


@router.post("", response_model=StatusResponse)
async def send_message(
    message: OutgoingMessage,
    mail: Annotated[MailService, Depends(get_mail_service)],
):
    """Send a message through the configured SMTP server."""
    await mail.send_message(message)
    return StatusResponse()
