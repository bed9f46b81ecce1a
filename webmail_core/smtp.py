"""Outgoing mail via aiosmtplib: one connection, one attempt per message."""

from __future__ import annotations

from email.message import EmailMessage

import aiosmtplib
import structlog

from .config import SmtpServerConfig
from .errors import SendError
from .models import OutgoingMessage
from .session import build_ssl_context

logger = structlog.get_logger()


def compose(outgoing: OutgoingMessage) -> EmailMessage:
    """Build the MIME message for *outgoing*; non-ASCII headers are encoded."""
    msg = EmailMessage()
    msg["From"] = outgoing.from_address
    msg["To"] = outgoing.to
    msg["Subject"] = outgoing.subject
    msg.set_content(outgoing.text)
    return msg


async def send_message(config: SmtpServerConfig, outgoing: OutgoingMessage) -> None:
    """Hand *outgoing* to the SMTP server.

    Raises :class:`SendError` if the message cannot be composed or if
    connecting, authenticating or delivery fails.  There is no retry.
    """
    try:
        msg = compose(outgoing)
        async with aiosmtplib.SMTP(
            hostname=config.host,
            port=config.port,
            use_tls=config.use_tls,
            start_tls=config.start_tls,
            tls_context=build_ssl_context(config.allow_invalid_certs),
            timeout=config.timeout_seconds,
        ) as smtp:
            await smtp.login(config.auth.user, config.auth.password.get_secret_value())
            await smtp.send_message(msg)
    except (aiosmtplib.SMTPException, OSError, ValueError) as exc:
        logger.warning(
            "smtp_send_failed",
            host=config.host,
            to=outgoing.to,
            error=str(exc),
        )
        raise SendError(f"Sending to {outgoing.to} failed: {exc}") from exc

    logger.info("smtp_message_sent", host=config.host, to=outgoing.to)
