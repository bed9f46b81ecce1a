"""FastAPI dependency-injection helpers."""

from __future__ import annotations

from fastapi import Request

from webmail_core import MailService


def get_mail_service(request: Request) -> MailService:
    return request.app.state.mail
