"""Webmail REST server: FastAPI routes over the mail-session layer."""

from .app import create_app

__all__ = ["create_app"]
