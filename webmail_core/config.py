"""Mail server configuration.

Every field can be overridden via env vars (``IMAP_HOST``,
``IMAP_AUTH__USER``, ``SMTP_PORT`` ...), or the whole value can be read
from a ``serverInfo.json`` document with :func:`load_server_config`.
Instances are frozen: the configuration is loaded once and shared
read-only by every session.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthConfig(BaseModel):
    """Login credentials for one server profile.

    ``pass`` is a Python keyword, so the field is named ``password`` and
    accepts ``pass`` as its alias.
    """

    model_config = {"frozen": True, "populate_by_name": True}

    user: str = Field(description="Login username")
    password: SecretStr = Field(alias="pass", description="Login password")


class ImapServerConfig(BaseSettings):
    """IMAP server connection settings."""

    model_config = SettingsConfigDict(
        env_prefix="IMAP_",
        env_nested_delimiter="__",
        frozen=True,
    )

    host: str = Field(description="IMAP server hostname")
    port: int = Field(default=993, description="IMAP server port")
    use_ssl: bool = Field(default=True, description="Use implicit SSL/TLS")
    allow_invalid_certs: bool = Field(
        default=False,
        description="Accept self-signed or otherwise invalid certificates",
    )
    timeout_seconds: float | None = Field(
        default=30.0,
        description="Socket timeout for connect and commands",
    )
    auth: AuthConfig


class SmtpServerConfig(BaseSettings):
    """SMTP server connection settings."""

    model_config = SettingsConfigDict(
        env_prefix="SMTP_",
        env_nested_delimiter="__",
        frozen=True,
    )

    host: str = Field(description="SMTP server hostname")
    port: int = Field(default=587, description="SMTP server port")
    use_tls: bool = Field(default=False, description="Use implicit TLS (port 465)")
    start_tls: bool | None = Field(
        default=None,
        description="Upgrade with STARTTLS; None means use it when offered",
    )
    allow_invalid_certs: bool = Field(
        default=False,
        description="Accept self-signed or otherwise invalid certificates",
    )
    timeout_seconds: float | None = Field(
        default=30.0,
        description="Timeout for connect and each SMTP command",
    )
    auth: AuthConfig


class ServerConfig(BaseSettings):
    """Root configuration: the SMTP and IMAP server profiles.

    Nested configs are populated from their own env-var prefixes.
    """

    model_config = SettingsConfigDict(env_prefix="WEBMAIL_SERVER_", frozen=True)

    smtp: SmtpServerConfig = Field(default_factory=SmtpServerConfig)
    imap: ImapServerConfig = Field(default_factory=ImapServerConfig)


def load_server_config(path: str | Path) -> ServerConfig:
    """Read a ``serverInfo.json`` document.

    The expected shape is::

        {"smtp": {"host": ..., "port": ..., "auth": {"user": ..., "pass": ...}},
         "imap": {"host": ..., "port": ..., "auth": {"user": ..., "pass": ...}}}
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return ServerConfig.model_validate(data)
