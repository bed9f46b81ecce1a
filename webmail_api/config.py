"""REST server configuration loaded from environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Top-level settings for the webmail REST server.

    All env vars are prefixed with ``WEBMAIL_``.
    Example: ``WEBMAIL_SERVER_INFO_PATH=/etc/webmail/serverInfo.json``
    """

    model_config = SettingsConfigDict(env_prefix="WEBMAIL_")

    # --- Mail servers -------------------------------------------------------
    server_info_path: str | None = Field(
        default=None,
        description="serverInfo.json to load; when unset IMAP_*/SMTP_* env vars are used",
    )

    # --- HTTP ---------------------------------------------------------------
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the API from a browser",
    )

    # --- Server -------------------------------------------------------------
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8080, description="Bind port")
    log_level: str = Field(default="INFO", description="Log level")
    log_json: bool = Field(
        default=True,
        description="Use JSON log output (True for prod, False for dev)",
    )
