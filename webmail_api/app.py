"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from webmail_api.config import Settings
from webmail_core import MailError, MailService, ServerConfig, load_server_config

logger = structlog.get_logger()


def load_mail_config(settings: Settings) -> ServerConfig:
    """Resolve the mail server profiles once, at startup."""
    if settings.server_info_path:
        return load_server_config(settings.server_info_path)
    return ServerConfig()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: resolve server config and build the MailService."""
    settings: Settings = app.state.settings
    config = load_mail_config(settings)
    app.state.mail = MailService(config)
    logger.info(
        "mail_service_created",
        imap_host=config.imap.host,
        smtp_host=config.smtp.host,
    )
    yield
    logger.info("shutdown_complete")


async def mail_error_handler(request: Request, exc: MailError) -> JSONResponse:
    logger.warning(
        "mail_operation_failed",
        method=request.method,
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "Mail server error"},
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build and return the FastAPI application."""
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="Webmail Backend",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept"],
    )
    app.add_exception_handler(MailError, mail_error_handler)

    from webmail_api.routers.mailboxes import router as mailboxes_router
    from webmail_api.routers.messages import router as messages_router

    app.include_router(mailboxes_router)
    app.include_router(messages_router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": "webmail-backend"}

    return app
