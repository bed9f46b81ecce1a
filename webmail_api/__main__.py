"""Entry point: ``python -m webmail_api``."""

from __future__ import annotations

import uvicorn

from webmail_core import setup_logging

from .config import Settings


def main() -> None:
    settings = Settings()
    setup_logging(json=settings.log_json, level=settings.log_level)

    uvicorn.run(
        "webmail_api.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
