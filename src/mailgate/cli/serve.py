"""Run the mail gateway HTTP server."""

from __future__ import annotations

import argparse

import uvicorn
from loguru import logger

from mailgate.infrastructure import get_settings
from mailgate.infrastructure.logging import configure_logging


def main() -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Mail gateway HTTP server")
    parser.add_argument("--host", default=settings.api_host, help="Bind address")
    parser.add_argument("--port", type=int, default=settings.api_port, help="Listening port")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    args = parser.parse_args()

    configure_logging(settings.log_level)

    logger.info("=" * 60)
    logger.info(f"{settings.app_name} v{settings.app_version}")
    logger.info(f"Listening on http://{args.host}:{args.port}")
    logger.info("=" * 60)

    # uvicorn handles SIGINT/SIGTERM and runs the lifespan shutdown
    uvicorn.run(
        "mailgate.api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
