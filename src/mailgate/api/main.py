"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger

from mailgate.api.dependencies import get_gateway
from mailgate.api.schemas import ErrorResponse
from mailgate.domain.errors import GatewayError
from mailgate.infrastructure import get_settings
from mailgate.infrastructure.logging import configure_logging
from mailgate.infrastructure.provider_table import get_provider_table


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment} (TLS verification {'on' if settings.verify_tls else 'off'})")

    # Provider table is loaded exactly once, before the first request
    table = get_provider_table()
    get_gateway()
    logger.info(f"Provider table ready: {', '.join(p.display_name for p in table.profiles())}")

    yield

    logger.info("Shutting down...")
    logger.info("Shutdown complete")


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Protocol failures are normal results: HTTP 200 with success=false."""
    body = ErrorResponse(error=exc.message, protocol=exc.to_dict()["protocol"])
    return JSONResponse(status_code=200, content=body.model_dump(by_alias=True))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    body = ErrorResponse(error="Internal server error")
    return JSONResponse(status_code=500, content=body.model_dump(by_alias=True))


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="HTTP gateway for testing, reading and sending through IMAP/SMTP mailboxes",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Register routes
    from mailgate.api.routes import health_router, router

    app.include_router(router)
    app.include_router(health_router)

    if settings.static_dir:
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
        logger.info(f"Serving static files from {settings.static_dir}")

    return app


# Create app instance
app = create_app()
