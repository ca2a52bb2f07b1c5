"""FastAPI application factory."""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from ..config import get_settings
from ..logging import get_logger, log_api_request
from . import register_exception_handlers
from .deps import Services, build_services
from .entities import router as entities_router
from .webhooks import router as webhooks_router

logger = get_logger(__name__)


def create_app(services: Services | None = None) -> FastAPI:
    """Create the API app.

    Args:
        services: Pre-built services (tests); built from settings otherwise
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Starting samlink API",
            extra={"environment": settings.environment, "debug": settings.api_debug},
        )
        if getattr(app.state, "services", None) is None:
            app.state.services = build_services(settings)

        yield

        logger.info("Shutting down samlink API")
        await app.state.services.close()

    app = FastAPI(
        title="samlink API",
        description="Resolve CRM companies to SAM.gov registry entities",
        version="0.1.0",
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )
    app.state.services = services

    register_exception_handlers(app)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.monotonic()
        response = await call_next(request)
        log_api_request(
            request.method,
            request.url.path,
            response.status_code,
            (time.monotonic() - started) * 1000,
            request_id=request.headers.get("x-request-id"),
        )
        return response

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Basic health check endpoint."""
        return {"status": "healthy", "service": "samlink-api"}

    app.include_router(webhooks_router, tags=["Webhooks"])
    app.include_router(entities_router, prefix="/api/v1", tags=["Entities"])

    return app
