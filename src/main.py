"""FastAPI application entrypoint.

Application startup order:
1. Load settings (from environment)
2. Configure structured logging
3. Build the ModelRouter (catalog + routing tables) and wire it into the API
4. Register middleware and include routers
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.agent.model_router import ModelRouter
from src.api import model_routing
from src.api.router import api_v1_router, public_router
from src.config import get_settings
from src.telemetry.logging import RequestIdMiddleware, configure_logging

log = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: startup and shutdown."""
    settings = get_settings()

    # Configure structured logging first (before any log calls)
    configure_logging(
        json_logs=bool(settings.json_logs),
        log_level="DEBUG" if settings.debug else settings.log_level,
    )

    log.info(
        "app.starting",
        environment=settings.environment,
        catalog_path=settings.routing_catalog_path,
        tables_path=settings.routing_tables_path,
    )

    model_router = ModelRouter.from_settings(settings)
    model_routing.configure_model_router(model_router)
    app.state.model_router = model_router

    log.info("app.ready", model_count=len(model_router.catalog))
    yield

    log.info(
        "app.shutdown",
        models_with_usage=len(model_router.get_usage_stats()),
    )


def create_app() -> FastAPI:
    """Application factory."""
    settings = get_settings()

    app = FastAPI(
        title="Model Routing Engine",
        description=(
            "Selects the best LLM for a task across providers by filtering on "
            "hard constraints and scoring capability, cost, quality, context "
            "fit and provider trust."
        ),
        version="0.1.0",
        docs_url="/docs" if settings.is_dev else None,
        redoc_url="/redoc" if settings.is_dev else None,
        openapi_url="/openapi.json" if settings.is_dev else None,
        lifespan=lifespan,
    )

    # Unique request ID for log correlation
    app.add_middleware(RequestIdMiddleware)

    # ------------------------------------------------------------------ #
    # Routers
    # ------------------------------------------------------------------ #
    app.include_router(public_router)
    app.include_router(api_v1_router)

    # ------------------------------------------------------------------ #
    # Global exception handlers
    # ------------------------------------------------------------------ #

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        log.error(
            "app.unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app


# Module-level app instance for uvicorn
app = create_app()
