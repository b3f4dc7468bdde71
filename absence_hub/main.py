"""Absence Hub — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from absence_hub.absences.router import router as absences_router
from absence_hub.common.exceptions import register_exception_handlers
from absence_hub.common.rate_limit import limiter
from absence_hub.config import settings
from absence_hub.vacations.router import router as vacations_router

logger = logging.getLogger("absence_hub")


def configure_logging() -> None:
    """Root logging from LOG_LEVEL; safe to call more than once."""
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info(
        "Absence Hub starting (environment=%s, count_mode=%s)",
        settings.ENVIRONMENT,
        settings.VACATION_COUNT_MODE.value,
    )
    yield
    logger.info("Absence Hub stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging()

    app = FastAPI(
        title="Absence Hub",
        description="Absence balances, vacation accrual and request validation",
        version="1.0.0",
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # Exception handlers (RFC 7807, including slowapi 429s)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check
    @app.get("/api/v1/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": "1.0.0",
            "environment": settings.ENVIRONMENT,
        }

    # Register routers
    app.include_router(absences_router, prefix="/api/v1/absences", tags=["absences"])
    app.include_router(vacations_router, prefix="/api/v1/vacations", tags=["vacations"])

    return app


app = create_app()
