"""Transport Vendor API — FastAPI application factory."""


import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from transport_vendors.core.config import settings
from transport_vendors.core.exceptions import classify_store_error, register_exception_handlers
from transport_vendors.db.base import engine, ping_database
from transport_vendors.db.migrate import run_migrations
from transport_vendors.middleware.request_log import RequestLogMiddleware
from transport_vendors.routers.v1.vendors import router as vendors_router
from transport_vendors.schemas.common import HealthResponse

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    """Set up structured logging for the application."""
    if settings.log_level:
        level = settings.log_level
    else:
        level = logging.DEBUG if settings.app_env == "development" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s (%s) against %s", settings.app_name, settings.app_env, settings.safe_database_url)
    if settings.run_migrations_on_startup:
        # Never fatal: a failed migration leaves the app serving in degraded mode
        await run_migrations()
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url="/docs" if settings.app_env == "development" else None,
        redoc_url="/redoc" if settings.app_env == "development" else None,
        lifespan=lifespan,
    )

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Request logging ---
    app.add_middleware(RequestLogMiddleware)

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- API routes (/api/vendors/*) ---
    app.include_router(vendors_router, prefix="/api")

    # --- Health check: live probe, no cached connection state ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        try:
            await ping_database()
        except (SQLAlchemyError, OSError) as exc:
            logger.warning("Health check failed: %s", exc)
            body = HealthResponse(
                status="degraded",
                app=settings.app_name,
                env=settings.app_env,
                database="unavailable",
                hint=classify_store_error(exc) or "Check the database configuration.",
            )
            return JSONResponse(status_code=503, content=body.model_dump())
        return HealthResponse(app=settings.app_name, env=settings.app_env)

    return app


app = create_app()
