import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.config import settings
from app.core.exceptions import register_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import RequestIdMiddleware, RequestTimeoutMiddleware
from app.db.base import Base
from app.db.session import engine
from app.dependencies import DbSession
from app.models import Qube, Zone  # noqa: F401  registers tables on Base.metadata
from app.schemas.common import ComponentCheck, HealthResponse, StatusResponse

_start_time: float = 0.0


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    global _start_time
    logger = logging.getLogger(__name__)

    logger.info(
        "Application starting",
        extra={"version": settings.app_version, "env": settings.env, "debug": settings.debug},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ready")

    _start_time = time.monotonic()
    logger.info("Application ready", extra={"version": settings.app_version})

    yield

    logger.info("Application shutting down")
    await engine.dispose()
    logger.info("Database engine disposed")


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "Management console API for Qubes Air. Manages infrastructure zones and the "
            "qubes they host, enforcing zone connectivity and referential constraints."
        ),
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Last added runs outermost: the timeout runs inside the request-id context
    app.add_middleware(RequestTimeoutMiddleware, timeout_s=settings.request_timeout_s)
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )
    register_exception_handlers(app)

    from app.api.v1.router import router as v1_router

    app.include_router(v1_router, prefix="/api/v1")

    @app.get("/health", tags=["health"], response_model=HealthResponse)
    async def health_check(session: DbSession) -> JSONResponse:
        db_status = "healthy"
        try:
            await session.execute(text("SELECT 1"))
        except Exception:
            logging.getLogger(__name__).warning("Database health check failed", exc_info=True)
            db_status = "unhealthy"

        uptime = int(time.monotonic() - _start_time) if _start_time else 0
        body = HealthResponse(
            status=db_status,
            version=settings.app_version,
            env=settings.env,
            uptime_s=uptime,
            checks={"database": ComponentCheck(status=db_status)},
        )
        return JSONResponse(
            status_code=200 if body.status == "healthy" else 503,
            content=body.model_dump(),
        )

    @app.get("/api/v1/status", tags=["health"], response_model=StatusResponse)
    async def service_status() -> StatusResponse:
        return StatusResponse(name=settings.app_name, version=settings.app_version)

    return app


app = create_app()
