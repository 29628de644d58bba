"""Main FastAPI application."""
import json
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.middleware.base import BaseHTTPMiddleware

from notifications_api.api.notifications import router as notifications_router
from notifications_api.domain.common.errors import (
    MappingError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from notifications_api.infra.db.base import (
    create_engine_from_settings,
    create_schema,
    create_session_factory,
)
from notifications_api.settings import Settings, get_settings

logger = logging.getLogger(__name__)

LEGACY_FAILURE_STATUS = 400


def configure_logging(level: str) -> None:
    """Install the root logging format once per process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: a session factory injected by the caller (tests) is used as-is
    engine = None
    if app.state.session_factory is None:
        settings: Settings = app.state.settings
        engine = create_engine_from_settings(settings)
        if settings.create_schema_on_startup:
            try:
                await create_schema(engine)
            except Exception as e:
                # Database might not be ready yet; requests will report store errors until it is
                logger.warning("Could not create schema during startup: %s", e)
        app.state.session_factory = create_session_factory(engine)
        logger.info("Database engine ready (pool_size=%s)", settings.database_pool_size)

    yield

    # Shutdown
    if engine is not None:
        await engine.dispose()
        app.state.session_factory = None
        logger.info("Database engine disposed")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all requests and responses."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        logger.info(f"[SERVER REQUEST] {request.method} {request.url.path}")
        logger.debug(f"   Query params: {dict(request.query_params)}")

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"[SERVER RESPONSE] {request.method} {request.url.path} - {response.status_code} ({process_time:.3f}s)"
        )
        return response


def _failure_status(request: Request, status_code: int) -> int:
    """Status for a failure, collapsed to 400 when legacy status codes are enabled."""
    if request.app.state.settings.legacy_status_codes:
        return LEGACY_FAILURE_STATUS
    return status_code


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors (400)."""
    errors = exc.errors()
    logger.error(f"[VALIDATION ERROR] {request.method} {request.url.path}")
    for i, error in enumerate(errors, 1):
        logger.error(f"   Error {i}: {json.dumps(error, default=str)}")
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_encoder(errors)},
    )


async def domain_not_found_handler(request: Request, exc: NotFoundError):
    """Return 404 when a resource is not found."""
    return JSONResponse(
        status_code=_failure_status(request, 404),
        content={"detail": str(exc)},
    )


async def domain_validation_handler(request: Request, exc: ValidationError):
    """Return 400 for domain validation errors."""
    return JSONResponse(
        status_code=400,
        content={"detail": exc.message},
    )


async def domain_mapping_handler(request: Request, exc: MappingError):
    """Schema drift between the store and the code: generic failure."""
    logger.error(f"[MAPPING ERROR] {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=_failure_status(request, 500),
        content={"detail": "Stored notification has an unexpected shape"},
    )


async def domain_store_handler(request: Request, exc: StoreError):
    """Store failures were rolled back by the repository; report them without internals."""
    logger.error(f"[STORE ERROR] {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=_failure_status(request, 500),
        content={"detail": exc.message},
    )


def create_app(
    settings: Optional[Settings] = None,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> FastAPI:
    """Build the application. Without a session factory one is created from settings at startup."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.session_factory = session_factory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"],
        allow_headers=["*"],
    )
    # Add logging middleware AFTER CORS (CORS must be first)
    app.add_middleware(LoggingMiddleware)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(NotFoundError, domain_not_found_handler)
    app.add_exception_handler(ValidationError, domain_validation_handler)
    app.add_exception_handler(MappingError, domain_mapping_handler)
    app.add_exception_handler(StoreError, domain_store_handler)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok", "version": settings.app_version}

    @app.get("/ready")
    async def readiness():
        """Readiness endpoint: check this app's settings and pool, 200 if ready, 503 otherwise."""
        from notifications_api.readiness import is_ready, run_all_checks_async
        checks = await run_all_checks_async(app.state.settings, app.state.session_factory)
        ready, summary = is_ready(checks)
        if ready:
            return {"ready": True, "checks": summary}
        return JSONResponse(
            status_code=503,
            content={"ready": False, "checks": summary},
        )

    app.include_router(notifications_router)
    return app


def run() -> None:
    """Console entry point: load settings (failing fast when incomplete) and serve."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Server listening on %s:%s", settings.host, settings.port)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
