"""
FastAPI application: JSON API, public pages and error handling.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from portfolio import __version__
from portfolio.api import router as api_router
from portfolio.config import get_settings
from portfolio.deps import get_store, reset_store
from portfolio.schemas import ErrorResponse
from portfolio.services.store import BackendUnavailable, DuplicateIdError
from portfolio.site import router as site_router


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting %s", settings.SITE_NAME)

    store = get_store()
    if not store.database_configured:
        logger.warning("DATABASE_URL not set, serving from %s only", settings.DATA_FILE)
    elif store.is_database_available(refresh=True):
        logger.info("Database reachable")
    else:
        logger.warning("Database unreachable at startup, falling back to %s", settings.DATA_FILE)
    if not settings.admin_configured:
        logger.warning("Admin credentials not configured, admin API is locked")

    yield

    reset_store()
    logger.info("Shutting down")


def _error(status_code: int, error: str, detail: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail, code=code).model_dump(),
    )


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title=settings.SITE_NAME,
        version=__version__,
        description="Portfolio site with an admin API over a database and a JSON file fallback",
        lifespan=lifespan,
    )

    # === Middleware ===

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # === Error Handlers ===

    @app.exception_handler(DuplicateIdError)
    async def duplicate_id_handler(request: Request, exc: DuplicateIdError):
        return _error(409, "Duplicate id", str(exc), "duplicate_id")

    @app.exception_handler(BackendUnavailable)
    async def backend_unavailable_handler(request: Request, exc: BackendUnavailable):
        logger.error("Backend unavailable on %s %s: %s", request.method, request.url.path, exc)
        return _error(503, "Service unavailable", str(exc), "backend_unavailable")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler for unhandled errors."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error(500, "Internal server error", "An unexpected error occurred", "internal_error")

    app.include_router(api_router)
    app.include_router(site_router)
    return app


app = create_app()
