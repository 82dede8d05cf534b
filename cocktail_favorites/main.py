import logging
import uuid
from contextlib import asynccontextmanager
from http import HTTPStatus

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as SQLAlchemyTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException

from cocktail_favorites.db.connection import (
    dispose_engine,
    get_engine,
    sanitize_database_url,
)
from cocktail_favorites.settings import get_settings

from .api import favorites, global_favorites
from .schemas.error import ErrorType, ValidationErrorDetail
from .services.favorites import FavoritesStoreUnavailableError
from .utils.error_responses import (
    build_error_response,
    build_validation_error_response,
    error_json_response,
)
from .utils.request_context import get_caller_id, get_request_id, set_request_id
from .warmup import create_tables, wait_for_database

settings = get_settings()

logging.basicConfig(
    level=settings.log_level_numeric,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def validate_environment() -> None:
    """Log warnings for optional configuration left at its defaults."""

    warnings = get_settings().optional_config_warnings()
    if warnings:
        logger.warning("=" * 60)
        logger.warning("Environment Configuration Warnings:")
        for warning in warnings:
            logger.warning(f"  • {warning}")
        logger.warning("=" * 60)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Wait for the database before serving and release the pool on shutdown."""

    validate_environment()
    current = get_settings()

    logger.info("=" * 60)
    logger.info("Favorite Cocktails API - Database Preflight Check")
    logger.info("=" * 60)
    logger.info(f"Database Type: {current.database_type.upper()}")
    logger.info(
        f"Database URL: {sanitize_database_url(current.resolved_database_url)}"
    )

    engine = get_engine()
    await wait_for_database(
        engine,
        max_attempts=current.db_startup_max_attempts,
        delay_seconds=current.db_startup_retry_delay_seconds,
    )

    if current.database_type == "sqlite":
        logger.info("SQLite fallback - creating tables in place of migrations")
        await create_tables(engine)
    else:
        logger.info("PostgreSQL mode - schema is managed by Alembic migrations")
    logger.info("=" * 60)

    yield

    logger.info("Shutting down Favorite Cocktails API")
    await dispose_engine()


app = FastAPI(
    title="Favorite Cocktails API",
    version="0.1.0",
    description="Per-user favorite cocktails with popularity, trend and recommendation analytics.",
    lifespan=lifespan,
    redirect_slashes=False,
)


def _default_origins() -> list[str]:
    ports = list(range(3000, 3011)) + [5173]
    origins = []
    for host in ("localhost", "127.0.0.1"):
        origins.extend([f"http://{host}:{port}" for port in ports])
    return origins


def _combine_origins(*origin_groups: list[str]) -> list[str]:
    """Merge origins preserving order and removing duplicates."""
    seen: set[str] = set()
    combined: list[str] = []
    for group in origin_groups:
        for origin in group:
            normalized = origin.rstrip("/")
            if normalized and normalized not in seen:
                seen.add(normalized)
                combined.append(normalized)
    return combined


if "*" in settings.cors_allow_origins:
    allow_origins = ["*"]
    allow_credentials = False
else:
    allow_origins = _combine_origins(_default_origins(), settings.cors_allow_origins)
    allow_credentials = True

logger.info("Configured CORS allow_origins: %s", ", ".join(allow_origins))

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add unique request ID to each request for tracking."""
    request_id = str(uuid.uuid4())
    set_request_id(request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# Exception handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle FastAPI request validation errors."""
    errors = [
        ValidationErrorDetail(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            value=error.get("input"),
        )
        for error in exc.errors()
    ]

    logger.warning(
        "Validation error for request %s to %s: %s errors",
        get_request_id(),
        request.url.path,
        len(errors),
    )

    return error_json_response(
        build_validation_error_response(
            message="Request validation failed",
            detail=f"{len(errors)} validation error(s)",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            path=str(request.url.path),
            errors=errors,
        )
    )


_HTTP_ERROR_TYPES = {
    status.HTTP_400_BAD_REQUEST: ErrorType.INVALID_ARGUMENT,
    status.HTTP_401_UNAUTHORIZED: ErrorType.AUTHENTICATION_ERROR,
    status.HTTP_403_FORBIDDEN: ErrorType.AUTHORIZATION_ERROR,
    status.HTTP_404_NOT_FOUND: ErrorType.NOT_FOUND,
    status.HTTP_409_CONFLICT: ErrorType.CONFLICT,
}


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Wrap ``HTTPException`` raised by routers in the standard error envelope."""
    fallback = (
        ErrorType.INVALID_ARGUMENT if exc.status_code < 500 else ErrorType.INTERNAL_ERROR
    )
    error_type = _HTTP_ERROR_TYPES.get(exc.status_code, fallback)
    logger.info(
        "Request %s to %s rejected with %s: %s",
        get_request_id(),
        request.url.path,
        exc.status_code,
        exc.detail,
    )

    payload = build_error_response(
        error_type=error_type,
        message=HTTPStatus(exc.status_code).phrase,
        detail=str(exc.detail),
        status_code=exc.status_code,
        path=str(request.url.path),
    )
    response = error_json_response(payload)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(FavoritesStoreUnavailableError)
async def store_unavailable_exception_handler(
    request: Request, exc: FavoritesStoreUnavailableError
):
    """Surface an unreachable favorites store as a retryable 503."""
    logger.error(
        "Favorites store unavailable for request %s (caller %s) to %s: %s",
        get_request_id(),
        get_caller_id() or "anonymous",
        request.url.path,
        str(exc),
    )

    return error_json_response(
        build_error_response(
            error_type=ErrorType.SERVICE_UNAVAILABLE,
            message="Favorites store unavailable",
            detail=str(exc),
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            path=str(request.url.path),
            retry_after=5,
        )
    )


@app.exception_handler(OperationalError)
@app.exception_handler(DBAPIError)
async def database_connection_exception_handler(request: Request, exc: Exception):
    """Handle database connection errors."""
    logger.error(
        "Database connection error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        str(exc),
    )

    return error_json_response(
        build_error_response(
            error_type=ErrorType.DATABASE_ERROR,
            message="Database connection failed",
            detail="Unable to connect to the database. Please try again later.",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            path=str(request.url.path),
            retry_after=5,
        )
    )


@app.exception_handler(SQLAlchemyTimeoutError)
async def database_timeout_exception_handler(
    request: Request, exc: SQLAlchemyTimeoutError
):
    """Handle database pool timeout errors."""
    logger.error(
        "Database timeout error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        str(exc),
    )

    return error_json_response(
        build_error_response(
            error_type=ErrorType.TIMEOUT_ERROR,
            message="Database query timeout",
            detail="The database query took too long to complete. Please try again.",
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            path=str(request.url.path),
            retry_after=3,
        )
    )


@app.exception_handler(IntegrityError)
async def database_integrity_exception_handler(request: Request, exc: IntegrityError):
    """Handle database integrity constraint errors."""
    logger.error(
        "Database integrity error for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        str(exc),
    )

    return error_json_response(
        build_error_response(
            error_type=ErrorType.CONFLICT,
            message="Data integrity constraint violation",
            detail="The operation would violate a database constraint.",
            status_code=status.HTTP_409_CONFLICT,
            path=str(request.url.path),
        )
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Handle all other unhandled exceptions."""
    logger.exception(
        "Unhandled exception for request %s (caller %s) to %s: %s",
        get_request_id(),
        get_caller_id() or "anonymous",
        request.url.path,
        type(exc).__name__,
    )

    return error_json_response(
        build_error_response(
            error_type=ErrorType.INTERNAL_ERROR,
            message="Internal server error",
            detail=f"An unexpected error occurred: {type(exc).__name__}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            path=str(request.url.path),
        )
    )


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    """Simple health endpoint for readiness checks."""
    return {"status": "ok"}


app.include_router(
    global_favorites.router, prefix="/api/favorites/global", tags=["favorites-global"]
)
app.include_router(favorites.router, prefix="/api/favorites", tags=["favorites"])
