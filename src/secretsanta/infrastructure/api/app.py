"""SecretSanta HTTP application.

``create_app`` assembles the FastAPI app: health checks, the versioned API,
domain error translation and the request logging middleware. The module
level ``app`` is what uvicorn serves.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable

from fastapi import APIRouter, FastAPI, Request, Response, status
from fastapi.responses import JSONResponse

from secretsanta.core.config import get_settings
from secretsanta.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
    new_correlation_id,
)
from secretsanta.domain.exceptions import ErrorKind, SecretSantaError
from secretsanta.infrastructure.persistence.database import (
    close_database,
    get_db_manager,
    init_database,
)

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
GENERIC_ERROR_DETAIL = "An unexpected error occurred"

ERROR_STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.INVALID_STATE: status.HTTP_409_CONFLICT,
    ErrorKind.PRECONDITION_FAILED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

health_router = APIRouter(tags=["health"])


@health_router.get("/health")
async def health():
    """The process is up. The database is not consulted."""
    return {"status": "healthy", "service": "SecretSanta", "version": get_settings().app_version}


@health_router.get("/ready")
async def ready():
    """Ready to serve: the database answers."""
    if not await get_db_manager().check_connection():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "service": "SecretSanta", "database": "disconnected"},
        )
    return {
        "status": "ready",
        "service": "SecretSanta",
        "version": get_settings().app_version,
        "database": "connected",
    }


@health_router.get("/live")
async def live():
    return {"status": "alive", "service": "SecretSanta", "version": get_settings().app_version}


@health_router.get("/version")
async def version():
    return {"version": get_settings().app_version}


def error_body(kind: ErrorKind, detail: str) -> JSONResponse:
    """Build the ``{"error": kind, "detail": ...}`` response for an error kind."""
    if kind is ErrorKind.INTERNAL and not get_settings().debug:
        detail = GENERIC_ERROR_DETAIL
    return JSONResponse(
        status_code=ERROR_STATUS_CODES[kind],
        content={"error": kind.value, "detail": detail},
    )


async def handle_domain_error(request: Request, exc: SecretSantaError) -> JSONResponse:
    response = error_body(exc.kind, exc.detail)
    log = logger.error if response.status_code >= 500 else logger.info
    log(
        "Request rejected",
        method=request.method,
        path=request.url.path,
        kind=exc.kind.value,
        detail=exc.detail,
    )
    return response


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled exception",
        method=request.method,
        path=request.url.path,
        exc_type=type(exc).__name__,
    )
    return error_body(ErrorKind.INTERNAL, str(exc))


async def log_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Tag the request with a correlation ID and log its outcome.

    A client supplied ``X-Correlation-ID`` is reused; either way the ID is
    echoed back on the response.
    """
    correlation_id = request.headers.get(CORRELATION_HEADER) or new_correlation_id()
    bind_correlation_id(correlation_id)
    try:
        logger.info("Request started", method=request.method, path=request.url.path)
        response = await call_next(request)
        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
        )
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
    finally:
        clear_context()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    configure_logging(settings)
    logger.info(
        "Starting SecretSanta",
        version=settings.app_version,
        environment=settings.environment,
    )

    try:
        await init_database()
    except Exception as e:
        logger.error("Database initialization failed", error=str(e))
        raise

    yield

    await close_database()
    logger.info("SecretSanta stopped")


def create_app() -> FastAPI:
    """Build the FastAPI application.

    Interactive docs are only served in development.
    """
    from secretsanta.infrastructure.api.routes import groups_router, users_router

    settings = get_settings()
    docs = settings.is_development

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Secret Santa gift exchange coordinator",
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        openapi_url="/openapi.json" if docs else None,
        lifespan=lifespan,
    )

    app.include_router(health_router)
    app.include_router(users_router, prefix=f"{settings.api_prefix}/users")
    app.include_router(groups_router, prefix=f"{settings.api_prefix}/groups")

    @app.get(settings.api_prefix, tags=["root"])
    async def api_root():
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "api_version": "v1",
        }

    app.add_exception_handler(SecretSantaError, handle_domain_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.middleware("http")(log_requests)

    return app


app = create_app()
