"""FastAPI application factory.

Creates and configures the FastAPI application with middleware,
exception handlers, and route registration.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from attune import __version__
from attune.api.exceptions import AttuneAPIError, TransitionConflictError, from_domain_error
from attune.api.middleware import LoggingContextMiddleware
from attune.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from attune.api.routes import register_routes
from attune.config import get_settings
from attune.observability.logging import get_logger, setup_logging
from attune.observability.metrics import setup_metrics
from attune.reconciliation.exceptions import ReconciliationError, StoreConnectionError

logger = get_logger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a fully configured FastAPI app with:
    - Structured logging configured from settings
    - CORS and logging-context middleware
    - Global exception handlers
    - Optional OpenTelemetry instrumentation
    - All API routes registered

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()
    observability = settings.observability

    setup_logging(
        level=observability.logging.level,
        format=observability.logging.format,
        redact_pii=observability.logging.redact_pii,
    )
    setup_metrics()

    app = FastAPI(
        title="Attune API",
        description="Empathy exchange reconciliation engine",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=settings.api.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(LoggingContextMiddleware)

    _register_exception_handlers(app)

    register_routes(app, metrics_enabled=observability.metrics.enabled)

    if observability.tracing.enabled:
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

        FastAPIInstrumentor.instrument_app(app)
        logger.info("opentelemetry_instrumentation_enabled")

    logger.info(
        "app_created",
        debug=settings.debug,
        storage_backend=settings.storage.backend,
        cors_origins=settings.api.cors_origins,
    )

    return app


def _api_error_response(exc: AttuneAPIError) -> JSONResponse:
    error_body = ErrorBody(code=exc.error_code, message=exc.message)
    if isinstance(exc, TransitionConflictError) and exc.status:
        error_body.status = exc.status

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=error_body).model_dump(mode="json"),
    )


def _validation_details(errors: list) -> list[ErrorDetail]:
    details = []
    for error in errors:
        field = ".".join(str(loc) for loc in error["loc"])
        details.append(ErrorDetail(field=field, message=error["msg"]))
    return details


def _register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers.

    Args:
        app: FastAPI application
    """

    @app.exception_handler(AttuneAPIError)
    async def attune_api_error_handler(
        request: Request, exc: AttuneAPIError
    ) -> JSONResponse:
        """Handle AttuneAPIError and its subclasses."""
        logger.warning(
            "api_error",
            error_code=exc.error_code.value,
            message=exc.message,
            path=request.url.path,
        )
        return _api_error_response(exc)

    @app.exception_handler(ReconciliationError)
    async def reconciliation_error_handler(
        request: Request, exc: ReconciliationError
    ) -> JSONResponse:
        """Translate rejected engine operations into API errors."""
        api_error = from_domain_error(exc)
        logger.info(
            "reconciliation_rejected",
            error_code=api_error.error_code.value,
            error_type=type(exc).__name__,
            path=request.url.path,
        )
        return _api_error_response(api_error)

    @app.exception_handler(StoreConnectionError)
    async def store_error_handler(
        request: Request, exc: StoreConnectionError
    ) -> JSONResponse:
        """Handle an unreachable store."""
        logger.error("store_unavailable", error=exc.message, path=request.url.path)
        return _api_error_response(from_domain_error(exc))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle FastAPI request validation errors."""
        logger.warning("validation_error", path=request.url.path)

        error_body = ErrorBody(
            code=ErrorCode.INVALID_REQUEST,
            message="Request validation failed",
            details=_validation_details(exc.errors()),
        )
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error=error_body).model_dump(mode="json"),
        )

    @app.exception_handler(ValidationError)
    async def pydantic_validation_error_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        """Handle Pydantic validation errors."""
        logger.warning("pydantic_validation_error", path=request.url.path)

        error_body = ErrorBody(
            code=ErrorCode.INVALID_REQUEST,
            message="Data validation failed",
            details=_validation_details(exc.errors()),
        )
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error=error_body).model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions, including broken engine invariants."""
        logger.exception(
            "unexpected_error",
            error=str(exc),
            error_type=type(exc).__name__,
            path=request.url.path,
        )

        error_body = ErrorBody(
            code=ErrorCode.INTERNAL_ERROR,
            message="An unexpected error occurred",
        )
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error=error_body).model_dump(mode="json"),
        )

    logger.debug("exception_handlers_registered")


# Create the app instance for uvicorn
app = create_app()
