"""FastAPI main application module."""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy.exc import (
    DataError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)
import logging

from car_registry import __version__
from ...application.services.car_service import CarNotFoundError
from ...infrastructure.logging import setup_logging
from ...infrastructure.services import initialize_services, shutdown_services
from .routes import health, cars
from .config import get_settings
from .middleware import RequestResponseLoggingMiddleware


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    # Startup
    setup_logging(get_settings())
    logger.info("Starting Car Registry API")
    await initialize_services()

    yield

    # Shutdown
    logger.info("Shutting down Car Registry API")
    await shutdown_services()


def error_response(status_code: int, detail, error_type: str) -> JSONResponse:
    """Build the JSON error envelope shared by every handler."""
    return JSONResponse(
        status_code=status_code,
        content={"detail": jsonable_encoder(detail), "type": error_type}
    )


def add_exception_handlers(app: FastAPI) -> None:
    """Add custom exception handlers to the FastAPI application."""

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError):
        """Handle malformed or out-of-range request payloads."""
        logger.warning(f"Request validation failed on {request.url.path}", extra={"errors": exc.errors()})
        return error_response(422, exc.errors(), "validation_error")

    @app.exception_handler(CarNotFoundError)
    async def car_not_found_handler(request: Request, exc: CarNotFoundError):
        """Handle lookups of cars that do not exist."""
        logger.warning(f"Car not found on {request.url.path}", extra={"car_id": exc.car_id})
        return error_response(404, str(exc), "not_found")

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        """Handle validation errors from business logic."""
        logger.warning(f"Validation error on {request.url.path}: {str(exc)}")
        return error_response(400, str(exc), "validation_error")

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        """Handle constraint violations reported by the store."""
        logger.warning(f"Integrity error on {request.url.path}: {exc.orig}")
        return error_response(409, "Request conflicts with stored data", "integrity_error")

    @app.exception_handler(DataError)
    async def data_error_handler(request: Request, exc: DataError):
        """Handle values the store refused to accept."""
        logger.warning(f"Data error on {request.url.path}: {exc.orig}")
        return error_response(422, "Store rejected a value in the request", "data_error")

    async def store_unavailable_handler(request: Request, exc: SQLAlchemyError):
        """Handle an unreachable store or an exhausted connection pool."""
        logger.error(f"Store unavailable on {request.url.path}: {str(exc)}")
        return error_response(503, "Database is unavailable", "store_unavailable")

    for exc_class in (OperationalError, InterfaceError, PoolTimeoutError):
        app.add_exception_handler(exc_class, store_unavailable_handler)

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError):
        """Handle any other store failure."""
        logger.error(f"Store error on {request.url.path}: {str(exc)}")
        return error_response(500, "Internal server error occurred", "store_error")

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(request: Request, exc: RuntimeError):
        """Handle runtime errors from business logic."""
        logger.error(f"Runtime error on {request.url.path}: {str(exc)}")
        return error_response(500, "Internal server error occurred", "runtime_error")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        """Handle anything no other handler claims.

        Starlette re-raises the exception after this response is sent, so the
        server still logs the traceback.
        """
        logger.error(f"Unhandled error on {request.url.path}: {type(exc).__name__}: {str(exc)}")
        return error_response(500, "Internal server error occurred", "internal_error")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Car Registry",
        description="API for listing, creating, updating and soft-deleting car records",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.debug,
        lifespan=lifespan
    )

    add_exception_handlers(app)

    app.add_middleware(
        RequestResponseLoggingMiddleware,
        log_request_body=settings.log_request_body
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=settings.allow_credentials,
        allow_methods=settings.allowed_methods,
        allow_headers=settings.allowed_headers,
    )

    app.include_router(health.router, tags=["health"])
    app.include_router(
        cars.router,
        prefix=f"{settings.api_prefix}/car",
        tags=["cars"]
    )

    return app


# Create app instance
app = create_app()
