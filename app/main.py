"""
FastAPI application entry point.
Main application setup and configuration.
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from pydantic import ValidationError as PydanticValidationError
import logging

from app.config import settings
from app.database import Database
from app.routers import auth_router, listings_router, upload_router
from app.storage import StorageClient, create_http_client
from app.utils.exceptions import APIException
from app.services.error_handler import ErrorHandlerService
from app.middleware import RequestLoggingMiddleware

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Opens the database pool and the storage HTTP client, and closes both on shutdown.
    """
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    database = Database.from_settings(settings)
    app.state.database = database

    # Test database connection on startup
    db_connected = await database.check_connection()
    if not db_connected:
        logger.error("Failed to connect to database on startup")
    elif settings.db_create_tables:
        await database.create_tables()

    if not settings.jwt_secret_key:
        logger.warning("JWT secret is not configured; authentication requests will fail")
    if not settings.storage_key:
        logger.warning("Storage key is not configured; image uploads will fail")

    http_client = create_http_client(settings)
    app.state.storage = StorageClient.from_settings(settings, http_client)

    yield

    # Shutdown
    logger.info("Shutting down application")
    await http_client.aclose()
    await database.close()


# Create FastAPI application instance
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Backend for a classifieds site where users advertise properties.

    ## Features

    * **Accounts**: Register and log in with email and password
    * **Listings**: Browse, filter and search listings; owners can replace or delete theirs
    * **Images**: Upload up to five images per request to object storage

    ## Authentication

    Use `/api/auth/register` or `/api/auth/login` to obtain a token,
    then include it in the Authorization header as `Bearer <token>`.
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {
            "name": "Authentication",
            "description": "Account registration and login"
        },
        {
            "name": "Listings",
            "description": "Listing browsing and management"
        },
        {
            "name": "Images",
            "description": "Listing image upload and removal"
        },
        {
            "name": "Health",
            "description": "Service information and database health"
        }
    ],
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Process-Time"],
)

# Add request logging middleware
app.add_middleware(
    RequestLoggingMiddleware,
    slow_request_threshold=settings.slow_request_threshold,
)

# Include API routers
app.include_router(auth_router, prefix=settings.api_prefix)
app.include_router(listings_router, prefix=settings.api_prefix)
app.include_router(upload_router, prefix=settings.api_prefix)


# Global exception handlers using ErrorHandlerService
@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    """Handle custom API exceptions with structured error responses."""
    return ErrorHandlerService.handle_api_exception(exc, request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle FastAPI request validation errors with detailed field information."""
    return ErrorHandlerService.handle_validation_error(exc, request)


@app.exception_handler(PydanticValidationError)
async def pydantic_validation_exception_handler(request: Request, exc: PydanticValidationError):
    """Handle Pydantic validation errors with detailed field information."""
    return ErrorHandlerService.handle_validation_error(exc, request)


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Handle database errors with appropriate error responses."""
    return ErrorHandlerService.handle_database_error(exc, request)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle FastAPI HTTP exceptions with structured error responses."""
    return ErrorHandlerService.handle_http_exception(exc, request)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with secure error responses."""
    return ErrorHandlerService.handle_unexpected_error(exc, request)


@app.get("/", tags=["Health"])
async def root():
    """
    Root endpoint providing basic API information.
    """
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.environment,
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json"
        },
        "api_prefix": settings.api_prefix
    }


@app.get("/health", tags=["Health"])
async def health_check(request: Request):
    """
    Health check endpoint with database connectivity test.
    Used by container health checks and load balancers.
    """
    database = getattr(request.app.state, "database", None)
    if database is None or not await database.ping():
        raise HTTPException(
            status_code=503,
            detail="Database connection failed"
        )

    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "database": "connected",
        "pool": database.pool_status()
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
