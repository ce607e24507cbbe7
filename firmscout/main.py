"""
Main FastAPI application.

Serves the firms table and the AI-assisted search and enrichment flows to
the front-end UI.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from firmscout import __version__
from firmscout.api.v1 import contacts, enrichment, firms, investors
from firmscout.core.api_errors import ConfigurationError, UpstreamServiceError
from firmscout.core.config import get_settings
from firmscout.core.database import check_connection
from firmscout.core.errors import (
    FirmNotFoundError,
    InputValidationError,
    MalformedGenerationOutput,
    StoreError,
)
from firmscout.core.migrations import run_migrations

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Applies pending migrations once on startup.
    """
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level)
    logger.info("Starting Firm Scout API")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Validation strictness: {settings.validation_strictness}")
    logger.info(f"Web search: {'enabled' if settings.search_enabled else 'disabled'}")

    try:
        run_migrations(settings.database_url)
        logger.info("Database schema up to date")
    except Exception as e:
        logger.error(f"Failed to apply migrations: {e}")
        raise

    yield

    logger.info("Shutting down")


# Create FastAPI app
app = FastAPI(
    title="Firm Scout API",
    description="Investor firm discovery, deduplication and contact enrichment",
    version=__version__,
    lifespan=lifespan
)

# CORS middleware (the UI is served from a different origin in development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(firms.router, prefix="/api")
app.include_router(investors.router, prefix="/api")
app.include_router(contacts.router, prefix="/api")
app.include_router(enrichment.router, prefix="/api")


# ---------------------------------------------------------------------------
# Error responses: every failure is {"error": "<message>"}
# ---------------------------------------------------------------------------

def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(InputValidationError)
async def input_validation_handler(request: Request, exc: InputValidationError):
    logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    return error_response(400, exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    )
    logger.info(f"{request.method} {request.url.path} invalid request: {details}")
    return error_response(400, f"Invalid request: {details}")


@app.exception_handler(FirmNotFoundError)
async def firm_not_found_handler(request: Request, exc: FirmNotFoundError):
    return error_response(404, str(exc))


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"{request.method} {request.url.path} store failure: {exc}")
    return error_response(500, str(exc))


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(f"{request.method} {request.url.path} misconfigured: {exc.message}")
    return error_response(500, exc.message)


@app.exception_handler(UpstreamServiceError)
async def upstream_error_handler(request: Request, exc: UpstreamServiceError):
    logger.error(f"{request.method} {request.url.path} upstream failure: {exc}")
    return error_response(502, str(exc))


@app.exception_handler(MalformedGenerationOutput)
async def malformed_output_handler(request: Request, exc: MalformedGenerationOutput):
    logger.error(f"{request.method} {request.url.path} unusable generation output: {exc.message}")
    return error_response(500, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} failed")
    return error_response(500, "Internal server error")


@app.get("/")
def root():
    """Root endpoint with service info."""
    return {
        "service": "Firm Scout API",
        "version": __version__,
        "docs": "/docs"
    }


@app.get("/health")
def health_check():
    """
    Health check endpoint.

    Returns status of the service and database connectivity.
    """
    health_status = {
        "status": "healthy",
        "service": "running",
        "database": "unknown"
    }

    try:
        check_connection()
        health_status["database"] = "connected"
    except Exception as e:
        health_status["status"] = "degraded"
        health_status["database"] = f"error: {str(e)}"
        logger.warning(f"Database health check failed: {e}")

    return health_status
