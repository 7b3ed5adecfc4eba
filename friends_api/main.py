"""
Friendships API - Main Application
"""
import logging
import sys
import traceback
import uuid
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
import uvicorn

from .core.config import settings
from .core.exceptions import FriendshipError, InternalStoreError
from .core.rate_limit import limiter
from .database import dispose_engine, get_engine, init_db
from .api.v1 import api_router
from .utils.time_utils import to_utc_isoformat, utc_now

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
    ]
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Friendships API...")

    try:
        logger.info(f"Database: {settings.DATABASE_HOST}:{settings.DATABASE_PORT}/{settings.DATABASE_NAME}")
        init_db()
        logger.info("Database initialized successfully")
        logger.info(f"API running at http://{settings.API_HOST}:{settings.API_PORT} (debug={settings.DEBUG})")
    except Exception as e:
        logger.error(f"Failed to initialize backend: {e}")
        raise

    yield  # Application runs here

    # Shutdown
    logger.info("Shutting down Friendships API...")
    dispose_engine()


# Create FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Friend relationships, friend contexts and likes",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    lifespan=lifespan,
    redirect_slashes=False
)

# Rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FriendshipError)
async def friendship_error_handler(request: Request, exc: FriendshipError):
    """Map domain errors to their HTTP status with a short message."""
    if isinstance(exc, InternalStoreError):
        logger.error(f"Store error on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "detail": exc.message}
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies, paths and query parameters are a bad request."""
    content = {"success": False, "detail": "Invalid request"}
    if settings.DEBUG:
        content["errors"] = [
            {"loc": list(error.get("loc", ())), "msg": error.get("msg")}
            for error in exc.errors()
        ]
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unexpected errors."""
    # Generate a unique error ID for tracking
    error_id = str(uuid.uuid4())[:8]

    # Always log the full error on the server
    logger.error(
        f"[ERROR_ID: {error_id}] Unhandled exception on {request.method} {request.url.path}",
        exc_info=True
    )

    if settings.DEBUG:
        # Development: return detailed error for debugging
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "detail": str(exc),
                "error_id": error_id,
                "type": type(exc).__name__,
                "path": str(request.url.path),
                "traceback": traceback.format_exc()
            }
        )
    else:
        # Production: return generic error, hide internal details
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "detail": "An internal server error occurred. Please try again later.",
                "error_id": error_id
            }
        )


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "service": settings.PROJECT_NAME,
        "version": "1.0.0",
        "status": "running",
        "environment": settings.ENVIRONMENT,
        "docs_url": "/docs" if settings.DEBUG else "disabled",
        "features": [
            "Friend requests",
            "Friendship status updates",
            "Friend contexts",
            "Friend likes"
        ]
    }


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))

        return {
            "status": "healthy",
            "timestamp": to_utc_isoformat(utc_now()),
            "service": "friendships-api",
            "version": "1.0.0",
            "services": {
                "database": {
                    "status": "connected",
                    "host": settings.DATABASE_HOST
                }
            }
        }

    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return {
            "status": "unhealthy",
            "error": str(e)
        }


# Include API router
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


if __name__ == "__main__":
    # Run the application
    uvicorn.run(
        "friends_api.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
