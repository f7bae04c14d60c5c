"""
Main FastAPI application for the LD (hunting association) backend
"""

import structlog
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings, validate_settings
from app.core.error_handlers import register_error_handlers
from app.core.logging_config import configure_logging
from app.db.document_store import DocumentStore
from app.api.routes import api_router
from app.middleware.request_logging import RequestLoggingMiddleware

APP_VERSION = "1.0.0"

# Configure structured logging
configure_logging(settings.LOG_LEVEL, settings.LOG_DIR)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info("Starting ROG backend...", environment=settings.ENVIRONMENT)

    # A missing signing secret aborts startup
    validate_settings()

    store = DocumentStore.from_url(settings.DATABASE_URL, batch_size=settings.WRITE_BATCH_SIZE)
    try:
        if settings.AUTO_CREATE_SCHEMA:
            await store.create_schema()
    except Exception as e:
        logger.error(f"Failed to start application: {e}")
        await store.close()
        raise

    app.state.store = store
    logger.info("ROG backend started successfully!")

    yield

    # Shutdown
    logger.info("Shutting down ROG backend...")
    await store.close()


# Create FastAPI application
app = FastAPI(
    title="ROG Backend API",
    description="Hunting association (LD) members, hunts, points and harvest-quota API",
    version=APP_VERSION,
    lifespan=lifespan
)

app.add_middleware(RequestLoggingMiddleware)

# Authorization header must be allowed for the portal and the mobile client
logger.info(f"CORS Origins configured: {settings.cors_origins}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# Register error handlers
register_error_handlers(app)

# Include API routes
app.include_router(api_router)


@app.get("/health")
async def health_check():
    """Simple health check endpoint"""
    return {
        "ok": True,
        "service": "rog-backend",
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT
    }
