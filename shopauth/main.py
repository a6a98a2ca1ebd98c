"""
FastAPI application for authorizing Shopify shops.

This module wires dependencies and configures the application.
Business logic is in shopauth/core, infrastructure in shopauth/infrastructure.
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import UTC, datetime

# Configure logging FIRST, before other local imports
from shopauth.logging_config import setup_global_logging

setup_global_logging()

from fastapi import FastAPI, Request, status  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402

from shopauth.core.exceptions import (  # noqa: E402
    ExchangeFailed,
    PersistenceFailed,
    TenantLookupFailed,
)
from shopauth.infrastructure.firestore import close_firestore_client  # noqa: E402
from shopauth.oauth import router as oauth_router  # noqa: E402
from shopauth.oauth.config import ConfigurationError  # noqa: E402

logger = logging.getLogger(__name__)


# ============================================================================
# Application Lifecycle
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Dependencies are lazy-loaded; shutdown closes the Firestore client if
    one was opened.
    """
    logger.info("Application starting up...")
    yield
    logger.info("Shutting down application...")
    try:
        close_firestore_client()
    except Exception as e:
        logger.warning(f"Error closing Firestore client during shutdown: {e}")


app = FastAPI(
    title="Shopify Shop Authorization",
    description="Authorizes Shopify shops through OAuth2",
    version="1.0.0",
    lifespan=lifespan,
)


# ============================================================================
# Centralized Exception Handlers
# ============================================================================


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message},
    )


@app.exception_handler(TenantLookupFailed)
async def tenant_lookup_error_handler(request: Request, exc: TenantLookupFailed):
    """
    Handle shop store read failures.

    Returns 503 Service Unavailable; the request is safe to retry.
    """
    logger.error(f"Shop lookup failed: {exc}", exc_info=True)
    return _error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE, "Shop store unavailable - please retry"
    )


@app.exception_handler(ExchangeFailed)
async def exchange_error_handler(request: Request, exc: ExchangeFailed):
    """
    Handle failed code-for-token exchanges.

    Returns 502 Bad Gateway since the provider call failed.
    """
    logger.error(f"Token exchange failed: {exc}")
    return _error_response(
        status.HTTP_502_BAD_GATEWAY, "Failed to exchange authorization code"
    )


@app.exception_handler(PersistenceFailed)
async def persistence_error_handler(request: Request, exc: PersistenceFailed):
    """
    Handle failures to save a shop after a successful exchange.

    Returns 500 so the failure is visible rather than re-prompting consent.
    """
    logger.critical(f"Shop persistence failed: {exc}", exc_info=True)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Authorization succeeded but could not be saved - please retry",
    )


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    """
    Handle invalid Shopify app settings in the environment.

    Returns 503, the same as missing API credentials.
    """
    logger.error(f"Invalid Shopify app configuration: {exc}")
    return _error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE, "Shopify app is not configured"
    )


# ============================================================================
# Health Check Endpoints
# ============================================================================


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "shopauth",
        "timestamp": datetime.now(UTC).isoformat(),
    }


@app.get("/health")
async def health():
    """Health check endpoint for Cloud Run."""
    return {"status": "healthy"}


# ============================================================================
# Include Routers
# ============================================================================

app.include_router(oauth_router.router)


# ============================================================================
# Main Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8080))
    uvicorn.run(app, host="0.0.0.0", port=port)
