"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from defyshield import __version__
from defyshield.api.routes import audit
from defyshield.config import get_settings
from defyshield.logging_config import configure_logging

settings = get_settings()
configure_logging(settings)

logger = logging.getLogger(__name__)

SERVICE_NAME = "DefyShield Security Audit API"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"{SERVICE_NAME} starting ({settings.app_env})")
    yield
    logger.info(f"{SERVICE_NAME} shutting down")


app = FastAPI(
    title=SERVICE_NAME,
    description="Static vulnerability detection and trust scoring for Solidity contracts",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(audit.router, prefix="/api/audit", tags=["Audit"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": SERVICE_NAME, "version": __version__}
