"""
StockDash Backend - FastAPI Application

Main entry point for the backend API.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockdash.core.config import settings
from stockdash.core.logging import configure_logging
from stockdash.api.v1 import router as api_v1_router
from stockdash.services.data_ingestion import (
    close_stock_data_provider,
    get_stock_data_provider,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    configure_logging(settings.log_level)
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    provider = get_stock_data_provider()
    if await provider.health_check():
        logger.info("Provider credentials configured")
    else:
        logger.warning("Provider credentials missing - responses will use mock data")

    yield

    # Shutdown
    logger.info("Shutting down...")
    await close_stock_data_provider()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    StockDash API

    ## Architecture
    - **Provider Client**: Quotes/candles from Finnhub, time series from Alpha Vantage, mock fallback
    - **Indicator Engine**: DEMA and support/resistance levels (pure Python/NumPy)
    - **Data Aggregator**: Fetch + compute cycle with a 60s live refresh
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware - allow local frontend dev servers
cors_origins = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
]
# Add any additional origins from settings
if settings.allowed_origins:
    cors_origins.extend([o for o in settings.allowed_origins if o not in cors_origins])

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_v1_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    provider = get_stock_data_provider()
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
        "live_data": await provider.health_check(),
    }


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "StockDash Backend API",
        "docs": "/docs",
        "health": "/health",
    }
