"""
FastAPI Backend for the Fuel Tank Board v1.2.0

Serves the classified and grouped tank board to the dashboard. The board is
rebuilt on every request; the dashboard polls it.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from routers.tank_board_router import router as tank_board_router
from settings import settings

logging.basicConfig(
    level=getattr(logging, settings.app.log_level.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logging."""
    logger.info(f"{settings.app.name} v{settings.app.version} starting...")
    for warning in settings.validate():
        logger.warning(warning)
    logger.info("API ready for connections")

    yield

    logger.info(f"Shutting down {settings.app.name}")


app = FastAPI(
    title=settings.app.name,
    description="Fuel tank status classification and grouping for the fleet dashboard.",
    version=settings.app.version,
    lifespan=lifespan,
)

# Boards for large fleets are big JSON documents
app.add_middleware(GZipMiddleware, minimum_size=1000)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.app.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

app.include_router(tank_board_router)


@app.get("/health", tags=["Health"])
async def health_check() -> Dict[str, Any]:
    """Liveness probe."""
    return {
        "status": "ok",
        "version": settings.app.version,
        "timestamp": utc_now().isoformat(),
    }
