"""
alerting/main.py

FastAPI application entry point for the alert engine.
Configures structlog and registers the event and preference routers.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI

from alerting.routers.events import router as events_router
from alerting.routers.preferences import router as preferences_router
from config import settings

structlog.configure(
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(settings.log_level.upper())
    ),
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle: startup and shutdown."""
    logger.info("alert_engine_starting", log_level=settings.log_level)
    yield
    logger.info("alert_engine_shutting_down")


app = FastAPI(
    title="CGM Alert Engine",
    description="Glucose alarm evaluation and alert throttling service",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(events_router)
app.include_router(preferences_router)
