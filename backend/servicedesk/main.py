"""FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from servicedesk.api.v1 import clients, contracts, health, maintenance, projects, users
from servicedesk.config import settings
from servicedesk.db import dispose_engine
from servicedesk.logging import setup_logging

# Configure logging before anything else
setup_logging()

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup/shutdown events."""
    logger.info(
        "Starting Service Desk API",
        debug=settings.debug,
        code_allocation_max_attempts=settings.code_allocation_max_attempts,
    )

    yield

    logger.info("Shutting down Service Desk API")
    await dispose_engine()
    logger.info("Database connections disposed")


app = FastAPI(
    title="Service Desk API",
    description="Clients, projects, service contracts, renewals and maintenance records",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.backend_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(clients.router, prefix="/api/v1", tags=["clients"])
app.include_router(contracts.router, prefix="/api/v1", tags=["contracts"])
app.include_router(projects.router, prefix="/api/v1", tags=["projects"])
app.include_router(maintenance.router, prefix="/api/v1", tags=["maintenance"])
app.include_router(users.router, prefix="/api/v1", tags=["users"])
