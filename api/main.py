"""
FastAPI application for the token auth service.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.auth import router as auth_router
from tokenauth.dependencies import get_token_manager, shutdown

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown."""
    logger.info("Starting token auth service...")
    get_token_manager()
    yield
    logger.info("Shutting down token auth service...")
    await shutdown()


app = FastAPI(
    title="Token Auth API",
    description="Short-lived access tokens with rotating refresh tokens",
    lifespan=lifespan,
)

app.include_router(auth_router, tags=["auth"])
