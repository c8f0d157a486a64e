import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from recall.routers import reviews_router
from recall.services import get_session_store
from recall.srs import get_scheduler_config

load_dotenv()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    config = get_scheduler_config()
    logger.info(
        "Scheduler configured: default_ease=%s, minimum_ease=%s, maturity=%sd, max_interval=%sd",
        config.default_ease,
        config.minimum_ease,
        config.maturity_threshold_days,
        config.max_interval_days,
    )
    if config.daily_review_limit is not None:
        logger.info("Daily review limit: %s", config.daily_review_limit)
    logger.warning("Using in-memory state store; scheduling state is not durable across restarts")

    yield

    # Shutdown
    get_session_store().clear()
    logger.info("Review sessions cleared")


app = FastAPI(
    title="Recall API",
    description="Spaced-repetition scheduling API for vocabulary review",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS configuration
cors_origins = os.getenv(
    "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
).split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(reviews_router)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Recall API",
        "version": "1.0.0",
        "endpoints": {
            "health": "/healthz",
            "due": "/reviews/due",
            "items": "/reviews/items/{item_id}",
            "session": "/reviews/session",
        },
    }


@app.get("/healthz")
async def healthz():
    """Health check endpoint."""
    return {"status": "healthy"}
