"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request tracing), registers the exception handlers and includes all API
routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from character_figure.core.database import init_db
from character_figure.core.logging_config import get_logger, setup_logging
from character_figure.core.monitoring import initialize_logfire

from .api.v1 import (
    auth,
    character_figure,
    checkout,
    credits,
    cron,
    demo,
    gallery,
    health,
    history,
    nano_banana,
    payments,
    subscription,
    user,
    video,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates missing tables on startup. Vendor clients are created lazily by
    the request dependencies.
    """
    # Startup
    try:
        logger.info("Starting up Character Figure Server...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    # Shutdown
    logger.info("Shutting down Character Figure Server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Character Figure Server API

    Backend of the AI character figure generator: character image and video
    generation, generation history and gallery, credits and Creem payments.
    """,
    version=constant.VERSION,
    openapi_url=f"{constant.API_PREFIX}/openapi.json",
    docs_url=f"{constant.API_PREFIX}/docs",
    redoc_url=f"{constant.API_PREFIX}/redoc",
    lifespan=lifespan,
)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)
app.add_middleware(LogfireMiddleware)

setup_exception_handlers(app)
initialize_logfire(app)

API = constant.API_PREFIX
FIGURE = f"{API}/character-figure"

app.include_router(health.router, prefix=API)
app.include_router(auth.router, prefix=API)
app.include_router(credits.router, prefix=API)
app.include_router(checkout.router, prefix=API)
app.include_router(payments.router, prefix=API)
app.include_router(character_figure.router, prefix=FIGURE)
app.include_router(history.router, prefix=f"{FIGURE}/history")
app.include_router(gallery.router, prefix=f"{FIGURE}/gallery")
app.include_router(video.router, prefix=f"{FIGURE}/video")
app.include_router(nano_banana.router, prefix=f"{API}/nano-banana")
app.include_router(demo.router, prefix=f"{API}/demo")
app.include_router(user.router, prefix=f"{API}/user")
app.include_router(subscription.router, prefix=f"{API}/subscription")
app.include_router(cron.router, prefix=f"{API}/cron")
