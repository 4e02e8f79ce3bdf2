"""
Event Gateway - FastAPI applications

Two applications share one gateway:

- ``events_app`` (Events API): every request is an event. Custom events are
  published to the bus and delivered to subscribed functions, HTTP requests
  are answered by the function subscribed to their method and path.
- ``config_app`` (Configuration API): manage event types, functions and
  subscriptions per space.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.errors import register_error_handlers
from .api.routes import (
    events_router,
    eventtypes_router,
    functions_router,
    health_router,
    subscriptions_router,
)
from .core.config import settings
from .services.gateway import gateway

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.
    
    Both apps enter it; the gateway connects on the first startup and
    disconnects on the last shutdown.
    """
    await gateway.initialize()
    yield
    await gateway.shutdown()


# =============================================================================
# Configuration API
# =============================================================================


config_app = FastAPI(
    title="Event Gateway Configuration API",
    description="Manage event types, functions and subscriptions",
    version=__version__,
    lifespan=lifespan,
)

config_app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(config_app)

config_app.include_router(health_router)
config_app.include_router(eventtypes_router)
config_app.include_router(functions_router)
config_app.include_router(subscriptions_router)


# =============================================================================
# Events API
# =============================================================================


# The catch-all route owns every path, so no docs are mounted.
events_app = FastAPI(
    title="Event Gateway Events API",
    version=__version__,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
    lifespan=lifespan,
)

events_app.include_router(events_router)
