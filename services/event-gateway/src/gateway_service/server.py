"""
Runs the Events API and the Configuration API in one process.
"""
import asyncio
import logging

import uvicorn

from .core.config import settings
from .main import config_app, events_app

logger = logging.getLogger(__name__)


async def serve(host: str = "0.0.0.0") -> None:
    servers = [
        uvicorn.Server(uvicorn.Config(events_app, host=host, port=settings.events_port, log_level="info")),
        uvicorn.Server(uvicorn.Config(config_app, host=host, port=settings.config_port, log_level="info")),
    ]
    logger.info(
        f"Serving Events API on :{settings.events_port}, Configuration API on :{settings.config_port}"
    )
    await asyncio.gather(*(server.serve() for server in servers))


def main() -> None:
    """Entry point for the ``event-gateway`` command."""
    asyncio.run(serve())


if __name__ == "__main__":
    main()
