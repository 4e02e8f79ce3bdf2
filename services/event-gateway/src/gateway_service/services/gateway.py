import logging
import re
from typing import Optional

from ..adapters.base import EventAdapter
from ..adapters.memory_adapter import MemoryAdapter
from ..adapters.nats_adapter import NatsAdapter
from ..core.config import settings
from ..store import ConfigStore
from .invoker import FunctionInvoker
from .router import Router

logger = logging.getLogger(__name__)


class Gateway:
    """
    Owns the bus adapter, the configuration store and the router.
    Shared by the Events API and the Configuration API; each app's lifespan
    calls ``initialize``/``shutdown`` and only the first and last call do work.
    """

    def __init__(self):
        self.store = ConfigStore()
        self.adapter: Optional[EventAdapter] = None
        self.invoker: Optional[FunctionInvoker] = None
        self.router: Optional[Router] = None
        self._users = 0
        self._hosted_domain = re.compile(settings.hosted_domain_pattern)

    def _get_adapter(self) -> EventAdapter:
        """Create the bus adapter selected by configuration."""
        adapter_type = settings.event_adapter.lower()

        if adapter_type == "nats":
            return NatsAdapter(
                url=settings.nats_url,
                reconnect_time_wait=settings.nats_reconnect_time_wait,
                max_reconnect_attempts=settings.nats_max_reconnect_attempts,
            )
        elif adapter_type == "memory":
            return MemoryAdapter()
        else:
            raise ValueError(f"Unknown adapter type: {adapter_type}")

    async def initialize(self) -> None:
        """Connect the adapter and start the router."""
        self._users += 1
        if self._users > 1:
            return

        logger.info(f"Starting Event Gateway with {settings.event_adapter} adapter")
        self.adapter = self._get_adapter()
        await self.adapter.connect()

        self.invoker = FunctionInvoker(self.store.function, timeout=settings.function_timeout)
        self.router = Router(
            self.store,
            self.adapter,
            self.invoker,
            worker_count=settings.router_workers,
            backlog=settings.router_backlog,
        )
        await self.router.start()
        logger.info(
            f"Event Gateway ready (events port {settings.events_port}, config port {settings.config_port})"
        )

    async def shutdown(self) -> None:
        """Drain the router and disconnect once the last user is gone."""
        if self._users == 0:
            return
        self._users -= 1
        if self._users > 0:
            return

        logger.info("Shutting down Event Gateway")
        if self.router:
            await self.router.drain()
        if self.invoker:
            await self.invoker.close()
        if self.adapter:
            await self.adapter.disconnect()
        self.router = None
        self.invoker = None
        self.adapter = None
        logger.info("Event Gateway shutdown complete")

    def space_for_host(self, host: str) -> str:
        """
        Resolve the space of an Events API request.

        On hosted domains (e.g. ``myspace.slsgateway.com``) the first host
        label is the space, everywhere else the default space is used.
        """
        hostname = host.split(":", 1)[0]
        if self._hosted_domain.search(hostname):
            return hostname.split(".", 1)[0]
        return settings.default_space


# Global instance
gateway = Gateway()
