"""
Event router.

The router turns requests received by the Events API into events and
delivers them:

- ``http.request`` events go to the sync subscription matching the request
  method and path; the function's response becomes the HTTP response.
- ``invoke`` events call the function named by the ``Function-ID`` header.
- Custom events are published to the bus and delivered to async
  subscribers by a pool of workers. A sync subscription for the event type
  additionally answers the emitter.

Async delivery never blocks the emitter: when the work queue is full the
event is dropped and counted.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from eventgateway_common import (
    CORS,
    SYSTEM_EVENT_RECEIVED,
    SYSTEM_FUNCTION_INVOCATION_FAILED,
    SYSTEM_FUNCTION_INVOKED,
    SYSTEM_FUNCTION_INVOKING,
    TYPE_HTTP_REQUEST,
    TYPE_INVOKE,
    BaseDTO,
    CloudEvent,
    EventReceivedData,
    Function,
    FunctionInvocationData,
    HTTPResponse,
)
from eventgateway_common.events import MIME_JSON

from ..adapters.base import AdapterError, EventAdapter
from ..core.metrics import BACKLOG_SIZE, EVENTS_DROPPED, EVENTS_RECEIVED, FUNCTION_INVOCATIONS
from ..store import ConfigStore
from .event_parser import EventParsingError, parse_request
from .invoker import FunctionInvocationError, FunctionInvoker

logger = logging.getLogger(__name__)

ROUTER_QUEUE_GROUP = "event-gateway-router"
SYSTEM_EVENT_PATH = "/"

HEADER_FUNCTION_ID = "function-id"


@dataclass
class RouterResponse:
    """What the Events API writes back to the client."""
    status_code: int
    body: bytes = b""
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class WorkItem:
    space: str
    path: str
    event: CloudEvent


ALLOW_ALL_CORS = {"Access-Control-Allow-Origin": "*"}


def cors_headers(cors: Optional[CORS], headers: Mapping[str, str], preflight: bool) -> Dict[str, str]:
    """Response headers for a request to a CORS-enabled subscription."""
    origin = headers.get("origin")
    if cors is None or not origin:
        return {}

    wildcard = "*" in cors.origins
    if not wildcard and origin not in cors.origins:
        return {}

    result = {
        "Access-Control-Allow-Origin": "*" if wildcard and not cors.allow_credentials else origin,
        "Vary": "Origin",
    }
    if cors.allow_credentials:
        result["Access-Control-Allow-Credentials"] = "true"
    if preflight:
        result["Access-Control-Allow-Methods"] = ", ".join(m.upper() for m in cors.methods)
        result["Access-Control-Allow-Headers"] = ", ".join(cors.headers)
    return result


class Router:
    """
    Dispatches events to subscribed functions.

    Attributes:
        worker_count: Number of async delivery workers
        backlog: Capacity of the async work queue
    """

    def __init__(
        self,
        store: ConfigStore,
        adapter: EventAdapter,
        invoker: FunctionInvoker,
        worker_count: int = 20,
        backlog: int = 40,
    ):
        self.store = store
        self.adapter = adapter
        self.invoker = invoker
        self.worker_count = worker_count
        self.backlog = backlog

        self._queue: Optional[asyncio.Queue] = None
        self._workers: List[asyncio.Task] = []
        self._bus_subscription: Optional[str] = None
        self._draining = False

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """Subscribe to the bus and spin up the delivery workers."""
        if self._workers:
            return

        self._draining = False
        self._queue = asyncio.Queue(maxsize=self.backlog)
        self._bus_subscription = await self.adapter.subscribe(
            topics=[">"],
            handler=self._on_bus_message,
            queue_group=ROUTER_QUEUE_GROUP,
        )
        self._workers = [
            asyncio.create_task(self._worker(), name=f"router-worker-{i}")
            for i in range(self.worker_count)
        ]
        logger.info(f"Router started with {self.worker_count} workers (backlog: {self.backlog})")

    async def drain(self) -> None:
        """
        Reject new requests, finish queued deliveries and stop the workers.
        """
        self._draining = True

        if self._bus_subscription and self.adapter.is_connected:
            await self.adapter.unsubscribe(self._bus_subscription)
        self._bus_subscription = None

        if self._queue is not None and self._workers:
            await self._queue.join()

        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logger.info("Router drained")

    async def wait_idle(self) -> None:
        """Block until every queued event has been delivered."""
        if self._queue is not None:
            await self._queue.join()

    @property
    def is_draining(self) -> bool:
        return self._draining

    @property
    def queued(self) -> int:
        return self._queue.qsize() if self._queue is not None else 0

    # =========================================================================
    # Request handling
    # =========================================================================

    async def handle(
        self,
        space: str,
        path: str,
        method: str,
        headers: Mapping[str, str],
        body: bytes,
        host: str = "",
        query: Optional[List[Tuple[str, str]]] = None,
    ) -> RouterResponse:
        """Process one Events API request."""
        if self._draining:
            return RouterResponse(503, b"Service Unavailable")

        method = method.upper()
        lowered = {key.lower(): value for key, value in headers.items()}

        if method == "OPTIONS" and self._is_custom_event_preflight(lowered):
            return RouterResponse(200, headers={
                **ALLOW_ALL_CORS,
                "Access-Control-Allow-Methods": "POST",
                "Access-Control-Allow-Headers": lowered["access-control-request-headers"],
            })

        try:
            event = parse_request(method, headers, body, path=path, host=host, query=query)
        except EventParsingError as e:
            return RouterResponse(400, str(e).encode("utf-8"))

        EVENTS_RECEIVED.labels(space, event.event_type).inc()
        logger.debug(f"Event received: {space} {path} {event.event_type} ({event.event_id})")
        await self._emit_system(
            space,
            SYSTEM_EVENT_RECEIVED,
            EventReceivedData(path=path, event=event.to_message(), headers=dict(lowered)),
        )

        if event.event_type == TYPE_HTTP_REQUEST:
            return await self._handle_http_event(space, path, method, lowered, event)

        if method != "POST":
            return RouterResponse(400, b"custom event can be emitted only with POST method")

        if event.event_type == TYPE_INVOKE:
            return await self._handle_invoke_event(space, lowered, event)

        if event.is_system:
            return RouterResponse(400, b"system events cannot be emitted")

        return await self._handle_custom_event(space, path, event)

    @staticmethod
    def _is_custom_event_preflight(headers: Mapping[str, str]) -> bool:
        if not headers.get("access-control-request-method"):
            return False
        requested = headers.get("access-control-request-headers", "")
        return "event" in [h.strip().lower() for h in requested.split(",")]

    async def _handle_http_event(
        self,
        space: str,
        path: str,
        method: str,
        headers: Mapping[str, str],
        event: CloudEvent,
    ) -> RouterResponse:
        requested_method = method
        preflight = method == "OPTIONS" and bool(headers.get("access-control-request-method"))
        if preflight:
            requested_method = headers["access-control-request-method"].upper()

        found = self.store.sync_subscriber(space, TYPE_HTTP_REQUEST, requested_method, path)
        if found is None:
            logger.debug(f"Function not found for HTTP event: {space} {method} {path}")
            return RouterResponse(404, b"resource not found")

        subscription, params = found
        extra_headers = cors_headers(subscription.cors, headers, preflight)
        if preflight and subscription.cors is not None:
            return RouterResponse(200, headers=extra_headers)

        if isinstance(event.data, dict):
            event.data["params"] = params

        function = self.store.function(space, subscription.function_id)
        if function is None:
            return RouterResponse(500, b"unable to look up registered function")

        try:
            raw = await self._call(space, function, event)
        except FunctionInvocationError as e:
            return RouterResponse(500, str(e).encode("utf-8"), extra_headers)

        try:
            response = HTTPResponse.model_validate_json(raw)
        except ValidationError:
            logger.info(f"HTTP response object malformed: {raw[:200]!r}")
            return RouterResponse(500, b"HTTP response object malformed", extra_headers)

        return RouterResponse(
            response.status_code,
            response.body.encode("utf-8"),
            {**response.headers, **extra_headers},
        )

    async def _handle_invoke_event(
        self,
        space: str,
        headers: Mapping[str, str],
        event: CloudEvent,
    ) -> RouterResponse:
        function_id = headers.get(HEADER_FUNCTION_ID)
        if not function_id:
            return RouterResponse(400, b"Function-ID header is required", ALLOW_ALL_CORS)

        function = self.store.function(space, function_id)
        if function is None:
            return RouterResponse(404, f'Function "{function_id}" not found.'.encode("utf-8"), ALLOW_ALL_CORS)

        try:
            raw = await self._call(space, function, event)
        except FunctionInvocationError as e:
            return RouterResponse(500, str(e).encode("utf-8"), ALLOW_ALL_CORS)
        return RouterResponse(200, raw, ALLOW_ALL_CORS)

    async def _handle_custom_event(self, space: str, path: str, event: CloudEvent) -> RouterResponse:
        try:
            await self._publish(space, path, event)
        except (AdapterError, ConnectionError) as e:
            logger.error(f"Failed to publish event {event.event_id}: {e}")
            return RouterResponse(500, b"unable to publish event", ALLOW_ALL_CORS)

        found = self.store.sync_subscriber(space, event.event_type, "POST", path)
        if found is None:
            return RouterResponse(202, headers=ALLOW_ALL_CORS)

        subscription, _ = found
        function = self.store.function(space, subscription.function_id)
        if function is None:
            return RouterResponse(500, b"unable to look up registered function", ALLOW_ALL_CORS)

        try:
            raw = await self._call(space, function, event)
        except FunctionInvocationError as e:
            return RouterResponse(500, str(e).encode("utf-8"), ALLOW_ALL_CORS)
        return RouterResponse(200, raw, ALLOW_ALL_CORS)

    # =========================================================================
    # Async delivery
    # =========================================================================

    async def _publish(self, space: str, path: str, event: CloudEvent) -> None:
        await self.adapter.publish(space, {
            "space": space,
            "path": path,
            "event": event.to_message(),
        })

    async def _on_bus_message(self, topic: str, message: Dict[str, Any]) -> None:
        """Queue a bus message for delivery, dropping it if the backlog is full."""
        if self._queue is None or self._draining:
            return

        try:
            item = WorkItem(
                space=message.get("space", topic),
                path=message.get("path", "/"),
                event=CloudEvent.model_validate(message["event"]),
            )
        except (KeyError, ValidationError) as e:
            logger.error(f"Discarding malformed bus message on {topic}: {e}")
            return

        try:
            self._queue.put_nowait(item)
        except asyncio.QueueFull:
            EVENTS_DROPPED.labels(item.space, item.event.event_type).inc()
            logger.warning(
                f"Router backlog full, dropping event {item.event.event_id} ({item.event.event_type})"
            )
            return
        BACKLOG_SIZE.set(self._queue.qsize())

    async def _worker(self) -> None:
        while True:
            item = await self._queue.get()
            try:
                await self._process(item)
            except Exception as e:
                logger.error(f"Error processing event {item.event.event_id}: {e}", exc_info=True)
            finally:
                self._queue.task_done()
                BACKLOG_SIZE.set(self._queue.qsize())

    async def _process(self, item: WorkItem) -> None:
        event = item.event
        if self.store.event_type(item.space, event.event_type) is None:
            logger.debug(f"Event type {event.event_type} not registered in space {item.space}, dropping")
            return

        for subscription in self.store.async_subscribers(item.space, event.event_type, item.path):
            function = self.store.function(item.space, subscription.function_id)
            if function is None:
                logger.warning(f"Subscribed function {subscription.function_id} not found in {item.space}")
                continue
            try:
                await self._call(item.space, function, event)
            except FunctionInvocationError as e:
                logger.error(f"Delivery of {event.event_id} to {function.function_id} failed: {e}")

    async def _call(self, space: str, function: Function, event: CloudEvent) -> bytes:
        """Invoke a function, emitting the invocation system events around it."""
        emit_system = not event.is_system
        invocation = FunctionInvocationData(
            space=space,
            function_id=function.function_id,
            event=event.to_message(),
        )

        if emit_system:
            await self._emit_system(space, SYSTEM_FUNCTION_INVOKING, invocation)

        logger.debug(f"Invoking function {space}/{function.function_id} with {event.event_id}")
        try:
            result = await self.invoker.invoke(function, event)
        except FunctionInvocationError as e:
            FUNCTION_INVOCATIONS.labels(space, "failure").inc()
            if emit_system:
                invocation.error = str(e)
                await self._emit_system(space, SYSTEM_FUNCTION_INVOCATION_FAILED, invocation)
            raise

        FUNCTION_INVOCATIONS.labels(space, "success").inc()
        if emit_system:
            await self._emit_system(space, SYSTEM_FUNCTION_INVOKED, invocation)
        return result

    async def _emit_system(self, space: str, event_type: str, payload: BaseDTO) -> None:
        """Publish a system event if anything in the space subscribes to it."""
        if not self.store.async_subscribers(space, event_type, SYSTEM_EVENT_PATH):
            return

        system_event = CloudEvent.new(
            event_type,
            MIME_JSON,
            payload.model_dump(mode="json", by_alias=True),
        )
        try:
            await self._publish(space, SYSTEM_EVENT_PATH, system_event)
        except (AdapterError, ConnectionError) as e:
            logger.warning(f"Failed to emit system event {event_type}: {e}")
