"""
Event Gateway client.

Emits events to the Events API and, when a Configuration API URL is given,
manages the event types, functions and subscriptions of a space.

Usage:
    from eventgateway import EventGateway

    eventgateway = EventGateway(
        url="http://localhost:4000",
        config_url="http://localhost:4001",
    )

    await eventgateway.create_event_type("user.created")
    await eventgateway.emit("user.created", data={"name": "Max"})
"""
import json
import logging
from typing import Any, Dict, List, Optional, Union

import httpx

from eventgateway_common import (
    DEFAULT_SPACE,
    TYPE_INVOKE,
    EmitRequest,
    EventType,
    Function,
    Provider,
    ProviderType,
    Subscription,
    SubscriptionType,
)

from .config import ConfigClient, ConfigError

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


class EmitError(ConnectionError):
    """Raised when an event could not be delivered to the gateway."""


def _with_scheme(url: str) -> str:
    url = url.rstrip("/")
    if "://" not in url:
        return f"https://{url}"
    return url


def _encode(data: Any, data_type: str) -> bytes:
    if data is None:
        return b""
    if isinstance(data, bytes):
        return data
    if data_type.split(";", 1)[0].strip().lower().endswith("json"):
        return json.dumps(data).encode("utf-8")
    return str(data).encode("utf-8")


class EventGateway:
    """
    Client for an Event Gateway.
    
    Attributes:
        url: Base URL of the Events API
        space: Space used for configuration calls
        config_url: Base URL of the Configuration API, if configuration is needed
        timeout: Request timeout in seconds
    """
    
    def __init__(
        self,
        url: str,
        space: str = DEFAULT_SPACE,
        config_url: Optional[str] = None,
        timeout: float = 5.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the client.
        
        Args:
            url: Events API URL; ``https://`` is assumed when no scheme is given
            space: Space for configuration calls (hosted gateways take the
                emit space from the URL's subdomain)
            config_url: Configuration API URL
            timeout: Request timeout in seconds
            http_client: Preconfigured HTTP client to use instead of a new one
        """
        self.url = _with_scheme(url)
        self.space = space
        self.config_url = _with_scheme(config_url) if config_url else None
        self.timeout = timeout
        
        # HTTP client (lazy initialized)
        self._http_client = http_client
        self._config: Optional[ConfigClient] = None
    
    async def _ensure_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
        return self._http_client
    
    @property
    def config(self) -> ConfigClient:
        """
        The Configuration API client.
        
        Raises:
            ConfigError: If no ``config_url`` was given
        """
        if self.config_url is None:
            raise ConfigError("config_url is required for configuration calls")
        if self._config is None:
            self._config = ConfigClient(
                self.config_url,
                space=self.space,
                timeout=self.timeout,
                http_client=self._http_client,
            )
        return self._config
    
    async def close(self) -> None:
        """Close the HTTP clients."""
        if self._config is not None and self._config._client is not self._http_client:
            await self._config.close()
        self._config = None
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
    
    async def __aenter__(self) -> "EventGateway":
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
    
    # =========================================================================
    # Events
    # =========================================================================
    
    async def emit(
        self,
        event: str,
        data: Any = None,
        path: str = "/",
        headers: Optional[Dict[str, str]] = None,
        data_type: str = JSON_CONTENT_TYPE,
    ) -> httpx.Response:
        """
        Emit an event.
        
        Exactly one POST is sent to the Events API with the event name in the
        ``Event`` header and the payload as body.
        
        Args:
            event: Event type (e.g., "user.created")
            data: Event payload, JSON encoded for JSON data types
            path: Path the event is emitted on
            headers: Additional request headers
            data_type: Content type of the payload
        
        Returns:
            The gateway response
        
        Raises:
            EmitError: If the gateway could not be reached or rejected the event
        """
        if not event:
            raise ValueError("event name is required")
        
        request_headers = dict(headers or {})
        request_headers["Event"] = event
        request_headers["Content-Type"] = data_type
        return await self._post(path, request_headers, _encode(data, data_type), event)
    
    async def emit_request(self, request: EmitRequest, path: str = "/") -> httpx.Response:
        """Emit an event described by an ``EmitRequest``."""
        return await self.emit(request.event, data=request.data, path=path)
    
    async def invoke(self, function_id: str, data: Any = None, path: str = "/") -> httpx.Response:
        """
        Invoke a function synchronously and return its response.
        
        Raises:
            EmitError: If the gateway could not be reached or the call failed
        """
        request_headers = {
            "Event": TYPE_INVOKE,
            "Function-ID": function_id,
            "Content-Type": JSON_CONTENT_TYPE,
        }
        return await self._post(path, request_headers, _encode(data, JSON_CONTENT_TYPE), TYPE_INVOKE)
    
    async def _post(self, path: str, headers: Dict[str, str], body: bytes, event: str) -> httpx.Response:
        client = await self._ensure_http_client()
        url = f"{self.url}/{path.lstrip('/')}"
        
        try:
            response = await client.post(url, content=body, headers=headers, timeout=self.timeout)
        except httpx.HTTPError as e:
            logger.error(f"Error emitting {event}: {e}")
            raise EmitError(f"Failed to emit event {event}: {e}") from e
        
        if not response.is_success:
            raise EmitError(
                f"Failed to emit event {event}: {response.status_code} - {response.text}"
            )
        
        logger.debug(f"Emitted {event} to {url} ({response.status_code})")
        return response
    
    # =========================================================================
    # Configuration
    # =========================================================================
    
    async def create_event_type(self, name: str) -> EventType:
        return await self.config.create_event_type(name)
    
    async def list_event_types(self) -> List[EventType]:
        return await self.config.list_event_types()
    
    async def delete_event_type(self, name: str) -> None:
        await self.config.delete_event_type(name)
    
    async def register_function(
        self,
        function_id: str,
        url: Optional[str] = None,
        provider: Optional[Provider] = None,
    ) -> Function:
        """
        Register a function.
        
        Args:
            function_id: Function ID
            url: Endpoint of an HTTP function
            provider: Full provider definition (e.g., for weighted functions)
        """
        if provider is None:
            provider = Provider(type=ProviderType.HTTP, url=url)
        return await self.config.register_function(
            Function(space=self.space, function_id=function_id, provider=provider)
        )
    
    async def list_functions(self) -> List[Function]:
        return await self.config.list_functions()
    
    async def delete_function(self, function_id: str) -> None:
        await self.config.delete_function(function_id)
    
    async def subscribe(
        self,
        event_type: str,
        function_id: str,
        subscription_type: Union[SubscriptionType, str] = SubscriptionType.ASYNC,
        path: str = "/",
        method: str = "POST",
        **kwargs: Any,
    ) -> Subscription:
        """
        Subscribe a function to an event type.
        
        Extra keyword arguments (e.g., ``cors``) are passed to ``Subscription``.
        """
        return await self.config.create_subscription(Subscription(
            space=self.space,
            type=SubscriptionType(subscription_type),
            event_type=event_type,
            function_id=function_id,
            path=path,
            method=method,
            **kwargs,
        ))
    
    async def list_subscriptions(self) -> List[Subscription]:
        return await self.config.list_subscriptions()
    
    async def unsubscribe(self, subscription_id: str) -> None:
        await self.config.delete_subscription(subscription_id)
