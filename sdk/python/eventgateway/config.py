"""
Client library for the Event Gateway Configuration API.
"""
from typing import Any, List, Optional, Type, TypeVar

import httpx

from eventgateway_common import (
    DEFAULT_SPACE,
    ErrorResponse,
    EventType,
    EventTypeList,
    Function,
    FunctionList,
    Subscription,
    SubscriptionList,
)

T = TypeVar("T")


class ConfigError(Exception):
    """
    Raised when the Configuration API rejects a request.

    Attributes:
        status_code: HTTP status returned by the API (None for transport errors)
        messages: Error messages reported by the API
    """

    def __init__(self, message: str, status_code: Optional[int] = None, messages: Optional[List[str]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.messages = messages or [message]


class ConfigClient:
    """
    Client for the Configuration API of one space.
    
    Event types, functions and subscriptions are exchanged as the DTOs from
    ``eventgateway_common``.
    """
    
    def __init__(
        self,
        base_url: str,
        space: str = DEFAULT_SPACE,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the configuration client.
        
        Args:
            base_url: Base URL of the Configuration API (e.g., "http://localhost:4001")
            space: Space to operate on
            timeout: HTTP request timeout in seconds
            http_client: Preconfigured HTTP client to use instead of a new one
        """
        self.base_url = base_url.rstrip("/")
        self.space = space
        self.timeout = timeout
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
    
    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()
    
    async def __aenter__(self):
        """Async context manager entry."""
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    def _url(self, collection: str, key: Optional[str] = None) -> str:
        url = f"{self.base_url}/v1/spaces/{self.space}/{collection}"
        return f"{url}/{key}" if key else url

    async def _request(self, method: str, url: str, json: Any = None) -> httpx.Response:
        try:
            response = await self._client.request(method, url, json=json)
        except httpx.HTTPError as e:
            raise ConfigError(f"Configuration API request failed: {e}") from e

        if response.is_error:
            messages = [response.text or response.reason_phrase]
            try:
                messages = [error.message for error in ErrorResponse.model_validate(response.json()).errors]
            except ValueError:
                pass
            raise ConfigError(
                f"Configuration API returned {response.status_code}: {'; '.join(messages)}",
                status_code=response.status_code,
                messages=messages,
            )
        return response

    async def _get(self, url: str, model: Type[T]) -> Optional[T]:
        try:
            response = await self._request("GET", url)
        except ConfigError as e:
            if e.status_code == 404:
                return None
            raise
        return model.model_validate(response.json())

    # Event Types

    async def create_event_type(self, name: str) -> EventType:
        """
        Register an event type.
        
        Args:
            name: Event type name (e.g., "user.created")
            
        Returns:
            The registered EventType
        """
        event_type = EventType(space=self.space, name=name)
        response = await self._request(
            "POST", self._url("eventtypes"), json=event_type.model_dump(by_alias=True)
        )
        return EventType.model_validate(response.json())

    async def get_event_type(self, name: str) -> Optional[EventType]:
        """
        Get an event type by name.
        
        Returns:
            EventType if found, None otherwise
        """
        return await self._get(self._url("eventtypes", name), EventType)

    async def list_event_types(self) -> List[EventType]:
        response = await self._request("GET", self._url("eventtypes"))
        return EventTypeList.model_validate(response.json()).event_types

    async def update_event_type(self, event_type: EventType) -> EventType:
        response = await self._request(
            "PUT",
            self._url("eventtypes", event_type.name),
            json=event_type.model_dump(by_alias=True),
        )
        return EventType.model_validate(response.json())

    async def delete_event_type(self, name: str) -> None:
        await self._request("DELETE", self._url("eventtypes", name))

    # Functions

    async def register_function(self, function: Function) -> Function:
        """
        Register a function.
        
        Args:
            function: Function with an http or weighted provider
            
        Returns:
            The registered Function
        """
        response = await self._request(
            "POST",
            self._url("functions"),
            json=function.model_dump(by_alias=True, exclude_none=True),
        )
        return Function.model_validate(response.json())

    async def get_function(self, function_id: str) -> Optional[Function]:
        """
        Get a function by ID.
        
        Returns:
            Function if found, None otherwise
        """
        return await self._get(self._url("functions", function_id), Function)

    async def list_functions(self) -> List[Function]:
        response = await self._request("GET", self._url("functions"))
        return FunctionList.model_validate(response.json()).functions

    async def update_function(self, function: Function) -> Function:
        response = await self._request(
            "PUT",
            self._url("functions", function.function_id),
            json=function.model_dump(by_alias=True, exclude_none=True),
        )
        return Function.model_validate(response.json())

    async def delete_function(self, function_id: str) -> None:
        await self._request("DELETE", self._url("functions", function_id))

    # Subscriptions

    async def create_subscription(self, subscription: Subscription) -> Subscription:
        """
        Subscribe a function to an event type.
        
        Returns:
            The created Subscription, including its derived ID
        """
        response = await self._request(
            "POST",
            self._url("subscriptions"),
            json=subscription.model_dump(by_alias=True, exclude_none=True),
        )
        return Subscription.model_validate(response.json())

    async def get_subscription(self, subscription_id: str) -> Optional[Subscription]:
        return await self._get(self._url("subscriptions", subscription_id), Subscription)

    async def list_subscriptions(self) -> List[Subscription]:
        response = await self._request("GET", self._url("subscriptions"))
        return SubscriptionList.model_validate(response.json()).subscriptions

    async def update_subscription(self, subscription: Subscription) -> Subscription:
        response = await self._request(
            "PUT",
            self._url("subscriptions", subscription.subscription_id),
            json=subscription.model_dump(by_alias=True, exclude_none=True),
        )
        return Subscription.model_validate(response.json())

    async def delete_subscription(self, subscription_id: str) -> None:
        await self._request("DELETE", self._url("subscriptions", subscription_id))
