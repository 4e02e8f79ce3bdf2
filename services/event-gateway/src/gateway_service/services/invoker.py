"""
Function invocation.

HTTP functions receive the CloudEvent as a JSON POST body. Weighted
functions forward the call to one of their targets.
"""
import logging
import random
from typing import Callable, Optional

import httpx

from eventgateway_common import CloudEvent, Function, ProviderType, choose_function

logger = logging.getLogger(__name__)

# Resolves a function ID within a space
FunctionLookup = Callable[[str, str], Optional[Function]]


class FunctionInvocationError(Exception):
    """Base exception for failed function calls."""


class FunctionCallFailedError(FunctionInvocationError):
    """The function could not be reached."""


class FunctionError(FunctionInvocationError):
    """The function was reached but reported an error."""


class FunctionLookupError(FunctionInvocationError):
    """A weighted function targets a function that no longer exists."""


class FunctionInvoker:
    """
    Calls registered functions.

    Attributes:
        timeout: Seconds to wait for an HTTP function
    """

    def __init__(
        self,
        lookup: FunctionLookup,
        timeout: float = 5.0,
        rng: Optional[random.Random] = None,
    ):
        self.timeout = timeout
        self._lookup = lookup
        self._rng = rng
        self._http_client: Optional[httpx.AsyncClient] = None

    async def invoke(self, function: Function, event: CloudEvent) -> bytes:
        """
        Invoke a function with an event.

        Returns:
            The raw response body

        Raises:
            FunctionCallFailedError: If the function could not be reached
            FunctionError: If the function answered with HTTP 500
            FunctionLookupError: If a weighted target is missing
        """
        provider = function.provider

        if provider.type == ProviderType.WEIGHTED:
            try:
                chosen_id = choose_function(provider.weighted or [], self._rng)
            except ValueError as e:
                raise FunctionCallFailedError(str(e)) from e
            chosen = self._lookup(function.space, chosen_id)
            if chosen is None or chosen.provider.type == ProviderType.WEIGHTED:
                raise FunctionLookupError(f'unable to look up weighted target function "{chosen_id}"')
            logger.debug(f"Weighted function {function.function_id} chose {chosen_id}")
            return await self.invoke(chosen, event)

        return await self._call_http(function, event)

    async def _call_http(self, function: Function, event: CloudEvent) -> bytes:
        client = await self._ensure_http_client()
        url = function.provider.url

        try:
            response = await client.post(url, json=event.to_message(), timeout=self.timeout)
        except httpx.HTTPError as e:
            raise FunctionCallFailedError(f"calling function {function.function_id} failed: {e}") from e

        if response.status_code == 500:
            raise FunctionError(f"function {function.function_id} returned HTTP status code: 500")

        return response.content

    async def _ensure_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
        return self._http_client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
