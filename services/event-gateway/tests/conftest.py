"""
Pytest configuration for Event Gateway tests.
"""
import json
import os
from typing import Any, Callable, Dict, List, Union

import httpx
import pytest

# Set test environment variables
os.environ["EVENT_ADAPTER"] = "memory"
os.environ["DEBUG"] = "true"

from gateway_service.adapters import MemoryAdapter
from gateway_service.services.invoker import FunctionInvoker
from gateway_service.store import ConfigStore

Reply = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


class FunctionServer:
    """
    Stands in for the HTTP functions the gateway calls.

    Records every call and answers with the reply registered for its URL
    (an empty 200 by default).
    """

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.replies: Dict[str, Reply] = {}

    def reply(self, url: str, reply: Reply) -> None:
        self.replies[url] = reply

    def calls_to(self, url: str) -> List[Dict[str, Any]]:
        return [call["event"] for call in self.calls if call["url"] == url]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls.append({"url": url, "event": json.loads(request.content)})
        reply = self.replies.get(url, httpx.Response(200))
        if callable(reply):
            return reply(request)
        return reply

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture
def store():
    return ConfigStore()


@pytest.fixture
async def adapter():
    adapter = MemoryAdapter()
    await adapter.connect()
    yield adapter
    await adapter.disconnect()


@pytest.fixture
def function_server():
    return FunctionServer()


@pytest.fixture
async def invoker(store, function_server):
    invoker = FunctionInvoker(store.function, timeout=1.0)
    invoker._http_client = function_server.client()
    yield invoker
    await invoker.close()
