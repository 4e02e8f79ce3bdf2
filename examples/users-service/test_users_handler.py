"""
Tests for the users service functions.
"""
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from eventgateway import EventGateway
from handler import FUNCTIONS_URL, app, delete, get, post, register


def http_event(method: str, path: str, params=None):
    return {
        "eventType": "http.request",
        "cloudEventsVersion": "0.1",
        "source": "https://serverless.com/event-gateway/#transformationVersion=0.1",
        "eventID": "8c4d5f2e-0000-4000-8000-000000000000",
        "contentType": "application/json",
        "data": {
            "headers": {},
            "query": {},
            "body": None,
            "host": "localhost:4000",
            "path": path,
            "method": method,
            "params": params or {},
        },
    }


def assert_json_response(response):
    assert response["statusCode"] == 200
    assert response["headers"]["Content-Type"] == "application/json"
    return json.loads(response["body"])


class TestHandlers:
    """Tests for the plain handler functions."""
    
    def test_get_returns_requested_user(self):
        body = assert_json_response(get(http_event("GET", "/users/42", {"id": "42"})))
        assert body["id"] == "42"
        assert body["name"]
        assert "@" in body["email"]
    
    def test_post_creates_user(self):
        body = assert_json_response(post(http_event("POST", "/users")))
        assert isinstance(body["id"], int)
        assert 1 <= body["id"] <= 1000
        assert body["name"]
        assert "@" in body["email"]
    
    def test_delete_reports_id(self):
        body = assert_json_response(delete(http_event("DELETE", "/users/7", {"id": "7"})))
        assert body == {"message": "Deleted user with id 7"}


class TestFunctionEndpoints:
    """Tests for the HTTP endpoints the gateway calls."""
    
    @pytest.fixture
    def client(self):
        return TestClient(app)
    
    def test_get_endpoint(self, client):
        response = client.post("/get", json=http_event("GET", "/users/5", {"id": "5"}))
        assert response.status_code == 200
        assert json.loads(response.json()["body"])["id"] == "5"
    
    def test_post_endpoint(self, client):
        response = client.post("/post", json=http_event("POST", "/users"))
        assert response.status_code == 200
        body = json.loads(response.json()["body"])
        assert isinstance(body["id"], int)
        assert "@" in body["email"]
    
    def test_delete_endpoint(self, client):
        response = client.post("/delete", json=http_event("DELETE", "/users/5", {"id": "5"}))
        assert response.status_code == 200
        assert json.loads(response.json()["body"])["message"] == "Deleted user with id 5"


async def test_register_routes_rest_endpoints():
    requests = []
    
    def config_api(request):
        body = json.loads(request.content)
        requests.append((request.method, request.url.path, body))
        return httpx.Response(201, json=body)
    
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(config_api))
    async with EventGateway(
        url="http://localhost:4000",
        config_url="http://localhost:4001",
        http_client=http_client,
    ) as eventgateway:
        await register(eventgateway)
    
    functions = {
        body["functionId"]: body["provider"]["url"]
        for method, path, body in requests
        if path == "/v1/spaces/default/functions"
    }
    assert functions == {
        "users-get": f"{FUNCTIONS_URL}/get",
        "users-post": f"{FUNCTIONS_URL}/post",
        "users-delete": f"{FUNCTIONS_URL}/delete",
    }
    
    subscriptions = [
        (body["type"], body["eventType"], body["method"], body["path"], body["functionId"])
        for method, path, body in requests
        if path == "/v1/spaces/default/subscriptions"
    ]
    assert subscriptions == [
        ("sync", "http.request", "GET", "/users/:id", "users-get"),
        ("sync", "http.request", "POST", "/users", "users-post"),
        ("sync", "http.request", "DELETE", "/users/:id", "users-delete"),
    ]
    assert {method for method, _, _ in requests} == {"POST"}
