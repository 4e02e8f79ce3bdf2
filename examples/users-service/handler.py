"""
Users Service - HTTP functions behind the gateway

Three functions answer REST calls routed through the gateway:

    GET    /users/:id  -> get
    POST   /users      -> post
    DELETE /users/:id  -> delete

Each function receives the ``http.request`` CloudEvent and returns an HTTP
response object. Users are made up with Faker.

Usage:
    # Serve the functions
    uvicorn handler:app --port 5000

    # Register them with a running gateway
    python handler.py register
"""
import asyncio
import logging
import os
import random
import sys
from typing import Any, Dict

from faker import Faker
from fastapi import FastAPI

from eventgateway import EventGateway, http_response
from eventgateway_common import TYPE_HTTP_REQUEST, SubscriptionType

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

fake = Faker()

FUNCTIONS_URL = os.getenv("USERS_SERVICE_URL", "http://localhost:5000")


def get(event: Dict[str, Any]) -> Dict[str, Any]:
    """Return the user named by the ``id`` path parameter."""
    user_id = event["data"]["params"]["id"]
    return http_response({"id": user_id, "name": fake.name(), "email": fake.email()})


def post(event: Dict[str, Any]) -> Dict[str, Any]:
    """Create a user with a fresh ID."""
    user_id = random.randint(1, 1000)
    return http_response({"id": user_id, "name": fake.name(), "email": fake.email()})


def delete(event: Dict[str, Any]) -> Dict[str, Any]:
    user_id = event["data"]["params"]["id"]
    return http_response({"message": f"Deleted user with id {user_id}"})


app = FastAPI(title="Users Service")


@app.post("/get")
async def get_user(event: Dict[str, Any]) -> Dict[str, Any]:
    return get(event)


@app.post("/post")
async def create_user(event: Dict[str, Any]) -> Dict[str, Any]:
    return post(event)


@app.post("/delete")
async def delete_user(event: Dict[str, Any]) -> Dict[str, Any]:
    return delete(event)


async def register(eventgateway: EventGateway) -> None:
    """Register the functions and route the REST endpoints to them."""
    routes = [
        ("users-get", "/get", "GET", "/users/:id"),
        ("users-post", "/post", "POST", "/users"),
        ("users-delete", "/delete", "DELETE", "/users/:id"),
    ]
    for function_id, endpoint, method, path in routes:
        await eventgateway.register_function(function_id, url=f"{FUNCTIONS_URL}{endpoint}")
        await eventgateway.subscribe(
            TYPE_HTTP_REQUEST,
            function_id,
            subscription_type=SubscriptionType.SYNC,
            path=path,
            method=method,
        )
        logger.info(f"Routed {method} {path} to {function_id}")


async def main():
    async with EventGateway(
        url=os.getenv("EVENT_GATEWAY_URL", "http://localhost:4000"),
        config_url=os.getenv("EVENT_GATEWAY_CONFIG_URL", "http://localhost:4001"),
    ) as eventgateway:
        await register(eventgateway)


if __name__ == "__main__" and sys.argv[1:] == ["register"]:
    asyncio.run(main())
