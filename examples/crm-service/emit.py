"""
CRM Service - emits a user.created event

The CRM owns user sign-ups. It does not know who is interested in new users;
it only emits ``user.created`` to the gateway, which delivers the event to
every subscribed function.

Usage:
    EVENT_GATEWAY_URL=http://localhost:4000 python emit.py
"""
import asyncio
import logging
import os

from eventgateway import EventGateway

# Configure logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

eventgateway = EventGateway(
    url=os.getenv("EVENT_GATEWAY_URL", "http://localhost:4000"),
    space=os.getenv("EVENT_GATEWAY_SPACE", "default"),
)


async def create_user(user: dict):
    """Store the user (omitted) and tell the world about it."""
    await eventgateway.emit("user.created", data=user)
    logger.info("Emitted user.created event!")


async def main():
    try:
        await create_user({
            "username": "sls-fan",
            "firstname": "Bill",
            "lastname": "Jones",
            "company": "Big Corp, Inc.",
            "email": "bjones12@bigcorp.com",
        })
    finally:
        await eventgateway.close()


if __name__ == "__main__":
    asyncio.run(main())
