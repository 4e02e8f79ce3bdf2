"""
NATS bus adapter.

Gateway topics are spaces; they travel as subjects under the
``eventgateway.events.`` namespace. The router's queue group becomes a NATS
queue subscription, so every gateway instance connected to the same server
takes a share of the async deliveries.
"""
import json
import logging
from typing import Any, Dict, List, Optional
from uuid import uuid4

import nats
from nats.aio.client import Client as NatsClient
from nats.aio.msg import Msg
from nats.aio.subscription import Subscription as NatsSubscription

from .base import EventAdapter, MessageHandler, PublishError, SubscriptionError

logger = logging.getLogger(__name__)

SUBJECT_PREFIX = "eventgateway.events."
CLIENT_NAME = "event-gateway"


def subject_for(topic: str) -> str:
    return SUBJECT_PREFIX + topic


def topic_for(subject: str) -> str:
    return subject[len(SUBJECT_PREFIX):] if subject.startswith(SUBJECT_PREFIX) else subject


class NatsAdapter(EventAdapter):
    """
    Bus adapter backed by NATS Core.

    Messages are JSON encoded. The client reconnects on its own; the
    connection callbacks only log.
    """

    kind = "nats"

    def __init__(
        self,
        url: str = "nats://localhost:4222",
        reconnect_time_wait: int = 2,
        max_reconnect_attempts: int = -1,
    ):
        """
        Args:
            url: NATS server URL
            reconnect_time_wait: Seconds to wait between reconnects
            max_reconnect_attempts: Reconnect limit, -1 retries forever
        """
        self.url = url
        self.reconnect_time_wait = reconnect_time_wait
        self.max_reconnect_attempts = max_reconnect_attempts
        self._nc: Optional[NatsClient] = None
        # gateway subscription id -> NATS subscriptions, one per topic
        self._subs: Dict[str, List[NatsSubscription]] = {}

    @property
    def is_connected(self) -> bool:
        return self._nc is not None and self._nc.is_connected

    async def connect(self) -> None:
        if self.is_connected:
            return

        logger.info(f"Connecting event bus to {self.url}")
        try:
            self._nc = await nats.connect(
                servers=[self.url],
                name=CLIENT_NAME,
                reconnect_time_wait=self.reconnect_time_wait,
                max_reconnect_attempts=self.max_reconnect_attempts,
                error_cb=self._on_error,
                disconnected_cb=self._on_disconnected,
                reconnected_cb=self._on_reconnected,
            )
        except Exception as e:
            raise ConnectionError(f"Event bus unreachable at {self.url}: {e}") from e

        logger.info(f"Event bus connected: {self._nc.connected_url}")

    async def disconnect(self) -> None:
        """Drop the router's subscriptions and drain pending messages."""
        if self._nc is None:
            return

        for sub_id in list(self._subs):
            await self.unsubscribe(sub_id)

        try:
            await self._nc.drain()
        except Exception as e:
            logger.warning(f"Event bus drain failed: {e}")
        finally:
            self._nc = None
        logger.info("Event bus disconnected")

    async def publish(self, topic: str, message: Dict[str, Any]) -> None:
        if not self.is_connected:
            raise ConnectionError("Event bus not connected")

        subject = subject_for(topic)
        payload = json.dumps(message).encode("utf-8")
        try:
            await self._nc.publish(subject, payload)
        except Exception as e:
            raise PublishError(f"Publishing to {subject} failed: {e}") from e
        logger.debug(f"Event bus message sent to {subject} ({len(payload)} bytes)")

    async def subscribe(
        self,
        topics: List[str],
        handler: MessageHandler,
        subscription_id: Optional[str] = None,
        queue_group: Optional[str] = None,
    ) -> str:
        if not self.is_connected:
            raise ConnectionError("Event bus not connected")

        async def deliver(msg: Msg) -> None:
            try:
                message = json.loads(msg.data)
            except ValueError:
                logger.error(f"Dropping undecodable bus message on {msg.subject}")
                return
            try:
                await handler(topic_for(msg.subject), message)
            except Exception as e:
                logger.error(f"Bus handler failed for {msg.subject}: {e}", exc_info=True)

        sub_id = subscription_id or str(uuid4())
        subs: List[NatsSubscription] = []
        for topic in topics:
            subject = subject_for(topic)
            try:
                subs.append(await self._nc.subscribe(subject, queue=queue_group or "", cb=deliver))
            except Exception as e:
                for sub in subs:
                    await self._drop(sub)
                raise SubscriptionError(f"Subscribing to {subject} failed: {e}") from e

        self._subs[sub_id] = subs
        logger.info(f"Event bus subscription {sub_id}: {topics} (queue group: {queue_group or '-'})")
        return sub_id

    async def unsubscribe(self, subscription_id: str) -> None:
        for sub in self._subs.pop(subscription_id, []):
            await self._drop(sub)

    async def _drop(self, sub: NatsSubscription) -> None:
        try:
            await sub.unsubscribe()
        except Exception as e:
            logger.warning(f"Could not unsubscribe from {sub.subject}: {e}")

    async def _on_error(self, e: Exception) -> None:
        logger.error(f"Event bus error: {e}")

    async def _on_disconnected(self) -> None:
        logger.warning("Event bus connection lost")

    async def _on_reconnected(self) -> None:
        logger.info(f"Event bus reconnected: {self._nc.connected_url}")
