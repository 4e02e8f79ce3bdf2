"""
In-memory bus adapter.

Used for single-process deployments, local development and tests. Messages
are handed to subscriber handlers directly from ``publish``.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from uuid import uuid4

from .base import EventAdapter, MessageHandler

logger = logging.getLogger(__name__)


def topic_matches(pattern: str, topic: str) -> bool:
    """
    Check if a NATS-style pattern matches a topic.

    - "*" matches exactly one token
    - ">" matches one or more tokens (only at end)
    """
    if pattern == topic:
        return True

    pattern_parts = pattern.split(".")
    topic_parts = topic.split(".")

    if pattern_parts[-1] == ">":
        prefix = pattern_parts[:-1]
        if len(topic_parts) <= len(prefix):
            return False
        return all(p == "*" or p == t for p, t in zip(prefix, topic_parts))

    if len(pattern_parts) != len(topic_parts):
        return False
    return all(p == "*" or p == t for p, t in zip(pattern_parts, topic_parts))


@dataclass
class _MemorySubscription:
    patterns: List[str]
    handler: MessageHandler
    queue_group: Optional[str] = None


class MemoryAdapter(EventAdapter):
    """
    In-memory event adapter.

    Features:
    - Wildcard pattern matching ("*" and ">")
    - Queue groups: one member per group receives each message (round robin)
    - No persistence
    """

    kind = "memory"

    def __init__(self):
        self._connected = False
        self._subscriptions: Dict[str, _MemorySubscription] = {}
        # Queue group -> round-robin cursor
        self._cursors: Dict[str, int] = {}

    async def connect(self) -> None:
        """Mark adapter as connected."""
        if self._connected:
            logger.warning("Memory adapter already connected")
            return

        self._connected = True
        logger.info("Memory adapter connected (in-memory mode)")

    async def disconnect(self) -> None:
        """Disconnect and clean up subscriptions."""
        self._subscriptions.clear()
        self._cursors.clear()
        self._connected = False
        logger.info("Memory adapter disconnected")

    async def publish(self, topic: str, message: Dict[str, Any]) -> None:
        """Deliver a message to every matching subscriber (one per queue group)."""
        if not self._connected:
            raise ConnectionError("Memory adapter not connected")

        recipients = self._select_recipients(topic)
        if not recipients:
            logger.debug(f"No subscribers for topic: {topic}")
            return

        results = await asyncio.gather(
            *(sub.handler(topic, message) for sub in recipients),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, Exception):
                logger.error(f"Handler error for topic {topic}: {result}")

    async def subscribe(
        self,
        topics: List[str],
        handler: MessageHandler,
        subscription_id: Optional[str] = None,
        queue_group: Optional[str] = None,
    ) -> str:
        """Register a handler for the given topic patterns."""
        if not self._connected:
            raise ConnectionError("Memory adapter not connected")

        sub_id = subscription_id or str(uuid4())
        self._subscriptions[sub_id] = _MemorySubscription(
            patterns=list(topics),
            handler=handler,
            queue_group=queue_group,
        )
        if queue_group:
            self._cursors.setdefault(queue_group, 0)

        logger.info(f"Subscribed to {topics} (sub_id: {sub_id}, group: {queue_group})")
        return sub_id

    async def unsubscribe(self, subscription_id: str) -> None:
        """Remove a subscription."""
        sub = self._subscriptions.pop(subscription_id, None)
        if sub is None:
            logger.warning(f"Subscription {subscription_id} not found")
            return

        group = sub.queue_group
        if group and not any(s.queue_group == group for s in self._subscriptions.values()):
            self._cursors.pop(group, None)

        logger.info(f"Unsubscribed: {subscription_id}")

    @property
    def is_connected(self) -> bool:
        return self._connected

    def _select_recipients(self, topic: str) -> List[_MemorySubscription]:
        """Matching broadcast subscribers plus one member of each queue group."""
        recipients: List[_MemorySubscription] = []
        groups: Dict[str, List[_MemorySubscription]] = {}

        for sub in self._subscriptions.values():
            if not any(topic_matches(pattern, topic) for pattern in sub.patterns):
                continue
            if sub.queue_group:
                groups.setdefault(sub.queue_group, []).append(sub)
            else:
                recipients.append(sub)

        for group, members in groups.items():
            cursor = self._cursors.get(group, 0)
            recipients.append(members[cursor % len(members)])
            self._cursors[group] = cursor + 1

        return recipients
