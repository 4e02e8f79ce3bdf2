"""
Event bus adapter interface.

The router publishes every accepted custom event to the bus, using the space
as topic, and consumes it back through a queue-group subscription. Adapters
hide which bus carries the messages.
"""
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Optional

# (topic, message) -> None
MessageHandler = Callable[[str, Dict[str, Any]], Awaitable[None]]


class AdapterError(Exception):
    """Base exception for bus adapter errors."""


class PublishError(AdapterError):
    """A message could not be handed to the bus."""


class SubscriptionError(AdapterError):
    """The bus refused a subscription."""


class EventAdapter(ABC):
    """
    Abstract base class for event bus adapters.

    Topics are dot separated. Subscription patterns accept NATS-style
    wildcards: ``*`` matches one token, a trailing ``>`` matches the rest.
    """

    # Short adapter name reported by the health endpoint
    kind: str = "unknown"

    @abstractmethod
    async def connect(self) -> None:
        """
        Open the bus connection.

        Raises:
            ConnectionError: If the bus cannot be reached
        """

    @abstractmethod
    async def disconnect(self) -> None:
        """Drop all subscriptions and close the connection."""

    @abstractmethod
    async def publish(self, topic: str, message: Dict[str, Any]) -> None:
        """
        Send a JSON-serializable message to a topic.

        Raises:
            PublishError: If the bus rejected the message
            ConnectionError: If the adapter is not connected
        """

    @abstractmethod
    async def subscribe(
        self,
        topics: List[str],
        handler: MessageHandler,
        subscription_id: Optional[str] = None,
        queue_group: Optional[str] = None,
    ) -> str:
        """
        Register ``handler`` for messages on any of ``topics``.

        Subscribers sharing a ``queue_group`` split the messages between them
        instead of each receiving a copy.

        Returns:
            The subscription ID to pass to ``unsubscribe``

        Raises:
            SubscriptionError: If the bus refused the subscription
            ConnectionError: If the adapter is not connected
        """

    @abstractmethod
    async def unsubscribe(self, subscription_id: str) -> None:
        """Remove a subscription. Unknown IDs are ignored."""

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether messages can currently be published."""

    @property
    def name(self) -> str:
        return self.kind
