"""
In-memory configuration store.

Holds event types, functions and subscriptions per space and enforces the
relationships between them: subscriptions reference existing functions and
event types, and neither can be deleted while a subscription uses it.
"""
import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from eventgateway_common import (
    TYPE_HTTP_REQUEST,
    EventType,
    Function,
    ProviderType,
    Subscription,
    SubscriptionType,
)

from ..core import pathtree
from .errors import (
    EventTypeAlreadyExistsError,
    EventTypeHasSubscriptionsError,
    EventTypeNotFoundError,
    FunctionAlreadyExistsError,
    FunctionHasSubscriptionsError,
    FunctionIsWeightedTargetError,
    FunctionNotFoundError,
    PathConflictError,
    SubscriptionAlreadyExistsError,
    SubscriptionNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class ConfigStore:
    """
    Space-scoped storage for the gateway configuration.

    Mutations are serialized with an asyncio lock. Lookups used on the
    routing path are synchronous and lock free.
    """

    def __init__(self):
        self._lock = asyncio.Lock()
        # space -> name/id -> entity
        self._event_types: Dict[str, Dict[str, EventType]] = {}
        self._functions: Dict[str, Dict[str, Function]] = {}
        self._subscriptions: Dict[str, Dict[str, Subscription]] = {}

    # =========================================================================
    # Event types
    # =========================================================================

    async def create_event_type(self, event_type: EventType) -> EventType:
        async with self._lock:
            types = self._event_types.setdefault(event_type.space, {})
            if event_type.name in types:
                raise EventTypeAlreadyExistsError(event_type.name)
            types[event_type.name] = event_type

        logger.info(f"Event type created: {event_type.space}/{event_type.name}")
        return event_type

    async def get_event_type(self, space: str, name: str) -> EventType:
        event_type = self.event_type(space, name)
        if event_type is None:
            raise EventTypeNotFoundError(name)
        return event_type

    async def list_event_types(self, space: str) -> List[EventType]:
        return list(self._event_types.get(space, {}).values())

    async def update_event_type(self, event_type: EventType) -> EventType:
        async with self._lock:
            types = self._event_types.get(event_type.space, {})
            if event_type.name not in types:
                raise EventTypeNotFoundError(event_type.name)
            types[event_type.name] = event_type

        logger.info(f"Event type updated: {event_type.space}/{event_type.name}")
        return event_type

    async def delete_event_type(self, space: str, name: str) -> None:
        async with self._lock:
            types = self._event_types.get(space, {})
            if name not in types:
                raise EventTypeNotFoundError(name)
            if any(sub.event_type == name for sub in self._subscriptions.get(space, {}).values()):
                raise EventTypeHasSubscriptionsError(name)
            del types[name]

        logger.info(f"Event type deleted: {space}/{name}")

    # =========================================================================
    # Functions
    # =========================================================================

    async def create_function(self, function: Function) -> Function:
        async with self._lock:
            functions = self._functions.setdefault(function.space, {})
            if function.function_id in functions:
                raise FunctionAlreadyExistsError(function.function_id)
            self._check_weighted_targets(function)
            functions[function.function_id] = function

        logger.info(f"Function registered: {function.space}/{function.function_id} ({function.provider.type.value})")
        return function

    async def get_function(self, space: str, function_id: str) -> Function:
        function = self.function(space, function_id)
        if function is None:
            raise FunctionNotFoundError(function_id)
        return function

    async def list_functions(self, space: str) -> List[Function]:
        return list(self._functions.get(space, {}).values())

    async def update_function(self, function: Function) -> Function:
        async with self._lock:
            functions = self._functions.get(function.space, {})
            if function.function_id not in functions:
                raise FunctionNotFoundError(function.function_id)
            self._check_weighted_targets(function)
            functions[function.function_id] = function

        logger.info(f"Function updated: {function.space}/{function.function_id}")
        return function

    async def delete_function(self, space: str, function_id: str) -> None:
        async with self._lock:
            functions = self._functions.get(space, {})
            if function_id not in functions:
                raise FunctionNotFoundError(function_id)
            if any(sub.function_id == function_id for sub in self._subscriptions.get(space, {}).values()):
                raise FunctionHasSubscriptionsError(function_id)
            for other in functions.values():
                if other.provider.type == ProviderType.WEIGHTED and any(
                    target.function_id == function_id for target in other.provider.weighted or []
                ):
                    raise FunctionIsWeightedTargetError(function_id, other.function_id)
            del functions[function_id]

        logger.info(f"Function deleted: {space}/{function_id}")

    def _check_weighted_targets(self, function: Function) -> None:
        if function.provider.type != ProviderType.WEIGHTED:
            return
        functions = self._functions.get(function.space, {})
        for target in function.provider.weighted or []:
            if target.function_id == function.function_id:
                raise ValidationError("Weighted function cannot target itself.")
            if target.function_id not in functions:
                raise ValidationError(f'Weighted target function "{target.function_id}" not found.')

    # =========================================================================
    # Subscriptions
    # =========================================================================

    async def create_subscription(self, subscription: Subscription) -> Subscription:
        space = subscription.space
        async with self._lock:
            self._check_references(subscription)

            subscriptions = self._subscriptions.setdefault(space, {})
            if subscription.subscription_id in subscriptions:
                raise SubscriptionAlreadyExistsError(subscription.subscription_id)

            if subscription.type == SubscriptionType.SYNC:
                for other in subscriptions.values():
                    if (
                        other.type == SubscriptionType.SYNC
                        and other.event_type == subscription.event_type
                        and other.method == subscription.method
                        and pathtree.conflicts(subscription.path, other.path)
                    ):
                        raise PathConflictError(subscription.path, other.path)

            subscriptions[subscription.subscription_id] = subscription

        logger.info(
            f"Subscription created: {space}/{subscription.subscription_id} "
            f"({subscription.type.value} {subscription.event_type} {subscription.method} "
            f"{subscription.path} -> {subscription.function_id})"
        )
        return subscription

    async def get_subscription(self, space: str, subscription_id: str) -> Subscription:
        subscription = self._subscriptions.get(space, {}).get(subscription_id)
        if subscription is None:
            raise SubscriptionNotFoundError(subscription_id)
        return subscription

    async def list_subscriptions(self, space: str) -> List[Subscription]:
        return list(self._subscriptions.get(space, {}).values())

    async def update_subscription(self, subscription_id: str, subscription: Subscription) -> Subscription:
        """Only the function and the CORS settings of a subscription can change."""
        async with self._lock:
            subscriptions = self._subscriptions.get(subscription.space, {})
            if subscription_id not in subscriptions:
                raise SubscriptionNotFoundError(subscription_id)
            if subscription.subscription_id != subscription_id:
                raise ValidationError("Subscription type, event type, path and method cannot be changed.")
            self._check_references(subscription)
            subscriptions[subscription_id] = subscription

        logger.info(f"Subscription updated: {subscription.space}/{subscription_id}")
        return subscription

    async def delete_subscription(self, space: str, subscription_id: str) -> None:
        async with self._lock:
            subscriptions = self._subscriptions.get(space, {})
            if subscription_id not in subscriptions:
                raise SubscriptionNotFoundError(subscription_id)
            del subscriptions[subscription_id]

        logger.info(f"Subscription deleted: {space}/{subscription_id}")

    def _check_references(self, subscription: Subscription) -> None:
        space = subscription.space
        if subscription.function_id not in self._functions.get(space, {}):
            raise ValidationError(f'Function "{subscription.function_id}" not found.')
        if (
            subscription.event_type != TYPE_HTTP_REQUEST
            and subscription.event_type not in self._event_types.get(space, {})
        ):
            raise ValidationError(f'Event Type "{subscription.event_type}" not found.')

    # =========================================================================
    # Routing lookups
    # =========================================================================

    def function(self, space: str, function_id: str) -> Optional[Function]:
        return self._functions.get(space, {}).get(function_id)

    def event_type(self, space: str, name: str) -> Optional[EventType]:
        return self._event_types.get(space, {}).get(name)

    def async_subscribers(self, space: str, event_type: str, path: str) -> List[Subscription]:
        """Async subscriptions for an event type whose path matches ``path``."""
        return [
            sub
            for sub in self._subscriptions.get(space, {}).values()
            if sub.type == SubscriptionType.ASYNC
            and sub.event_type == event_type
            and pathtree.match(sub.path, path) is not None
        ]

    def sync_subscriber(
        self,
        space: str,
        event_type: str,
        method: str,
        path: str,
    ) -> Optional[Tuple[Subscription, Dict[str, str]]]:
        """The sync subscription serving a request, with its path parameters."""
        candidates = {
            sub.path: sub
            for sub in self._subscriptions.get(space, {}).values()
            if sub.type == SubscriptionType.SYNC
            and sub.event_type == event_type
            and sub.method == method
        }
        found = pathtree.best_match(list(candidates), path)
        if found is None:
            return None
        pattern, params = found
        return candidates[pattern], params
