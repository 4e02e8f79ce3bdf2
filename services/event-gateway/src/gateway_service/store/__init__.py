"""
Configuration store for event types, functions and subscriptions.
"""
from .config_store import ConfigStore
from .errors import (
    StoreError,
    ValidationError,
    EventTypeNotFoundError,
    EventTypeAlreadyExistsError,
    EventTypeHasSubscriptionsError,
    FunctionNotFoundError,
    FunctionAlreadyExistsError,
    FunctionHasSubscriptionsError,
    FunctionIsWeightedTargetError,
    SubscriptionNotFoundError,
    SubscriptionAlreadyExistsError,
    PathConflictError,
)

__all__ = [
    "ConfigStore",
    "StoreError",
    "ValidationError",
    "EventTypeNotFoundError",
    "EventTypeAlreadyExistsError",
    "EventTypeHasSubscriptionsError",
    "FunctionNotFoundError",
    "FunctionAlreadyExistsError",
    "FunctionHasSubscriptionsError",
    "FunctionIsWeightedTargetError",
    "SubscriptionNotFoundError",
    "SubscriptionAlreadyExistsError",
    "PathConflictError",
]
