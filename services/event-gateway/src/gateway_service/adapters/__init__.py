"""
Event bus adapters.

The router publishes accepted events to a bus and consumes them back for
async delivery. Running on NATS lets several gateway instances share the
delivery work; the in-memory bus serves single-process deployments and tests.
"""
from .base import AdapterError, EventAdapter, PublishError, SubscriptionError
from .nats_adapter import NatsAdapter
from .memory_adapter import MemoryAdapter

__all__ = [
    "AdapterError",
    "EventAdapter",
    "PublishError",
    "SubscriptionError",
    "NatsAdapter",
    "MemoryAdapter",
]
