"""Prometheus metrics for the Event Gateway.

Exposed by the Configuration API on ``/metrics``.
"""
from prometheus_client import Counter, Gauge

EVENTS_RECEIVED = Counter(
    "eventgateway_events_received_total",
    "Events received by the Events API",
    ["space", "type"],
)

EVENTS_DROPPED = Counter(
    "eventgateway_events_dropped_total",
    "Events dropped because the router backlog was full",
    ["space", "type"],
)

FUNCTION_INVOCATIONS = Counter(
    "eventgateway_function_invocations_total",
    "Function invocations by outcome",
    ["space", "outcome"],
)

BACKLOG_SIZE = Gauge(
    "eventgateway_router_backlog",
    "Events waiting for an async delivery worker",
)
