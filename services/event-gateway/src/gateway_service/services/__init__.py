"""
Service layer: event parsing, function invocation and routing.
"""
from .event_parser import EventParsingError, parse_request
from .invoker import (
    FunctionInvoker,
    FunctionInvocationError,
    FunctionCallFailedError,
    FunctionError,
    FunctionLookupError,
)
from .router import Router, RouterResponse
from .gateway import Gateway, gateway

__all__ = [
    "EventParsingError",
    "parse_request",
    "FunctionInvoker",
    "FunctionInvocationError",
    "FunctionCallFailedError",
    "FunctionError",
    "FunctionLookupError",
    "Router",
    "RouterResponse",
    "Gateway",
    "gateway",
]
