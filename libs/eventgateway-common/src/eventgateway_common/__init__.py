"""
Event Gateway Common - Shared DTOs for the Event Gateway service and SDK.
"""
from .models import (
    BaseDTO,
    DEFAULT_SPACE,
    ErrorDetail,
    ErrorResponse,
)

from .events import (
    # Envelopes
    EmitRequest,
    CloudEvent,
    HTTPRequestData,
    HTTPResponse,
    # System event payloads
    EventReceivedData,
    FunctionInvocationData,
    # Constants
    TYPE_HTTP_REQUEST,
    TYPE_INVOKE,
    SYSTEM_EVENT_RECEIVED,
    SYSTEM_FUNCTION_INVOKING,
    SYSTEM_FUNCTION_INVOKED,
    SYSTEM_FUNCTION_INVOCATION_FAILED,
    normalize_data,
)

from .eventtypes import EventType, EventTypeList

from .functions import (
    Function,
    FunctionList,
    Provider,
    ProviderType,
    WeightedFunction,
    choose_function,
)

from .subscriptions import (
    CORS,
    Subscription,
    SubscriptionList,
    SubscriptionType,
    normalize_path,
    subscription_id_for,
)

__all__ = [
    "BaseDTO",
    "DEFAULT_SPACE",
    "ErrorDetail",
    "ErrorResponse",
    # Events
    "EmitRequest",
    "CloudEvent",
    "HTTPRequestData",
    "HTTPResponse",
    "EventReceivedData",
    "FunctionInvocationData",
    "TYPE_HTTP_REQUEST",
    "TYPE_INVOKE",
    "SYSTEM_EVENT_RECEIVED",
    "SYSTEM_FUNCTION_INVOKING",
    "SYSTEM_FUNCTION_INVOKED",
    "SYSTEM_FUNCTION_INVOCATION_FAILED",
    "normalize_data",
    # Event types
    "EventType",
    "EventTypeList",
    # Functions
    "Function",
    "FunctionList",
    "Provider",
    "ProviderType",
    "WeightedFunction",
    "choose_function",
    # Subscriptions
    "CORS",
    "Subscription",
    "SubscriptionList",
    "SubscriptionType",
    "normalize_path",
    "subscription_id_for",
]
