"""
Event DTOs for the Event Gateway.

Every piece of data that passes through the gateway is turned into a
CloudEvents v0.1 envelope (``CloudEvent``). Clients usually do not build
envelopes themselves: they emit a named event with a payload
(``EmitRequest``) and the gateway wraps it.
"""
import base64
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import Field

from .models import BaseDTO

# Revision of how the gateway transforms a request into a CloudEvent.
TRANSFORMATION_VERSION = "0.1"
CLOUD_EVENTS_VERSION = "0.1"
GATEWAY_SOURCE = (
    "https://serverless.com/event-gateway/#transformationVersion=" + TRANSFORMATION_VERSION
)

# Special event types
TYPE_HTTP_REQUEST = "http.request"
TYPE_INVOKE = "invoke"

# System events emitted by the gateway itself
SYSTEM_PREFIX = "gateway."
SYSTEM_EVENT_RECEIVED = "gateway.event.received"
SYSTEM_FUNCTION_INVOKING = "gateway.function.invoking"
SYSTEM_FUNCTION_INVOKED = "gateway.function.invoked"
SYSTEM_FUNCTION_INVOCATION_FAILED = "gateway.function.invocationFailed"

MIME_JSON = "application/json"
MIME_CLOUDEVENTS_JSON = "application/cloudevents+json"
MIME_FORM_MULTIPART = "multipart/form-data"
MIME_FORM_URLENCODED = "application/x-www-form-urlencoded"
MIME_OCTET_STREAM = "application/octet-stream"


def normalize_data(content_type: Optional[str], payload: Any) -> Any:
    """
    Turn a raw request body into a JSON-friendly value.

    JSON bodies are decoded, form bodies are kept as text, anything else is
    decoded as UTF-8 when possible and base64 encoded otherwise.
    """
    if not isinstance(payload, (bytes, bytearray)):
        return payload
    if not payload:
        return None

    content_type = content_type or ""
    if content_type == MIME_JSON or content_type.endswith("+json"):
        try:
            return json.loads(payload)
        except ValueError:
            pass

    try:
        return bytes(payload).decode("utf-8")
    except UnicodeDecodeError:
        return base64.b64encode(bytes(payload)).decode("ascii")


class EmitRequest(BaseDTO):
    """
    The envelope a client emits: a named event and its payload.

    Example:
        EmitRequest(event="user.created", data={"username": "sls-fan"})
    """
    event: str = Field(..., min_length=1, description="Event type name")
    data: Any = Field(default=None, description="Event payload")


class CloudEvent(BaseDTO):
    """
    CloudEvents v0.1 envelope used for every event routed by the gateway.

    Fields:
        event_type: Type of the event (e.g., "user.created")
        cloud_events_version: CloudEvents version
        source: URI of the event producer
        event_id: Unique identifier for this event (UUID)
        event_time: When the event was created
        content_type: MIME type of ``data``
        extensions: Additional attributes (the gateway adds its own)
        data: The event payload
    """
    event_type: str = Field(..., min_length=1)
    event_type_version: Optional[str] = None
    cloud_events_version: str = Field(default=CLOUD_EVENTS_VERSION, min_length=1)
    source: str = Field(..., min_length=1)
    event_id: str = Field(default_factory=lambda: str(uuid4()), alias="eventID", min_length=1)
    event_time: Optional[datetime] = Field(default_factory=lambda: datetime.now(timezone.utc))
    schema_url: Optional[str] = Field(default=None, alias="schemaURL")
    content_type: Optional[str] = None
    extensions: Optional[Dict[str, Any]] = None
    data: Any = None

    @classmethod
    def new(cls, event_type: str, content_type: Optional[str], payload: Any) -> "CloudEvent":
        """Create a gateway-transformed event from a raw payload."""
        return cls(
            event_type=event_type,
            source=GATEWAY_SOURCE,
            content_type=content_type,
            data=normalize_data(content_type, payload),
            extensions={
                "eventgateway": {
                    "transformed": True,
                    "transformation-version": TRANSFORMATION_VERSION,
                },
            },
        )

    @property
    def is_system(self) -> bool:
        """Whether the event is one of the gateway's own system events."""
        return self.event_type.startswith(SYSTEM_PREFIX)

    def to_message(self) -> Dict[str, Any]:
        """Serialize to the JSON-compatible dict sent to functions and the bus."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class HTTPRequestData(BaseDTO):
    """Payload of an ``http.request`` event."""
    headers: Dict[str, str] = Field(default_factory=dict)
    query: Dict[str, List[str]] = Field(default_factory=dict)
    body: Any = None
    host: str = ""
    path: str = "/"
    method: str = "GET"
    params: Dict[str, str] = Field(default_factory=dict)


class HTTPResponse(BaseDTO):
    """Response a function returns for a sync HTTP subscription."""
    status_code: int = Field(default=200, ge=100, le=599)
    headers: Dict[str, str] = Field(default_factory=dict)
    body: str = ""


class EventReceivedData(BaseDTO):
    """Payload of the ``gateway.event.received`` system event."""
    path: str
    event: Dict[str, Any]
    headers: Dict[str, str] = Field(default_factory=dict)


class FunctionInvocationData(BaseDTO):
    """Payload of the ``gateway.function.*`` system events."""
    space: str
    function_id: str
    event: Dict[str, Any]
    error: Optional[str] = None
