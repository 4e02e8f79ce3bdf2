"""
Turns incoming HTTP requests into CloudEvents.

Four request shapes are understood, checked in this order:

1. Structured mode: ``Content-Type: application/cloudevents+json``, the body
   is a complete CloudEvent.
2. Binary mode: the CloudEvent attributes travel in ``CE-*`` headers and the
   body is the event data.
3. Legacy mode: an ``Event`` header names the event type and the body is the
   payload. This is what the SDK's ``emit`` sends.
4. Anything else is an ``http.request`` event describing the request.
"""
import json
import logging
from datetime import datetime
from email.message import Message
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from eventgateway_common import TYPE_HTTP_REQUEST, CloudEvent, HTTPRequestData
from eventgateway_common.events import (
    MIME_CLOUDEVENTS_JSON,
    MIME_JSON,
    MIME_OCTET_STREAM,
    normalize_data,
)

logger = logging.getLogger(__name__)

BINARY_MODE_HEADERS = ("ce-eventtype", "ce-cloudeventsversion", "ce-source", "ce-eventid")
EXTENSION_PREFIX = "ce-x-"


class EventParsingError(Exception):
    """Raised when a request cannot be turned into an event."""


def parse_media_type(content_type: Optional[str]) -> str:
    """Return the bare MIME type of a Content-Type header value."""
    if not content_type:
        return MIME_OCTET_STREAM
    message = Message()
    message["content-type"] = content_type
    return message.get_content_type()


def parse_request(
    method: str,
    headers: Mapping[str, str],
    body: bytes,
    path: str = "/",
    host: str = "",
    query: Optional[List[Tuple[str, str]]] = None,
) -> CloudEvent:
    """
    Build a CloudEvent from request parts.

    Args:
        method: HTTP method
        headers: Request headers (case-insensitive lookup is expected)
        body: Raw request body
        path: Request path, used for ``http.request`` events
        host: Host header value, used for ``http.request`` events
        query: Query string pairs, used for ``http.request`` events

    Raises:
        EventParsingError: If the request claims to carry a CloudEvent that is invalid
    """
    lowered = {key.lower(): value for key, value in headers.items()}
    mime_type = parse_media_type(lowered.get("content-type"))

    if mime_type == MIME_CLOUDEVENTS_JSON:
        return _parse_structured(body)

    if all(lowered.get(name) for name in BINARY_MODE_HEADERS):
        return _parse_binary(lowered, mime_type, body)

    event_type = lowered.get("event")
    if event_type:
        if mime_type == MIME_JSON:
            try:
                return _parse_structured(body)
            except EventParsingError:
                pass
        return CloudEvent.new(event_type, mime_type, body)

    query_params: Dict[str, List[str]] = {}
    for key, value in query or []:
        query_params.setdefault(key, []).append(value)

    data = HTTPRequestData(
        headers=dict(headers),
        query=query_params,
        body=normalize_data(mime_type, body),
        host=host,
        path=path,
        method=method.upper(),
    )
    return CloudEvent.new(TYPE_HTTP_REQUEST, MIME_JSON, data.model_dump(by_alias=True))


def _parse_structured(body: bytes) -> CloudEvent:
    try:
        payload = json.loads(body)
    except ValueError as e:
        raise EventParsingError(f"CloudEvent body is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise EventParsingError("CloudEvent body must be a JSON object")

    try:
        event = CloudEvent.model_validate(payload)
    except ValidationError as e:
        raise EventParsingError(f"CloudEvent validation error: {e.errors()[0]['msg']}") from e

    event.data = normalize_data(event.content_type, event.data)
    return event


def _parse_binary(headers: Dict[str, str], mime_type: str, body: bytes) -> CloudEvent:
    extensions: Dict[str, Any] = {}
    for key, value in headers.items():
        if key.startswith(EXTENSION_PREFIX) and len(key) > len(EXTENSION_PREFIX):
            extensions[key[len(EXTENSION_PREFIX):]] = value

    event_time = None
    if headers.get("ce-eventtime"):
        try:
            event_time = datetime.fromisoformat(headers["ce-eventtime"].replace("Z", "+00:00"))
        except ValueError:
            logger.debug(f"Ignoring malformed CE-EventTime: {headers['ce-eventtime']}")

    try:
        return CloudEvent(
            event_type=headers["ce-eventtype"],
            event_type_version=headers.get("ce-eventtypeversion") or None,
            cloud_events_version=headers["ce-cloudeventsversion"],
            source=headers["ce-source"],
            event_id=headers["ce-eventid"],
            event_time=event_time,
            schema_url=headers.get("ce-schemaurl") or None,
            content_type=mime_type,
            extensions=extensions or None,
            data=normalize_data(mime_type, body),
        )
    except ValidationError as e:
        raise EventParsingError(f"CloudEvent validation error: {e.errors()[0]['msg']}") from e
