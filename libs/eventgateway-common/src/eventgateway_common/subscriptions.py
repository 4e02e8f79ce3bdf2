"""
Subscription DTOs.

A subscription binds an event type (and, for HTTP traffic, a path and method)
to a function. ``async`` subscriptions are fire-and-forget deliveries, ``sync``
subscriptions return the function's response to the emitter.
"""
import base64
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from .events import TYPE_HTTP_REQUEST
from .models import BaseDTO, DEFAULT_SPACE, IDENTIFIER_PATTERN, SPACE_PATTERN

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")


class SubscriptionType(str, Enum):
    ASYNC = "async"
    SYNC = "sync"


def normalize_path(path: str) -> str:
    """
    Validate a subscription path and strip its trailing slash.

    ``:name`` segments are parameters, a ``*name`` segment captures the rest
    of the path and has to be the last one.

    Raises:
        ValueError: If the path is malformed
    """
    if not path.startswith("/"):
        raise ValueError(f"path must start with '/': {path}")
    if len(path) > 1:
        path = path.rstrip("/") or "/"

    segments = [segment for segment in path.split("/") if segment]
    for index, segment in enumerate(segments):
        if segment[0] in ":*" and len(segment) == 1:
            raise ValueError(f"path parameter without a name: {path}")
        if segment[0] == "*" and index != len(segments) - 1:
            raise ValueError(f"wildcard parameter must be the last segment: {path}")
    return path


def subscription_id_for(
    subscription_type: SubscriptionType,
    event_type: str,
    path: str,
    method: str,
) -> str:
    """Derive the stable subscription ID from its routing attributes."""
    raw = f"{subscription_type.value},{event_type},{path},{method}"
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii").rstrip("=")


class CORS(BaseDTO):
    """CORS configuration for HTTP subscriptions."""
    origins: List[str] = Field(default_factory=lambda: ["*"], min_length=1)
    methods: List[str] = Field(default_factory=lambda: ["HEAD", "GET", "POST"], min_length=1)
    headers: List[str] = Field(
        default_factory=lambda: ["Origin", "Accept", "Content-Type"],
        min_length=1,
    )
    allow_credentials: bool = False


class Subscription(BaseDTO):
    """A subscription of a function to an event type."""
    space: str = Field(default=DEFAULT_SPACE, pattern=SPACE_PATTERN)
    subscription_id: Optional[str] = Field(
        default=None,
        description="Derived from type, event type, path and method",
    )
    type: SubscriptionType
    event_type: str = Field(..., min_length=1)
    function_id: str = Field(..., pattern=IDENTIFIER_PATTERN)
    path: str = "/"
    method: str = "POST"
    cors: Optional[CORS] = None

    @field_validator("method")
    @classmethod
    def check_method(cls, value: str) -> str:
        value = value.upper()
        if value not in HTTP_METHODS:
            raise ValueError(f"unsupported method: {value}")
        return value

    @field_validator("path")
    @classmethod
    def check_path(cls, value: str) -> str:
        return normalize_path(value)

    @model_validator(mode="after")
    def derive_id(self) -> "Subscription":
        if self.event_type == TYPE_HTTP_REQUEST and self.type != SubscriptionType.SYNC:
            raise ValueError("http.request subscriptions must be sync")
        self.subscription_id = subscription_id_for(
            self.type, self.event_type, self.path, self.method
        )
        return self


class SubscriptionList(BaseDTO):
    """Response body for listing subscriptions."""
    subscriptions: List[Subscription] = Field(default_factory=list)
