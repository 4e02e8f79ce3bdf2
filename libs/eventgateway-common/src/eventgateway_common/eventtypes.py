"""
Event type DTOs.

An event type has to be registered in a space before subscriptions can be
created for it. Names are unique per space.
"""
from typing import List

from pydantic import Field

from .models import BaseDTO, DEFAULT_SPACE, SPACE_PATTERN


class EventType(BaseDTO):
    """A registered event type."""
    space: str = Field(
        default=DEFAULT_SPACE,
        pattern=SPACE_PATTERN,
        description="Space the event type belongs to",
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Event type name (e.g., 'user.created')",
    )


class EventTypeList(BaseDTO):
    """Response body for listing event types."""
    event_types: List[EventType] = Field(default_factory=list)
