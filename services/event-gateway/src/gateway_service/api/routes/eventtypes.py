from fastapi import APIRouter, Path, Response, status

from eventgateway_common import EventType, EventTypeList
from eventgateway_common.models import SPACE_PATTERN

from ...services.gateway import gateway

router = APIRouter(prefix="/v1/spaces/{space}/eventtypes", tags=["Event Types"])

SpacePath = Path(..., pattern=SPACE_PATTERN, description="Space name")


@router.post("", response_model=EventType, status_code=status.HTTP_201_CREATED, response_model_exclude_none=True)
async def create_event_type(event_type: EventType, space: str = SpacePath) -> EventType:
    """Register an event type in a space."""
    return await gateway.store.create_event_type(event_type.model_copy(update={"space": space}))


@router.get("", response_model=EventTypeList)
async def list_event_types(space: str = SpacePath) -> EventTypeList:
    return EventTypeList(event_types=await gateway.store.list_event_types(space))


@router.get("/{name}", response_model=EventType, response_model_exclude_none=True)
async def get_event_type(name: str, space: str = SpacePath) -> EventType:
    return await gateway.store.get_event_type(space, name)


@router.put("/{name}", response_model=EventType, response_model_exclude_none=True)
async def update_event_type(name: str, event_type: EventType, space: str = SpacePath) -> EventType:
    return await gateway.store.update_event_type(
        event_type.model_copy(update={"space": space, "name": name})
    )


@router.delete("/{name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event_type(name: str, space: str = SpacePath) -> Response:
    """Delete an event type. Fails while subscriptions use it."""
    await gateway.store.delete_event_type(space, name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
