from fastapi import APIRouter, Path, Response, status

from eventgateway_common import Function, FunctionList
from eventgateway_common.models import SPACE_PATTERN

from ...services.gateway import gateway

router = APIRouter(prefix="/v1/spaces/{space}/functions", tags=["Functions"])

SpacePath = Path(..., pattern=SPACE_PATTERN, description="Space name")


@router.post("", response_model=Function, status_code=status.HTTP_201_CREATED, response_model_exclude_none=True)
async def register_function(function: Function, space: str = SpacePath) -> Function:
    """
    Register a function in a space.
    
    HTTP functions need a ``url``, weighted functions a non-empty ``weighted``
    list whose targets are already registered.
    """
    return await gateway.store.create_function(function.model_copy(update={"space": space}))


@router.get("", response_model=FunctionList, response_model_exclude_none=True)
async def list_functions(space: str = SpacePath) -> FunctionList:
    return FunctionList(functions=await gateway.store.list_functions(space))


@router.get("/{function_id}", response_model=Function, response_model_exclude_none=True)
async def get_function(function_id: str, space: str = SpacePath) -> Function:
    return await gateway.store.get_function(space, function_id)


@router.put("/{function_id}", response_model=Function, response_model_exclude_none=True)
async def update_function(function_id: str, function: Function, space: str = SpacePath) -> Function:
    """Replace the provider of a registered function."""
    return await gateway.store.update_function(
        function.model_copy(update={"space": space, "function_id": function_id})
    )


@router.delete("/{function_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_function(function_id: str, space: str = SpacePath) -> Response:
    """Delete a function. Fails while it is subscribed to an event."""
    await gateway.store.delete_function(space, function_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
