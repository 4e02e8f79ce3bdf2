from fastapi import APIRouter, Path, Response, status

from eventgateway_common import Subscription, SubscriptionList
from eventgateway_common.models import SPACE_PATTERN

from ...services.gateway import gateway

router = APIRouter(prefix="/v1/spaces/{space}/subscriptions", tags=["Subscriptions"])

SpacePath = Path(..., pattern=SPACE_PATTERN, description="Space name")


@router.post("", response_model=Subscription, status_code=status.HTTP_201_CREATED, response_model_exclude_none=True)
async def create_subscription(subscription: Subscription, space: str = SpacePath) -> Subscription:
    """
    Subscribe a function to an event type.
    
    The subscription ID is derived from type, event type, path and method,
    so creating the same subscription twice is a conflict.
    """
    return await gateway.store.create_subscription(subscription.model_copy(update={"space": space}))


@router.get("", response_model=SubscriptionList, response_model_exclude_none=True)
async def list_subscriptions(space: str = SpacePath) -> SubscriptionList:
    return SubscriptionList(subscriptions=await gateway.store.list_subscriptions(space))


@router.get("/{subscription_id}", response_model=Subscription, response_model_exclude_none=True)
async def get_subscription(subscription_id: str, space: str = SpacePath) -> Subscription:
    return await gateway.store.get_subscription(space, subscription_id)


@router.put("/{subscription_id}", response_model=Subscription, response_model_exclude_none=True)
async def update_subscription(
    subscription_id: str,
    subscription: Subscription,
    space: str = SpacePath,
) -> Subscription:
    """Change the function or CORS settings of a subscription."""
    return await gateway.store.update_subscription(
        subscription_id,
        subscription.model_copy(update={"space": space}),
    )


@router.delete("/{subscription_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subscription(subscription_id: str, space: str = SpacePath) -> Response:
    await gateway.store.delete_subscription(space, subscription_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
