"""
Tests for the configuration store.
"""
import pytest

from eventgateway_common import EventType, Function, Provider, Subscription, WeightedFunction
from gateway_service.store import (
    EventTypeAlreadyExistsError,
    EventTypeHasSubscriptionsError,
    EventTypeNotFoundError,
    FunctionAlreadyExistsError,
    FunctionHasSubscriptionsError,
    FunctionIsWeightedTargetError,
    FunctionNotFoundError,
    PathConflictError,
    SubscriptionAlreadyExistsError,
    SubscriptionNotFoundError,
    ValidationError,
)


def http_function(function_id, space="default"):
    return Function(
        space=space,
        function_id=function_id,
        provider=Provider(type="http", url=f"http://functions.local/{function_id}"),
    )


def weighted_function(function_id, *targets):
    return Function(
        function_id=function_id,
        provider=Provider(
            type="weighted",
            weighted=[WeightedFunction(function_id=target, weight=1) for target in targets],
        ),
    )


class TestEventTypes:
    """Tests for event type management."""
    
    async def test_create_and_get(self, store):
        await store.create_event_type(EventType(name="user.created"))
        
        event_type = await store.get_event_type("default", "user.created")
        assert event_type.name == "user.created"
        assert [et.name for et in await store.list_event_types("default")] == ["user.created"]
    
    async def test_duplicate(self, store):
        await store.create_event_type(EventType(name="user.created"))
        with pytest.raises(EventTypeAlreadyExistsError) as exc_info:
            await store.create_event_type(EventType(name="user.created"))
        assert exc_info.value.status_code == 409
    
    async def test_spaces_are_isolated(self, store):
        await store.create_event_type(EventType(space="team-a", name="user.created"))
        
        assert await store.list_event_types("team-b") == []
        with pytest.raises(EventTypeNotFoundError):
            await store.get_event_type("team-b", "user.created")
        # Same name is free in another space
        await store.create_event_type(EventType(space="team-b", name="user.created"))
    
    async def test_update_missing(self, store):
        with pytest.raises(EventTypeNotFoundError):
            await store.update_event_type(EventType(name="user.created"))
    
    async def test_delete(self, store):
        await store.create_event_type(EventType(name="user.created"))
        await store.delete_event_type("default", "user.created")
        assert store.event_type("default", "user.created") is None
    
    async def test_delete_in_use(self, store):
        await store.create_event_type(EventType(name="user.created"))
        await store.create_function(http_function("sendEmail"))
        await store.create_subscription(
            Subscription(type="async", event_type="user.created", function_id="sendEmail")
        )
        
        with pytest.raises(EventTypeHasSubscriptionsError):
            await store.delete_event_type("default", "user.created")


class TestFunctions:
    """Tests for function management."""
    
    async def test_create_and_get(self, store):
        await store.create_function(http_function("hello"))
        function = await store.get_function("default", "hello")
        assert function.provider.url == "http://functions.local/hello"
    
    async def test_duplicate(self, store):
        await store.create_function(http_function("hello"))
        with pytest.raises(FunctionAlreadyExistsError):
            await store.create_function(http_function("hello"))
    
    async def test_get_missing(self, store):
        with pytest.raises(FunctionNotFoundError) as exc_info:
            await store.get_function("default", "nope")
        assert exc_info.value.status_code == 404
    
    async def test_weighted_targets_must_exist(self, store):
        with pytest.raises(ValidationError):
            await store.create_function(weighted_function("split", "a", "b"))
        
        await store.create_function(http_function("a"))
        await store.create_function(http_function("b"))
        await store.create_function(weighted_function("split", "a", "b"))
    
    async def test_weighted_cannot_target_itself(self, store):
        await store.create_function(http_function("a"))
        await store.create_function(weighted_function("split", "a"))
        with pytest.raises(ValidationError):
            await store.update_function(weighted_function("split", "a", "split"))
    
    async def test_update(self, store):
        await store.create_function(http_function("hello"))
        updated = http_function("hello").model_copy(
            update={"provider": Provider(type="http", url="http://functions.local/v2")}
        )
        await store.update_function(updated)
        assert store.function("default", "hello").provider.url == "http://functions.local/v2"
    
    async def test_delete_in_use(self, store):
        await store.create_event_type(EventType(name="user.created"))
        await store.create_function(http_function("sendEmail"))
        await store.create_subscription(
            Subscription(type="async", event_type="user.created", function_id="sendEmail")
        )
        
        with pytest.raises(FunctionHasSubscriptionsError):
            await store.delete_function("default", "sendEmail")
    
    async def test_delete_weighted_target(self, store):
        await store.create_function(http_function("a"))
        await store.create_function(http_function("b"))
        await store.create_function(weighted_function("split", "a", "b"))
        
        with pytest.raises(FunctionIsWeightedTargetError) as exc_info:
            await store.delete_function("default", "b")
        assert exc_info.value.status_code == 400
        assert store.function("default", "b") is not None
        
        await store.delete_function("default", "split")
        await store.delete_function("default", "b")
        assert store.function("default", "b") is None


class TestSubscriptions:
    """Tests for subscription management and lookups."""
    
    @pytest.fixture
    async def seeded(self, store):
        await store.create_event_type(EventType(name="user.created"))
        await store.create_function(http_function("sendEmail"))
        await store.create_function(http_function("getUser"))
        return store
    
    async def test_requires_function(self, seeded):
        with pytest.raises(ValidationError):
            await seeded.create_subscription(
                Subscription(type="async", event_type="user.created", function_id="missing")
            )
    
    async def test_requires_event_type(self, seeded):
        with pytest.raises(ValidationError):
            await seeded.create_subscription(
                Subscription(type="async", event_type="user.deleted", function_id="sendEmail")
            )
    
    async def test_http_request_needs_no_event_type(self, seeded):
        subscription = await seeded.create_subscription(Subscription(
            type="sync", event_type="http.request", function_id="getUser",
            path="/users/:id", method="GET",
        ))
        assert await seeded.get_subscription("default", subscription.subscription_id) == subscription
    
    async def test_duplicate(self, seeded):
        subscription = Subscription(type="async", event_type="user.created", function_id="sendEmail")
        await seeded.create_subscription(subscription)
        with pytest.raises(SubscriptionAlreadyExistsError):
            await seeded.create_subscription(subscription)
    
    async def test_sync_path_conflict(self, seeded):
        await seeded.create_subscription(Subscription(
            type="sync", event_type="http.request", function_id="getUser",
            path="/users/:id", method="GET",
        ))
        with pytest.raises(PathConflictError) as exc_info:
            await seeded.create_subscription(Subscription(
                type="sync", event_type="http.request", function_id="sendEmail",
                path="/users/:name", method="GET",
            ))
        assert exc_info.value.status_code == 409
    
    async def test_same_path_other_method(self, seeded):
        await seeded.create_subscription(Subscription(
            type="sync", event_type="http.request", function_id="getUser",
            path="/users/:id", method="GET",
        ))
        await seeded.create_subscription(Subscription(
            type="sync", event_type="http.request", function_id="sendEmail",
            path="/users/:id", method="DELETE",
        ))
    
    async def test_update_function(self, seeded):
        subscription = await seeded.create_subscription(
            Subscription(type="async", event_type="user.created", function_id="sendEmail")
        )
        changed = subscription.model_copy(update={"function_id": "getUser"})
        await seeded.update_subscription(subscription.subscription_id, changed)
        
        stored = await seeded.get_subscription("default", subscription.subscription_id)
        assert stored.function_id == "getUser"
    
    async def test_update_cannot_change_routing(self, seeded):
        subscription = await seeded.create_subscription(
            Subscription(type="async", event_type="user.created", function_id="sendEmail")
        )
        moved = Subscription(
            type="async", event_type="user.created", function_id="sendEmail", path="/other"
        )
        with pytest.raises(ValidationError):
            await seeded.update_subscription(subscription.subscription_id, moved)
    
    async def test_delete(self, seeded):
        subscription = await seeded.create_subscription(
            Subscription(type="async", event_type="user.created", function_id="sendEmail")
        )
        await seeded.delete_subscription("default", subscription.subscription_id)
        with pytest.raises(SubscriptionNotFoundError):
            await seeded.get_subscription("default", subscription.subscription_id)
    
    async def test_async_subscribers_match_path(self, seeded):
        await seeded.create_subscription(Subscription(
            type="async", event_type="user.created", function_id="sendEmail", path="/crm/:region",
        ))
        
        assert len(seeded.async_subscribers("default", "user.created", "/crm/eu")) == 1
        assert seeded.async_subscribers("default", "user.created", "/") == []
        assert seeded.async_subscribers("other", "user.created", "/crm/eu") == []
    
    async def test_sync_subscriber_prefers_static_path(self, seeded):
        await seeded.create_subscription(Subscription(
            type="sync", event_type="http.request", function_id="getUser",
            path="/users/:id", method="GET",
        ))
        await seeded.create_subscription(Subscription(
            type="sync", event_type="http.request", function_id="sendEmail",
            path="/users/me", method="GET",
        ))
        
        subscription, params = seeded.sync_subscriber("default", "http.request", "GET", "/users/me")
        assert subscription.function_id == "sendEmail"
        assert params == {}
        
        subscription, params = seeded.sync_subscriber("default", "http.request", "GET", "/users/3")
        assert subscription.function_id == "getUser"
        assert params == {"id": "3"}
        
        assert seeded.sync_subscriber("default", "http.request", "POST", "/users/3") is None
