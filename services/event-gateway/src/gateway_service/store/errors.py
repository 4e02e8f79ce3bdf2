"""
Errors raised by the configuration store.

Each error carries the HTTP status the Configuration API answers with.
"""


class StoreError(Exception):
    """Base exception for configuration store errors."""
    status_code = 400


class ValidationError(StoreError):
    status_code = 400


class EventTypeNotFoundError(StoreError):
    status_code = 404

    def __init__(self, name: str):
        super().__init__(f'Event Type "{name}" not found.')
        self.name = name


class EventTypeAlreadyExistsError(StoreError):
    status_code = 409

    def __init__(self, name: str):
        super().__init__(f'Event Type "{name}" already exists.')
        self.name = name


class EventTypeHasSubscriptionsError(StoreError):
    status_code = 400

    def __init__(self, name: str):
        super().__init__(f'Event type "{name}" cannot be deleted because there are subscriptions using it.')
        self.name = name


class FunctionNotFoundError(StoreError):
    status_code = 404

    def __init__(self, function_id: str):
        super().__init__(f'Function "{function_id}" not found.')
        self.function_id = function_id


class FunctionAlreadyExistsError(StoreError):
    status_code = 409

    def __init__(self, function_id: str):
        super().__init__(f'Function "{function_id}" already exists.')
        self.function_id = function_id


class FunctionHasSubscriptionsError(StoreError):
    status_code = 400

    def __init__(self, function_id: str):
        super().__init__(f'Function "{function_id}" cannot be deleted because it is subscribed to an event.')
        self.function_id = function_id


class FunctionIsWeightedTargetError(StoreError):
    status_code = 400

    def __init__(self, function_id: str, weighted_id: str):
        super().__init__(
            f'Function "{function_id}" cannot be deleted because weighted function "{weighted_id}" targets it.'
        )
        self.function_id = function_id
        self.weighted_id = weighted_id


class SubscriptionNotFoundError(StoreError):
    status_code = 404

    def __init__(self, subscription_id: str):
        super().__init__(f'Subscription "{subscription_id}" not found.')
        self.subscription_id = subscription_id


class SubscriptionAlreadyExistsError(StoreError):
    status_code = 409

    def __init__(self, subscription_id: str):
        super().__init__(f'Subscription "{subscription_id}" already exists.')
        self.subscription_id = subscription_id


class PathConflictError(StoreError):
    status_code = 409

    def __init__(self, path: str, existing: str):
        super().__init__(f'Path "{path}" conflicts with the already registered path "{existing}".')
        self.path = path
        self.existing = existing
