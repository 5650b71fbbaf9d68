"""
Domain errors raised by the subscription services.

Each error carries the HTTP status the API layer answers with.
"""


class SubscriptionError(Exception):
    """Base class for all subscription errors"""
    status_code = 400


class DuplicatePendingRequest(SubscriptionError):
    status_code = 409

    def __init__(self, user_id: str):
        super().__init__(f"A subscription request is already pending for user {user_id}")
        self.user_id = user_id


class DuplicateActiveSubscription(SubscriptionError):
    status_code = 409

    def __init__(self, user_id: str):
        super().__init__(f"User {user_id} already has an active subscription")
        self.user_id = user_id


class NotFound(SubscriptionError):
    status_code = 404

    def __init__(self, subscription_id: int):
        super().__init__(f"Subscription not found: {subscription_id}")
        self.subscription_id = subscription_id


class AlreadyApproved(SubscriptionError):
    status_code = 409

    def __init__(self, subscription_id: int):
        super().__init__(f"Subscription {subscription_id} is already approved")
        self.subscription_id = subscription_id


class Unauthorized(SubscriptionError):
    status_code = 403

    def __init__(self, detail: str = "Admin access required"):
        super().__init__(detail)


class DeliveryFailure(SubscriptionError):
    """Notification could not be delivered. Never surfaced to API callers."""
    status_code = 502


class NotFoundIdentity(SubscriptionError):
    """User id could not be resolved to a notification address."""
    status_code = 404

    def __init__(self, user_id: str):
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id
