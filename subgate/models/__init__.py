from subgate.models.subscription import Subscription, Package
from subgate.models.schemas import (
    SubscriptionResponse,
    SubscriptionListItem,
    AccessOutcome,
    AccessDecision,
    SweepResult,
)

__all__ = ["Subscription", "Package", "SubscriptionResponse", "SubscriptionListItem", "AccessOutcome", "AccessDecision", "SweepResult"]
