from pydantic import BaseModel
from datetime import datetime
from typing import Optional
import enum


class SubscriptionResponse(BaseModel):
    """Pydantic model for subscription API response"""
    id: int
    user_id: str
    package: str
    start_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    approved: bool
    invoice_url: str = ''

    class Config:
        from_attributes = True


class SubscriptionListItem(SubscriptionResponse):
    """Admin list row: subscription plus the owner's display name"""
    user_display_name: str


class AccessOutcome(str, enum.Enum):
    NOT_AUTHENTICATED = "not_authenticated"
    NO_ACTIVE_SUBSCRIPTION = "no_active_subscription"
    EXPIRED = "expired"
    GRANTED = "granted"


class AccessDecision(BaseModel):
    outcome: AccessOutcome
    message: str = ''
    subscription: Optional[SubscriptionResponse] = None

    @property
    def granted(self) -> bool:
        return self.outcome == AccessOutcome.GRANTED


class SweepResult(BaseModel):
    """Counts from one expiration sweep"""
    checked: int = 0
    notified: int = 0
    skipped: int = 0
    failed: int = 0
