import logging
from datetime import datetime
from typing import Optional

from subgate.models.schemas import (AccessDecision, AccessOutcome,
                                    SubscriptionResponse)
from subgate.services.subscription_store import SubscriptionStore

logger = logging.getLogger(__name__)

MESSAGES = {
    AccessOutcome.NOT_AUTHENTICATED: "Please log in to view this content.",
    AccessOutcome.NO_ACTIVE_SUBSCRIPTION: "You do not have an active subscription.",
    AccessOutcome.EXPIRED: "Your subscription has expired. Please renew to regain access.",
    AccessOutcome.GRANTED: "",
}


class AccessService:
    def __init__(self, store: SubscriptionStore):
        self.store = store
        self.logger = logging.getLogger(__name__)

    def evaluate_access(self, user_id: Optional[str], now: datetime) -> AccessDecision:
        """
        Decide whether protected content renders for this user.

        Only the approved record with the highest id is considered, even when
        an older approved record expires later.
        """
        if user_id is None:
            return self._decision(AccessOutcome.NOT_AUTHENTICATED)

        subscription = self.store.latest_approved(user_id)
        if subscription is None:
            outcome = AccessOutcome.NO_ACTIVE_SUBSCRIPTION
        elif subscription.expiry_date < now:
            outcome = AccessOutcome.EXPIRED
        else:
            outcome = AccessOutcome.GRANTED

        self.logger.info(f"evaluate_access: user: {user_id}, outcome: {outcome.value}")
        return self._decision(
            outcome,
            SubscriptionResponse.model_validate(subscription) if subscription else None
        )

    def _decision(self, outcome: AccessOutcome, subscription: Optional[SubscriptionResponse] = None) -> AccessDecision:
        return AccessDecision(outcome=outcome, message=MESSAGES[outcome], subscription=subscription)
