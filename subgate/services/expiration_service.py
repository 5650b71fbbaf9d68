import logging
from datetime import datetime

from subgate.core.database import SessionLocal
from subgate.core.exceptions import DeliveryFailure, NotFoundIdentity
from subgate.models.schemas import SweepResult
from subgate.services.identity_service import (IdentityLookup,
                                               get_identity_lookup)
from subgate.services.notification_service import (NotificationGateway,
                                                   get_notification_gateway)
from subgate.services.subscription_service import (EXPIRED_SUBJECT,
                                                   expired_message)
from subgate.services.subscription_store import SubscriptionStore

logger = logging.getLogger(__name__)


class ExpirationService:
    """Notifies owners of approved subscriptions whose expiry has passed"""

    def __init__(
        self,
        store: SubscriptionStore,
        gateway: NotificationGateway,
        identity_lookup: IdentityLookup
    ):
        self.store = store
        self.gateway = gateway
        self.identity_lookup = identity_lookup
        self.logger = logging.getLogger(__name__)

    def sweep(self, now: datetime) -> SweepResult:
        """
        Send one "Subscription Expired" email per expired approved record.

        Records are not modified and nothing marks them as notified, so a
        record that stays expired is reported again on every run. Never
        raises: a store failure yields an empty result for the next run to
        retry.
        """
        self.logger.info(f"sweep: Entry - now: {now.isoformat()}")
        result = SweepResult()

        try:
            expired = self.store.list_expired(now)
        except Exception as e:
            self.store.rollback()
            self.logger.error(f"sweep: Failure - could not load expired subscriptions: {e}")
            return result

        for subscription in expired:
            result.checked += 1
            try:
                identity = self.identity_lookup.resolve(subscription.user_id)
                self.gateway.send(
                    identity.email,
                    EXPIRED_SUBJECT,
                    expired_message(subscription.expiry_date)
                )
                result.notified += 1
            except NotFoundIdentity:
                result.skipped += 1
                self.logger.warning(
                    f"sweep: Skipped - subscription: {subscription.id}, user not found: {subscription.user_id}")
            except DeliveryFailure as e:
                result.failed += 1
                self.logger.error(
                    f"sweep: Delivery failed - subscription: {subscription.id}, error: {e}")
            except Exception as e:
                result.failed += 1
                self.logger.error(
                    f"sweep: Unexpected error - subscription: {subscription.id}, error: {e}")

        self.logger.info(
            f"sweep: Success - checked: {result.checked}, notified: {result.notified}, "
            f"skipped: {result.skipped}, failed: {result.failed}")
        return result


def run_expiration_sweep() -> SweepResult:
    """Entry point for the scheduler and cron: one sweep on a fresh session"""
    db = SessionLocal()
    try:
        service = ExpirationService(
            SubscriptionStore(db),
            get_notification_gateway(),
            get_identity_lookup()
        )
        return service.sweep(datetime.utcnow())
    finally:
        db.close()
