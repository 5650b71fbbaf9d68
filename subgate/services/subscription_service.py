import logging
from datetime import datetime, timedelta

from subgate.core.exceptions import (AlreadyApproved,
                                     DeliveryFailure,
                                     DuplicateActiveSubscription,
                                     DuplicatePendingRequest, NotFound,
                                     NotFoundIdentity)
from subgate.models.schemas import SubscriptionListItem, SubscriptionResponse
from subgate.models.subscription import Subscription
from subgate.services.identity_service import IdentityLookup
from subgate.services.notification_service import NotificationGateway
from subgate.services.subscription_store import SubscriptionStore

logger = logging.getLogger(__name__)

SUBSCRIPTION_PERIOD = timedelta(days=30)
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
UNKNOWN_USER = 'Unknown'

APPROVED_SUBJECT = 'Subscription Approved'
EXPIRED_SUBJECT = 'Subscription Expired'


def approved_message(expiry_date: datetime) -> str:
    return f"Your subscription has been approved and is active until {expiry_date.strftime(DATE_FORMAT)}"


def expired_message(expiry_date: datetime) -> str:
    return f"Your subscription expired on {expiry_date.strftime(DATE_FORMAT)}. Please renew your subscription."


class SubscriptionService:
    """Creates, approves and lists manually approved subscriptions"""

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

    def request_subscription(self, user_id: str, package: str, now: datetime) -> Subscription:
        """Create a pending request; one pending request per user at a time"""
        self.logger.info(
            f"request_subscription: Entry - user: {user_id}, package: {package}")

        try:
            if self.store.find_pending(user_id):
                raise DuplicatePendingRequest(user_id)

            subscription = self.store.add(Subscription(
                user_id=user_id,
                package=package,
                approved=False,
                invoice_url=''
            ))

            self.logger.info(
                f"request_subscription: Success - user: {user_id}, subscription: {subscription.id}, at: {now.isoformat()}")
            return subscription
        except Exception as e:
            self.store.rollback()
            self.logger.error(f"request_subscription: Failure - {e}")
            raise

    def add_approved_subscription(self, user_id: str, package: str, now: datetime) -> Subscription:
        """Admin shortcut: insert a record that is active from now"""
        self.logger.info(
            f"add_approved_subscription: Entry - user: {user_id}, package: {package}")

        try:
            if self.store.find_active(user_id, now):
                raise DuplicateActiveSubscription(user_id)

            subscription = self.store.add(Subscription(
                user_id=user_id,
                package=package,
                start_date=now,
                expiry_date=now + SUBSCRIPTION_PERIOD,
                approved=True,
                invoice_url=''
            ))
        except Exception as e:
            self.store.rollback()
            self.logger.error(f"add_approved_subscription: Failure - {e}")
            raise

        self._notify(subscription.user_id, APPROVED_SUBJECT,
                     approved_message(subscription.expiry_date))
        self.logger.info(
            f"add_approved_subscription: Success - user: {user_id}, subscription: {subscription.id}")
        return subscription

    def approve(self, subscription_id: int, now: datetime) -> Subscription:
        """Move a pending subscription to active; a second approval is rejected"""
        self.logger.info(f"approve: Entry - subscription: {subscription_id}")

        try:
            subscription = self.store.get(subscription_id)
            if not subscription:
                raise NotFound(subscription_id)
            if subscription.approved:
                raise AlreadyApproved(subscription_id)

            if not self.store.mark_approved(subscription_id, now, now + SUBSCRIPTION_PERIOD):
                # Lost the race against a concurrent approval
                raise AlreadyApproved(subscription_id)

            subscription = self.store.get(subscription_id)
        except Exception as e:
            self.store.rollback()
            self.logger.error(f"approve: Failure - {e}")
            raise

        self._notify(subscription.user_id, APPROVED_SUBJECT,
                     approved_message(subscription.expiry_date))
        self.logger.info(
            f"approve: Success - subscription: {subscription_id}, expires: {subscription.expiry_date.isoformat()}")
        return subscription

    def attach_invoice(self, subscription_id: int, invoice_url: str) -> Subscription:
        """Set (or clear, with an empty string) the invoice link of a subscription"""
        self.logger.info(f"attach_invoice: Entry - subscription: {subscription_id}")

        try:
            subscription = self.store.get(subscription_id)
            if not subscription:
                raise NotFound(subscription_id)

            subscription = self.store.set_invoice_url(subscription, invoice_url or '')
            self.logger.info(f"attach_invoice: Success - subscription: {subscription_id}")
            return subscription
        except Exception as e:
            self.store.rollback()
            self.logger.error(f"attach_invoice: Failure - {e}")
            raise

    def list_subscriptions(self) -> list[SubscriptionListItem]:
        self.logger.info("list_subscriptions: Entry")
        result = self._with_display_names(self.store.list_all())
        self.logger.info(f"list_subscriptions: Success - count: {len(result)}")
        return result

    def list_invoices(self) -> list[SubscriptionListItem]:
        self.logger.info("list_invoices: Entry")
        result = self._with_display_names(self.store.list_with_invoice())
        self.logger.info(f"list_invoices: Success - count: {len(result)}")
        return result

    def list_user_subscriptions(self, user_id: str) -> list[SubscriptionResponse]:
        self.logger.info(f"list_user_subscriptions: Entry - user: {user_id}")
        return [SubscriptionResponse.model_validate(sub)
                for sub in self.store.list_for_user(user_id)]

    def _with_display_names(self, subscriptions: list[Subscription]) -> list[SubscriptionListItem]:
        names: dict[str, str] = {}
        items = []
        for sub in subscriptions:
            if sub.user_id not in names:
                try:
                    names[sub.user_id] = self.identity_lookup.resolve(sub.user_id).display_name
                except NotFoundIdentity:
                    names[sub.user_id] = UNKNOWN_USER
                except Exception as e:
                    self.logger.warning(
                        f"_with_display_names: Lookup failed - user: {sub.user_id}, error: {e}")
                    names[sub.user_id] = UNKNOWN_USER
            items.append(SubscriptionListItem(
                **SubscriptionResponse.model_validate(sub).model_dump(),
                user_display_name=names[sub.user_id]
            ))
        return items

    def _notify(self, user_id: str, subject: str, body: str) -> bool:
        """Best-effort notification; failures are logged, never raised"""
        try:
            identity = self.identity_lookup.resolve(user_id)
            self.gateway.send(identity.email, subject, body)
            return True
        except NotFoundIdentity:
            self.logger.warning(f"_notify: Skipped - no identity for user: {user_id}")
        except DeliveryFailure as e:
            self.logger.error(f"_notify: Delivery failed - user: {user_id}, error: {e}")
        except Exception as e:
            # Notification failures must not undo the write that triggered them
            self.logger.error(f"_notify: Failure - user: {user_id}, error: {e}")
        return False
