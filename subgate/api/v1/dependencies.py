from fastapi import Depends
from sqlalchemy.orm import Session

from subgate.core.database import get_db
from subgate.services.access_service import AccessService
from subgate.services.expiration_service import ExpirationService
from subgate.services.identity_service import IdentityLookup, get_identity_lookup
from subgate.services.notification_service import NotificationGateway, get_notification_gateway
from subgate.services.subscription_service import SubscriptionService
from subgate.services.subscription_store import SubscriptionStore


def get_subscription_service(
    db: Session = Depends(get_db),
    gateway: NotificationGateway = Depends(get_notification_gateway),
    identity_lookup: IdentityLookup = Depends(get_identity_lookup)
) -> SubscriptionService:
    """Dependency to get subscription service instance"""
    return SubscriptionService(SubscriptionStore(db), gateway, identity_lookup)


def get_access_service(db: Session = Depends(get_db)) -> AccessService:
    """Dependency to get access service instance"""
    return AccessService(SubscriptionStore(db))


def get_expiration_service(
    db: Session = Depends(get_db),
    gateway: NotificationGateway = Depends(get_notification_gateway),
    identity_lookup: IdentityLookup = Depends(get_identity_lookup)
) -> ExpirationService:
    """Dependency to get expiration service instance"""
    return ExpirationService(SubscriptionStore(db), gateway, identity_lookup)
