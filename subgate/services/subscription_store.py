from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from subgate.models.subscription import Subscription


class SubscriptionStore:
    """Persistence for manual subscription records (one table, no deletes)"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, subscription: Subscription) -> Subscription:
        self.db.add(subscription)
        self.db.commit()
        self.db.refresh(subscription)
        return subscription

    def get(self, subscription_id: int) -> Optional[Subscription]:
        return self.db.query(Subscription).filter(
            Subscription.id == subscription_id).first()

    def find_pending(self, user_id: str) -> Optional[Subscription]:
        return self.db.query(Subscription).filter(
            Subscription.user_id == user_id,
            Subscription.approved == False
        ).first()

    def find_active(self, user_id: str, now: datetime) -> Optional[Subscription]:
        """Approved record whose expiry has not passed"""
        return self.db.query(Subscription).filter(
            Subscription.user_id == user_id,
            Subscription.approved == True,
            Subscription.expiry_date >= now
        ).first()

    def latest_approved(self, user_id: str) -> Optional[Subscription]:
        """Highest-id approved record; later expiry on an older record does not count"""
        return self.db.query(Subscription).filter(
            Subscription.user_id == user_id,
            Subscription.approved == True
        ).order_by(Subscription.id.desc()).first()

    def mark_approved(self, subscription_id: int, start_date: datetime, expiry_date: datetime) -> bool:
        """
        Approve a pending record with a conditional update.
        Returns False if the record was already approved (or vanished), so
        only one of two racing approvals wins.
        """
        rows = self.db.query(Subscription).filter(
            Subscription.id == subscription_id,
            Subscription.approved == False
        ).update({
            Subscription.approved: True,
            Subscription.start_date: start_date,
            Subscription.expiry_date: expiry_date,
        }, synchronize_session=False)
        self.db.commit()
        return rows == 1

    def set_invoice_url(self, subscription: Subscription, invoice_url: str) -> Subscription:
        subscription.invoice_url = invoice_url
        self.db.commit()
        self.db.refresh(subscription)
        return subscription

    def list_all(self) -> list[Subscription]:
        return self.db.query(Subscription).order_by(Subscription.id.desc()).all()

    def list_with_invoice(self) -> list[Subscription]:
        return self.db.query(Subscription).filter(
            Subscription.invoice_url != ''
        ).order_by(Subscription.id.desc()).all()

    def list_for_user(self, user_id: str) -> list[Subscription]:
        return self.db.query(Subscription).filter(
            Subscription.user_id == user_id
        ).order_by(Subscription.id.desc()).all()

    def list_expired(self, now: datetime) -> list[Subscription]:
        return self.db.query(Subscription).filter(
            Subscription.approved == True,
            Subscription.expiry_date < now
        ).order_by(Subscription.id).all()

    def rollback(self):
        self.db.rollback()
