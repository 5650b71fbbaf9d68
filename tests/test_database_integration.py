"""
Integration tests for SubscriptionStore against a real (SQLite) session
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy.orm import sessionmaker

from subgate.models.subscription import Subscription
from subgate.services.subscription_store import SubscriptionStore

NOW = datetime(2026, 3, 1, 12, 0, 0)


@pytest.mark.integration
class TestSubscriptionStore:
    """Integration tests for subscription persistence"""

    def test_ids_are_monotonic(self, store):
        first = store.add(Subscription(user_id="user_1", package="Basic"))
        second = store.add(Subscription(user_id="user_1", package="Premium"))

        assert second.id > first.id

    def test_defaults(self, store):
        subscription = store.add(Subscription(user_id="user_1", package="Basic"))

        assert subscription.approved is False
        assert subscription.invoice_url == ''
        assert subscription.start_date is None
        assert subscription.expiry_date is None

    def test_package_is_free_text(self, store):
        """The column does not constrain the package name"""
        subscription = store.add(Subscription(user_id="user_1", package="Legacy Gold"))

        assert store.get(subscription.id).package == "Legacy Gold"

    def test_mark_approved_only_once(self, store):
        subscription = store.add(Subscription(user_id="user_1", package="Basic"))

        assert store.mark_approved(subscription.id, NOW, NOW + timedelta(days=30)) is True
        assert store.mark_approved(subscription.id, NOW + timedelta(days=1), NOW + timedelta(days=31)) is False

        approved = store.get(subscription.id)
        assert approved.approved is True
        assert approved.start_date == NOW

    def test_concurrent_sessions_only_one_approval_wins(self, db_engine):
        """Two sessions that both saw the record pending: exactly one update lands"""
        Session = sessionmaker(autoflush=False, bind=db_engine)
        first_session, second_session = Session(), Session()
        try:
            first_store = SubscriptionStore(first_session)
            second_store = SubscriptionStore(second_session)
            subscription = first_store.add(Subscription(user_id="user_1", package="Basic"))

            assert second_store.get(subscription.id).approved is False

            results = [
                first_store.mark_approved(subscription.id, NOW, NOW + timedelta(days=30)),
                second_store.mark_approved(subscription.id, NOW, NOW + timedelta(days=30)),
            ]

            assert results == [True, False]
        finally:
            first_session.close()
            second_session.close()

    def test_mark_approved_unknown_id(self, store):
        assert store.mark_approved(12345, NOW, NOW + timedelta(days=30)) is False

    def test_find_active_excludes_expired(self, store):
        store.add(Subscription(user_id="user_1", package="Basic", approved=True,
                               start_date=NOW - timedelta(days=31), expiry_date=NOW - timedelta(days=1)))

        assert store.find_active("user_1", NOW) is None

    def test_list_expired(self, store):
        expired = store.add(Subscription(user_id="user_1", package="Basic", approved=True,
                                         start_date=NOW - timedelta(days=31), expiry_date=NOW - timedelta(days=1)))
        store.add(Subscription(user_id="user_2", package="Basic", approved=True,
                               start_date=NOW, expiry_date=NOW + timedelta(days=30)))
        store.add(Subscription(user_id="user_3", package="Basic"))

        assert [sub.id for sub in store.list_expired(NOW)] == [expired.id]
