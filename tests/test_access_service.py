"""
Tests for AccessService.evaluate_access
"""

from datetime import datetime, timedelta

import pytest

from subgate.models.schemas import AccessOutcome
from subgate.models.subscription import Subscription
from subgate.services.access_service import AccessService

NOW = datetime(2026, 3, 1, 12, 0, 0)


@pytest.fixture
def access_service(store):
    return AccessService(store)


def add_record(db_session, user_id="user_1", approved=True, start=None, expiry=None, package="Basic") -> Subscription:
    subscription = Subscription(
        user_id=user_id,
        package=package,
        approved=approved,
        start_date=start,
        expiry_date=expiry,
        invoice_url=''
    )
    db_session.add(subscription)
    db_session.commit()
    return subscription


class TestEvaluateAccess:
    """Test cases for the four access outcomes"""

    def test_not_authenticated(self, access_service):
        decision = access_service.evaluate_access(None, NOW)

        assert decision.outcome == AccessOutcome.NOT_AUTHENTICATED
        assert decision.message == "Please log in to view this content."
        assert decision.granted is False

    def test_no_records(self, access_service):
        decision = access_service.evaluate_access("user_1", NOW)

        assert decision.outcome == AccessOutcome.NO_ACTIVE_SUBSCRIPTION
        assert decision.message == "You do not have an active subscription."
        assert decision.subscription is None

    def test_pending_only_counts_as_no_subscription(self, access_service, db_session):
        add_record(db_session, approved=False)

        decision = access_service.evaluate_access("user_1", NOW)

        assert decision.outcome == AccessOutcome.NO_ACTIVE_SUBSCRIPTION

    def test_expired(self, access_service, db_session):
        add_record(db_session, start=NOW - timedelta(days=40), expiry=NOW - timedelta(days=10))

        decision = access_service.evaluate_access("user_1", NOW)

        assert decision.outcome == AccessOutcome.EXPIRED
        assert decision.message == "Your subscription has expired. Please renew to regain access."

    def test_granted(self, access_service, db_session):
        record = add_record(db_session, start=NOW, expiry=NOW + timedelta(days=30))

        decision = access_service.evaluate_access("user_1", NOW + timedelta(days=1))

        assert decision.outcome == AccessOutcome.GRANTED
        assert decision.granted is True
        assert decision.subscription.id == record.id

    def test_granted_at_exact_expiry(self, access_service, db_session):
        """Expiry equal to now still grants; only strictly earlier expires"""
        add_record(db_session, start=NOW - timedelta(days=30), expiry=NOW)

        decision = access_service.evaluate_access("user_1", NOW)

        assert decision.outcome == AccessOutcome.GRANTED

    def test_other_users_records_ignored(self, access_service, db_session):
        add_record(db_session, user_id="user_2", start=NOW, expiry=NOW + timedelta(days=30))

        decision = access_service.evaluate_access("user_1", NOW)

        assert decision.outcome == AccessOutcome.NO_ACTIVE_SUBSCRIPTION

    def test_repeated_evaluation_is_stable(self, access_service, db_session):
        add_record(db_session, start=NOW, expiry=NOW + timedelta(days=30))

        first = access_service.evaluate_access("user_1", NOW)
        second = access_service.evaluate_access("user_1", NOW)

        assert first == second


class TestTieBreak:
    """Only the highest-id approved record gates access"""

    def test_newer_live_record_wins_over_older_expired(self, access_service, db_session):
        add_record(db_session, start=NOW - timedelta(days=40), expiry=NOW - timedelta(days=10))
        newer = add_record(db_session, start=NOW, expiry=NOW + timedelta(days=30))

        decision = access_service.evaluate_access("user_1", NOW)

        assert decision.outcome == AccessOutcome.GRANTED
        assert decision.subscription.id == newer.id

    def test_newer_expired_record_wins_over_older_later_expiry(self, access_service, db_session):
        """An older record with a later expiry does not rescue the newest one"""
        add_record(db_session, start=NOW, expiry=NOW + timedelta(days=60))
        newer = add_record(db_session, start=NOW - timedelta(days=40), expiry=NOW - timedelta(days=10))

        decision = access_service.evaluate_access("user_1", NOW)

        assert decision.outcome == AccessOutcome.EXPIRED
        assert decision.subscription.id == newer.id

    def test_newer_pending_record_ignored(self, access_service, db_session):
        live = add_record(db_session, start=NOW, expiry=NOW + timedelta(days=30))
        add_record(db_session, approved=False)

        decision = access_service.evaluate_access("user_1", NOW)

        assert decision.outcome == AccessOutcome.GRANTED
        assert decision.subscription.id == live.id
