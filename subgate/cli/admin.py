import click
from subgate.core.database import SessionLocal
from subgate.core.exceptions import SubscriptionError
from subgate.core.firebase import init_firebase
from subgate.models.subscription import Package
from subgate.services.expiration_service import ExpirationService
from subgate.services.identity_service import get_identity_lookup
from subgate.services.notification_service import get_notification_gateway
from subgate.services.subscription_service import SubscriptionService, DATE_FORMAT
from subgate.services.subscription_store import SubscriptionStore
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


def _fmt(value: datetime) -> str:
    return value.strftime(DATE_FORMAT) if value else '-'


def _subscription_service(db) -> SubscriptionService:
    return SubscriptionService(SubscriptionStore(db), get_notification_gateway(), get_identity_lookup())


@click.group()
def cli():
    """SubGate CLI commands"""
    # Identity lookups go through the Firebase Admin SDK
    init_firebase()


@cli.command()
def sweep():
    """Email every user whose approved subscription has expired (run daily from cron)"""
    db = SessionLocal()
    try:
        service = ExpirationService(SubscriptionStore(db), get_notification_gateway(), get_identity_lookup())
        result = service.sweep(datetime.utcnow())
        click.echo(
            f"✓ Sweep complete: {result.checked} expired, {result.notified} notified, "
            f"{result.skipped} skipped, {result.failed} failed")
    finally:
        db.close()


@cli.command('list')
@click.option('--invoices', is_flag=True, help='Only subscriptions with an invoice attached')
def list_subscriptions(invoices):
    """List subscriptions, newest first"""
    db = SessionLocal()
    try:
        service = _subscription_service(db)
        rows = service.list_invoices() if invoices else service.list_subscriptions()
        if not rows:
            click.echo("No subscriptions found")
            return
        click.echo(f"\nFound {len(rows)} subscriptions:\n")
        for sub in rows:
            line = (f"  - #{sub.id} {sub.user_display_name} ({sub.user_id}), {sub.package}, "
                    f"approved: {'yes' if sub.approved else 'no'}, "
                    f"start: {_fmt(sub.start_date)}, expiry: {_fmt(sub.expiry_date)}")
            if invoices:
                line += f", invoice: {sub.invoice_url}"
            click.echo(line)
    except Exception as e:
        db.rollback()
        logger.error(f"CLI error: {e}")
        click.echo(f"❌ Error: {e}", err=True)
    finally:
        db.close()


@cli.command()
@click.argument('subscription_id', type=int)
def approve(subscription_id):
    """Approve a pending subscription"""
    db = SessionLocal()
    try:
        subscription = _subscription_service(db).approve(subscription_id, datetime.utcnow())
        click.echo(f"✓ Approved subscription #{subscription.id}, active until {_fmt(subscription.expiry_date)}")
    except SubscriptionError as e:
        click.echo(f"❌ {e}", err=True)
    except Exception as e:
        db.rollback()
        logger.error(f"CLI error: {e}")
        click.echo(f"❌ Error: {e}", err=True)
    finally:
        db.close()


@cli.command()
@click.option('--user-id', 'user_id', required=True, help='User id (Firebase UID)')
@click.option('--package', required=True, type=click.Choice([p.value for p in Package]), help='Package name')
def add(user_id, package):
    """Add a subscription that is active immediately"""
    db = SessionLocal()
    try:
        subscription = _subscription_service(db).add_approved_subscription(user_id, package, datetime.utcnow())
        click.echo(f"✓ Added subscription #{subscription.id} for {user_id}, active until {_fmt(subscription.expiry_date)}")
    except SubscriptionError as e:
        click.echo(f"❌ {e}", err=True)
    except Exception as e:
        db.rollback()
        logger.error(f"CLI error: {e}")
        click.echo(f"❌ Error: {e}", err=True)
    finally:
        db.close()


@cli.command()
@click.argument('subscription_id', type=int)
@click.argument('invoice_url')
def invoice(subscription_id, invoice_url):
    """Attach an invoice link to a subscription"""
    db = SessionLocal()
    try:
        _subscription_service(db).attach_invoice(subscription_id, invoice_url)
        click.echo(f"✓ Invoice attached to subscription #{subscription_id}")
    except SubscriptionError as e:
        click.echo(f"❌ {e}", err=True)
    except Exception as e:
        db.rollback()
        logger.error(f"CLI error: {e}")
        click.echo(f"❌ Error: {e}", err=True)
    finally:
        db.close()


def main():
    logging.basicConfig(level=logging.INFO)
    cli()


if __name__ == '__main__':
    main()
