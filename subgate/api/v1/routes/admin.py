from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from datetime import datetime
from subgate.api.v1.dependencies import get_expiration_service, get_subscription_service
from subgate.core.exceptions import SubscriptionError
from subgate.core.middleware import require_admin
from subgate.models.schemas import SubscriptionResponse
from subgate.models.subscription import Package
from subgate.services.expiration_service import ExpirationService
from subgate.services.subscription_service import SubscriptionService
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


class AddSubscriptionRequest(BaseModel):
    user_id: str
    package: Package


class InvoiceRequest(BaseModel):
    invoice_url: str


@router.get("/subscriptions")
def list_subscriptions(
    current_user: dict = Depends(require_admin),
    subscription_service: SubscriptionService = Depends(get_subscription_service)
):
    """
    List every subscription, newest first, with the owner's display name.
    Only admins can use this endpoint.
    """
    logger.info("list_subscriptions: Entry")

    try:
        subscriptions = subscription_service.list_subscriptions()
        logger.info(f"list_subscriptions: Success - count: {len(subscriptions)}")
        return {"count": len(subscriptions), "subscriptions": subscriptions}
    except Exception as e:
        logger.error(f"list_subscriptions: Failure - {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )


@router.get("/invoices")
def list_invoices(
    current_user: dict = Depends(require_admin),
    subscription_service: SubscriptionService = Depends(get_subscription_service)
):
    """
    List subscriptions that have an invoice attached.
    Only admins can use this endpoint.
    """
    logger.info("list_invoices: Entry")

    try:
        invoices = subscription_service.list_invoices()
        logger.info(f"list_invoices: Success - count: {len(invoices)}")
        return {"count": len(invoices), "invoices": invoices}
    except Exception as e:
        logger.error(f"list_invoices: Failure - {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )


@router.post("/subscriptions", status_code=status.HTTP_201_CREATED)
def add_approved_subscription(
    request: AddSubscriptionRequest,
    current_user: dict = Depends(require_admin),
    subscription_service: SubscriptionService = Depends(get_subscription_service)
):
    """
    Add a subscription that is active immediately, skipping the request step.
    Only admins can use this endpoint.
    """
    logger.info(
        f"add_approved_subscription: Entry - user: {request.user_id}, package: {request.package.value}")

    try:
        subscription = subscription_service.add_approved_subscription(
            request.user_id, request.package.value, datetime.utcnow())
        logger.info(f"add_approved_subscription: Success - subscription: {subscription.id}")
        return {
            "subscription": SubscriptionResponse.model_validate(subscription),
            "message": "Subscription added and approved"
        }
    except SubscriptionError as e:
        logger.error(f"add_approved_subscription: {type(e).__name__} - {e}")
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"add_approved_subscription: Failure - {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )


@router.post("/subscriptions/{subscription_id}/approve")
def approve_subscription(
    subscription_id: int,
    current_user: dict = Depends(require_admin),
    subscription_service: SubscriptionService = Depends(get_subscription_service)
):
    """
    Approve a pending subscription; it runs for 30 days from now.
    Only admins can use this endpoint.
    """
    logger.info(
        f"approve_subscription: Entry - subscription: {subscription_id}, admin: {current_user.get('email')}")

    try:
        subscription = subscription_service.approve(subscription_id, datetime.utcnow())
        logger.info(f"approve_subscription: Success - subscription: {subscription_id}")
        return {
            "subscription": SubscriptionResponse.model_validate(subscription),
            "message": "Subscription approved"
        }
    except SubscriptionError as e:
        logger.error(f"approve_subscription: {type(e).__name__} - {e}")
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"approve_subscription: Failure - {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )


@router.put("/subscriptions/{subscription_id}/invoice")
def attach_invoice(
    subscription_id: int,
    request: InvoiceRequest,
    current_user: dict = Depends(require_admin),
    subscription_service: SubscriptionService = Depends(get_subscription_service)
):
    """
    Attach an invoice link to a subscription (empty string removes it).
    Only admins can use this endpoint.
    """
    logger.info(f"attach_invoice: Entry - subscription: {subscription_id}")

    try:
        subscription = subscription_service.attach_invoice(subscription_id, request.invoice_url)
        logger.info(f"attach_invoice: Success - subscription: {subscription_id}")
        return {"subscription": SubscriptionResponse.model_validate(subscription)}
    except SubscriptionError as e:
        logger.error(f"attach_invoice: {type(e).__name__} - {e}")
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"attach_invoice: Failure - {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )


@router.post("/sweep")
def run_sweep(
    current_user: dict = Depends(require_admin),
    expiration_service: ExpirationService = Depends(get_expiration_service)
):
    """
    Run the expiration sweep now instead of waiting for the daily trigger.
    Only admins can use this endpoint.
    """
    logger.info(f"run_sweep: Entry - admin: {current_user.get('email')}")
    result = expiration_service.sweep(datetime.utcnow())
    return result
