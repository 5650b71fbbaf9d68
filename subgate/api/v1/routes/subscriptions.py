import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from subgate.api.v1.dependencies import get_subscription_service
from subgate.core.exceptions import SubscriptionError
from subgate.core.middleware import get_current_user
from subgate.models.schemas import SubscriptionResponse
from subgate.models.subscription import Package
from subgate.services.subscription_service import SubscriptionService

router = APIRouter()
logger = logging.getLogger(__name__)


class SubscriptionRequest(BaseModel):
    package: Package


@router.post("/request", status_code=status.HTTP_201_CREATED)
def request_subscription(
    request: SubscriptionRequest,
    current_user: dict = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(
        get_subscription_service)
):
    """
    Submit a subscription request for admin approval.
    Requires authentication.
    """
    user_id = current_user['uid']
    logger.info(
        f"request_subscription: Entry - user: {user_id}, package: {request.package.value}")

    try:
        subscription = subscription_service.request_subscription(
            user_id, request.package.value, datetime.utcnow())
        logger.info(
            f"request_subscription: Success - user: {user_id}, subscription: {subscription.id}")
        return {
            "subscription": SubscriptionResponse.model_validate(subscription),
            "message": "Subscription request submitted. An administrator will review it shortly."
        }
    except SubscriptionError as e:
        logger.error(f"request_subscription: {type(e).__name__} - {e}")
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except Exception as e:
        logger.error(f"request_subscription: Failure - {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )


@router.get("/mine")
def list_my_subscriptions(
    current_user: dict = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(
        get_subscription_service)
):
    """
    List the current user's subscriptions, newest first.
    Requires authentication.
    """
    user_id = current_user['uid']
    logger.info(f"list_my_subscriptions: Entry - user: {user_id}")

    try:
        subscriptions = subscription_service.list_user_subscriptions(user_id)
        logger.info(
            f"list_my_subscriptions: Success - user: {user_id}, count: {len(subscriptions)}")
        return {"subscriptions": subscriptions}
    except Exception as e:
        logger.error(f"list_my_subscriptions: Failure - {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )
