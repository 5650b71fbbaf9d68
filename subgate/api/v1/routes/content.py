import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from subgate.api.v1.dependencies import get_access_service
from subgate.core.middleware import get_optional_user
from subgate.services.access_service import AccessService

router = APIRouter()
logger = logging.getLogger(__name__)


class RenderRequest(BaseModel):
    content: str


def _user_id(current_user: Optional[dict]) -> Optional[str]:
    return current_user['uid'] if current_user else None


@router.get("/access")
def get_access(
    current_user: Optional[dict] = Depends(get_optional_user),
    access_service: AccessService = Depends(get_access_service)
):
    """
    Report whether protected content would render for the caller.
    Anonymous callers get the login prompt, never a 401.
    """
    user_id = _user_id(current_user)
    logger.info(f"get_access: Entry - user: {user_id}")

    try:
        decision = access_service.evaluate_access(user_id, datetime.utcnow())
        return {
            "outcome": decision.outcome.value,
            "granted": decision.granted,
            "message": decision.message,
            "subscription": decision.subscription
        }
    except Exception as e:
        logger.error(f"get_access: Failure - {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )


@router.post("/render")
def render_protected_content(
    request: RenderRequest,
    current_user: Optional[dict] = Depends(get_optional_user),
    access_service: AccessService = Depends(get_access_service)
):
    """
    Wrap a piece of protected content: the content itself when access is
    granted, otherwise the explanatory message in its place.
    """
    user_id = _user_id(current_user)
    logger.info(f"render_protected_content: Entry - user: {user_id}")

    try:
        decision = access_service.evaluate_access(user_id, datetime.utcnow())
        return {
            "outcome": decision.outcome.value,
            "granted": decision.granted,
            "content": request.content if decision.granted else decision.message
        }
    except Exception as e:
        logger.error(f"render_protected_content: Failure - {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )
