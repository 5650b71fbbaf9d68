from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
from subgate.core.config import settings
from subgate.core.exceptions import Unauthorized
from subgate.core.firebase import verify_firebase_token
import logging

logger = logging.getLogger(__name__)

# Missing credentials are reported by the dependencies below as 401
security = HTTPBearer(auto_error=False)


def _user_from_token(token: str) -> Optional[dict]:
    decoded_token = verify_firebase_token(token)
    user_id = decoded_token.get('uid')
    if not user_id:
        return None
    return {
        'uid': user_id,
        'email': decoded_token.get('email'),
        'token': decoded_token
    }


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> dict:
    """
    Dependency to get current authenticated user from Firebase token.
    Protects routes that require authentication.
    """
    logger.info("get_current_user: Entry")

    user = None
    if credentials is None:
        logger.warning("get_current_user: Failure - no credentials")
    else:
        try:
            user = _user_from_token(credentials.credentials)
        except Exception as e:
            logger.error(f"get_current_user: Failure - {e}")

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info(f"get_current_user: Success - {user['uid']}")
    return user


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[dict]:
    """
    Like get_current_user, but anonymous callers get None instead of a 401.
    Used where being logged out is an answer rather than an error.
    """
    if credentials is None:
        return None

    try:
        return _user_from_token(credentials.credentials)
    except Exception as e:
        logger.warning(f"get_optional_user: Invalid token - {e}")
        return None


def is_admin(current_user: dict) -> bool:
    """Admins are listed in ADMIN_EMAILS or carry the `admin` custom claim"""
    if current_user.get('token', {}).get('admin') is True:
        return True
    email = current_user.get('email')
    return bool(email) and email in settings.admin_emails


def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    """Dependency that rejects non-admin callers outright"""
    if not is_admin(current_user):
        logger.warning(f"require_admin: Unauthorized - user: {current_user.get('email')}")
        raise Unauthorized()
    return current_user
