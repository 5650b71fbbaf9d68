"""
Firebase service with dependency injection for better testability
"""

from typing import Protocol, Optional
import firebase_admin
from firebase_admin import credentials, auth
from subgate.core.config import settings
import logging

logger = logging.getLogger(__name__)


class FirebaseAuthProvider(Protocol):
    """Protocol for Firebase authentication operations"""

    def verify_id_token(self, token: str) -> dict:
        """Verify Firebase ID token"""
        ...


class FirebaseService:
    """Firebase service with dependency injection support"""

    def __init__(self, auth_provider: Optional[FirebaseAuthProvider] = None):
        self.auth_provider = auth_provider or auth
        self.logger = logging.getLogger(__name__)

    def verify_token(self, token: str) -> dict:
        """Verify Firebase JWT token and return decoded token"""
        self.logger.info("verify_token: Entry")

        try:
            decoded_token = self.auth_provider.verify_id_token(token)
            self.logger.info(f"verify_token: Success - {decoded_token.get('uid')}")
            return decoded_token
        except Exception as e:
            self.logger.error(f"verify_token: Failure - {e}")
            raise


# Global Firebase service instance
_firebase_service: Optional[FirebaseService] = None


def init_firebase():
    """Initialize Firebase Admin SDK"""
    logger.info("init_firebase: Entry")

    try:
        if not firebase_admin._apps:
            cred = credentials.Certificate(settings.firebase_credentials_path)
            firebase_admin.initialize_app(cred, {
                'projectId': settings.firebase_project_id,
            })
            logger.info("init_firebase: Success")
        else:
            logger.info("init_firebase: Already initialized")
    except Exception as e:
        logger.error(f"init_firebase: Failure - {e}")
        raise


def get_firebase_service() -> FirebaseService:
    """Get Firebase service instance (singleton)"""
    global _firebase_service
    if _firebase_service is None:
        _firebase_service = FirebaseService()
    return _firebase_service


def set_firebase_service(service: Optional[FirebaseService]):
    """Set Firebase service instance (for testing)"""
    global _firebase_service
    _firebase_service = service


def verify_firebase_token(token: str) -> dict:
    """Verify Firebase JWT token and return decoded token"""
    service = get_firebase_service()
    return service.verify_token(token)
