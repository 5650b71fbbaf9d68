import logging
from typing import Optional, Protocol

from firebase_admin import auth
from pydantic import BaseModel

from subgate.core.exceptions import NotFoundIdentity

logger = logging.getLogger(__name__)


class Identity(BaseModel):
    display_name: str
    email: str


class IdentityLookup(Protocol):
    def resolve(self, user_id: str) -> Identity:
        """Return the user's name and email, or raise NotFoundIdentity"""
        ...


class FirebaseIdentityLookup:
    """Resolves Firebase UIDs through the Admin SDK user directory"""

    def __init__(self, auth_provider=None):
        self.auth_provider = auth_provider or auth
        self.logger = logging.getLogger(__name__)

    def resolve(self, user_id: str) -> Identity:
        self.logger.info(f"resolve: Entry - user: {user_id}")

        try:
            record = self.auth_provider.get_user(user_id)
        except (auth.UserNotFoundError, ValueError) as e:
            self.logger.warning(f"resolve: Not found - user: {user_id}, error: {e}")
            raise NotFoundIdentity(user_id) from e

        if not record.email:
            self.logger.warning(f"resolve: No email - user: {user_id}")
            raise NotFoundIdentity(user_id)

        identity = Identity(
            display_name=record.display_name or record.email,
            email=record.email
        )
        self.logger.info(f"resolve: Success - user: {user_id}")
        return identity


_identity_lookup: Optional[IdentityLookup] = None


def get_identity_lookup() -> IdentityLookup:
    """Get identity lookup instance (singleton)"""
    global _identity_lookup
    if _identity_lookup is None:
        _identity_lookup = FirebaseIdentityLookup()
    return _identity_lookup
