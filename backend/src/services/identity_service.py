"""Identity store: account registration, login and email resolution."""

import logging
from typing import Optional

from ..core.exceptions import AuthenticationError, ValidationError
from ..core.security import Identity, get_password_hash, verify_password
from ..models import User
from ..utils.normalization import is_valid_email, normalize_email, normalize_text
from .record_store import RecordStore

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


class IdentityService:
    """Maps emails to user identities."""

    def __init__(self, store: RecordStore):
        self.store = store

    def register_user(self, email: str, password: str, full_name: str) -> User:
        """
        Create an account.

        Raises:
            ValidationError: missing field, malformed email, short password
            ConflictError: email already registered
        """
        email = normalize_email(email)
        full_name = normalize_text(full_name)
        if not email or not password or not full_name:
            raise ValidationError("All fields are required", ["email", "password", "full_name"])
        if not is_valid_email(email):
            raise ValidationError("Email address is not valid", ["email"])
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters", ["password"]
            )

        user = self.store.create_user(email, get_password_hash(password), full_name)
        logger.info(f"Registered user {user.id}")
        return user

    def authenticate(self, email: str, password: str) -> User:
        """Check credentials; the same error is raised for unknown email and bad password."""
        if not email or not password:
            raise ValidationError("Email and password required", ["email", "password"])

        user = self.store.get_user_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid credentials")
        return user

    def resolve_email_to_user_id(self, email: str) -> Optional[str]:
        user = self.store.get_user_by_email(email)
        return user.id if user else None

    @staticmethod
    def identity_for(user: User) -> Identity:
        return Identity(user_id=user.id, email=user.email)
