"""
Credential helpers: password hashing and bearer tokens.

Tokens carry the user id in ``sub`` and the account email in ``email``; the
decoded pair is the ``Identity`` every core operation receives.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from src.core.config import Settings
from src.core.exceptions import AuthenticationError
from src.utils.normalization import normalize_email

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(frozen=True)
class Identity:
    """Authenticated requester as seen by the core."""

    user_id: str
    email: str

    def __post_init__(self):
        object.__setattr__(self, "email", normalize_email(self.email) or "")


# --- password utils ----------------------------------------------------------


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


# --- JWT helpers -------------------------------------------------------------


def create_access_token(
    identity: Identity, settings: Settings, expires_delta: Optional[timedelta] = None
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    claims = {"sub": identity.user_id, "email": identity.email, "exp": expire}
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings) -> Identity:
    """
    Verify a bearer token and return the identity it carries.

    Raises:
        AuthenticationError: expired, tampered or incomplete token
    """
    try:
        claims = jwt.decode(
            token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm]
        )
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except JWTError:
        raise AuthenticationError("Invalid token")

    user_id = claims.get("sub")
    email = claims.get("email")
    if not user_id or not email:
        raise AuthenticationError("Invalid token")
    return Identity(user_id=user_id, email=email)
