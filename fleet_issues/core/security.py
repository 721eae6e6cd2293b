import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from uuid import UUID

from jose import jwt, JWTError
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError

from fleet_issues.core.config import Settings
from fleet_issues.models.enums import UserRole

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class Principal(BaseModel):
    """The authenticated identity behind a request, rebuilt from the token on every call."""

    id: UUID
    email: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(
    subject: Any,
    email: str,
    role: UserRole,
    settings: Settings,
    expires_delta: Optional[timedelta] = None,
) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {
        "sub": str(subject),
        "email": email,
        "role": UserRole(role).value,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> Optional[Principal]:
    """
    Verifies signature and expiry and returns the Principal.
    Any failure (bad signature, expired, malformed claims) returns None.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return Principal(id=payload["sub"], email=payload["email"], role=payload["role"])
    except (JWTError, ValidationError, KeyError) as e:
        logger.debug("Rejected session token: %s", e.__class__.__name__)
        return None


def generate_reset_token() -> str:
    # 32 random bytes -> 64 hex chars
    return secrets.token_hex(32)
