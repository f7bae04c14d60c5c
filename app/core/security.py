"""
Security utilities: PIN hashing, PIN generation and signed claims tokens
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings
from app.core.exceptions import MisconfigurationError, UnauthenticatedError

# PIN hashing context with explicit bcrypt configuration
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=10
)

PIN_LENGTH = 4


def generate_pin() -> str:
    """Uniform random 4-digit PIN, zero-padded"""
    return str(secrets.randbelow(10 ** PIN_LENGTH)).zfill(PIN_LENGTH)


def hash_pin(pin: str) -> str:
    return pwd_context.hash(pin)


def is_pin_hash(value: Optional[str]) -> bool:
    """True if value is a hash this context can verify (as opposed to a legacy plaintext PIN)"""
    if not value:
        return False
    return pwd_context.identify(value) is not None


def verify_pin(pin: str, pin_hash: str) -> bool:
    return pwd_context.verify(pin, pin_hash)


def _secret() -> str:
    if not settings.JWT_SECRET:
        raise MisconfigurationError("Missing JWT_SECRET")
    return settings.JWT_SECRET


def create_access_token(claims: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed claims token with the fixed account-token lifetime"""
    to_encode = claims.copy()
    now = datetime.now(timezone.utc)

    if expires_delta is None:
        expires_delta = timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)

    to_encode.update({"iat": now, "exp": now + expires_delta})
    return jwt.encode(to_encode, _secret(), algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> dict:
    """Verify signature and expiry, returning the decoded claims"""
    try:
        return jwt.decode(token, _secret(), algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise UnauthenticatedError("Token has expired")
    except JWTError:
        raise UnauthenticatedError("Invalid token")
