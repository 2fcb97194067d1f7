import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from storefront.core.config import settings

# CryptContext handles password hashing using bcrypt
# Rounds are configurable so tests can use the bcrypt minimum
pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash using constant-time comparison"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt"""
    return pwd_context.hash(password)


def generate_token_id() -> str:
    """Random identifier stored server-side so a token can be revoked"""
    return secrets.token_urlsafe(32)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed bearer token; without expires_delta it carries no exp claim"""
    # Copy data to avoid mutating the original dict
    to_encode = data.copy()

    if expires_delta is not None:
        to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})

    encoded_jwt = jwt.encode(
        to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    return encoded_jwt


def decode_access_token(token: str) -> Optional[dict]:
    """Decode and verify a bearer token"""
    try:
        # Verify signature and expiration automatically
        # Returns None if token is invalid, expired, or tampered with
        payload = jwt.decode(token, settings.SECRET_KEY,
                             algorithms=[settings.ALGORITHM])
        return payload
    except JWTError:
        return None
