"""Password hashing and JWT tokens.

Tokens identify either a staff user or a student. The ``kind`` claim says
which table ``sub`` refers to, and ``type`` separates access tokens from
refresh tokens.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from edurank.core.config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

# Principal kinds carried in the "kind" claim
STAFF = "staff"
STUDENT = "student"
PRINCIPAL_KINDS = frozenset({STAFF, STUDENT})

ACCESS = "access"
REFRESH = "refresh"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _encode_token(
    subject_id: int,
    kind: str,
    token_type: str,
    lifetime: timedelta,
    **claims: Any,
) -> str:
    if kind not in PRINCIPAL_KINDS:
        raise ValueError(f"Unknown principal kind: {kind!r}")

    issued_at = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": str(subject_id),
        "kind": kind,
        "type": token_type,
        "iat": issued_at,
        "exp": issued_at + lifetime,
        **claims,
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(
    subject_id: int,
    username: str,
    kind: str = STAFF,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a short-lived access token for a staff user or student."""
    lifetime = expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode_token(subject_id, kind, ACCESS, lifetime, username=username)


def create_refresh_token(
    subject_id: int,
    kind: str = STAFF,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a refresh token. It can only be exchanged for a new token pair."""
    lifetime = expires_delta or timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS)
    return _encode_token(subject_id, kind, REFRESH, lifetime)


def decode_token(token: str) -> dict[str, Any] | None:
    """Decode a token, returning None when the signature or expiry is invalid."""
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None


def _verify(token: str, token_type: str) -> dict[str, Any] | None:
    payload = decode_token(token)
    if not payload or payload.get("type") != token_type:
        return None
    if payload.get("kind") not in PRINCIPAL_KINDS:
        return None
    return payload


def verify_access_token(token: str) -> dict[str, Any] | None:
    return _verify(token, ACCESS)


def verify_refresh_token(token: str) -> dict[str, Any] | None:
    return _verify(token, REFRESH)
