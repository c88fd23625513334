"""
JWT token creation / verification and password hashing (bcrypt).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from carrental.core.config import settings
from carrental.core.exceptions import InvalidTokenError

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

_ALGORITHM = settings.ALGORITHM
_SECRET = settings.SECRET_KEY


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def encrypt_password(plain: str) -> str:
    return pwd_context.hash(plain)


# ── JWT tokens ──────────────────────────────────────────────────────
def build_token_claims(user: Any, role: Any) -> dict[str, Any]:
    """Fixed claim shape embedded in every access token."""
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "image": user.image,
        "role": {"id": role.id, "name": role.name},
    }


def create_token_from_user(
    user: Any,
    role: Any,
    expires_delta: timedelta | None = None,
) -> str:
    claims = build_token_claims(user, role)
    if expires_delta is None and settings.ACCESS_TOKEN_EXPIRE_MINUTES is not None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    if expires_delta is not None:
        claims["exp"] = datetime.now(timezone.utc) + expires_delta
    return jwt.encode(claims, _SECRET, algorithm=_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Return the verified claims or raise ``InvalidTokenError``."""
    try:
        payload = jwt.decode(token, _SECRET, algorithms=[_ALGORITHM])
    except ExpiredSignatureError as exc:
        raise InvalidTokenError("Access token has expired") from exc
    except JWTError as exc:
        raise InvalidTokenError("Invalid access token") from exc

    role = payload.get("role")
    if payload.get("id") is None or not isinstance(role, dict) or "name" not in role:
        raise InvalidTokenError("Access token is missing required claims")
    return payload
