"""
FastAPI dependencies — auth guards and database session.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable, Coroutine
from typing import Any

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from carrental.core.exceptions import InsufficientAccessError, InvalidTokenError
from carrental.core.security import decode_access_token
from carrental.db.session import async_session_factory
from carrental.models.role import ADMIN, CUSTOMER
from carrental.schemas.auth import TokenIdentity

# auto_error=False so a missing header reaches our own error body
bearer_scheme = HTTPBearer(auto_error=False)


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request, closed when the response is done."""
    async with async_session_factory() as session:
        yield session


# ── Auth dependencies ───────────────────────────────────────────────
async def get_token_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> TokenIdentity:
    """Verify the bearer token and return the identity it carries."""
    if credentials is None or not credentials.credentials:
        raise InvalidTokenError("Access token is missing")
    payload = decode_access_token(credentials.credentials)
    try:
        return TokenIdentity.model_validate(payload)
    except ValidationError as exc:
        raise InvalidTokenError("Access token claims are malformed") from exc


def authorize(role_name: str) -> Callable[..., Coroutine[Any, Any, TokenIdentity]]:
    """Build a guard that only lets tokens carrying ``role_name`` through.

    The role comes from the token itself; no database lookup is made, so a
    demoted user keeps the old role until the token is replaced.
    """

    async def _guard(identity: TokenIdentity = Depends(get_token_identity)) -> TokenIdentity:
        if identity.role.name != role_name:
            raise InsufficientAccessError(identity.role.name)
        return identity

    _guard.__name__ = f"authorize_{role_name.lower()}"
    return _guard


require_admin = authorize(ADMIN)
require_customer = authorize(CUSTOMER)
