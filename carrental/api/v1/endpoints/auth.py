"""
Auth endpoints — registration, login & the current-user lookup.
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from carrental.api.v1.deps import get_db, get_token_identity
from carrental.core.config import settings
from carrental.core.exceptions import (EmailAlreadyTakenError,
                                       EmailNotRegisteredError,
                                       RecordNotFoundError, WrongPasswordError)
from carrental.core.security import (create_token_from_user, encrypt_password,
                                     verify_password)
from carrental.models.role import CUSTOMER, Role
from carrental.models.user import User
from carrental.schemas.auth import (AccessToken, LoginRequest, RegisterRequest,
                                    RoleRead, TokenIdentity, UserRead)

# Rate limiter, keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/register", response_model=AccessToken, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db),
) -> AccessToken:
    """Create a customer account and return its access token."""
    existing = await db.execute(select(User.id).where(User.email == body.email))
    if existing.scalar_one_or_none() is not None:
        raise EmailAlreadyTakenError(body.email)

    role_result = await db.execute(select(Role).where(Role.name == CUSTOMER))
    role = role_result.scalar_one_or_none()
    if role is None:
        raise RecordNotFoundError(f"Role {CUSTOMER}")

    user = User(
        name=body.name,
        email=body.email,
        encrypted_password=encrypt_password(body.password),
        role_id=role.id,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race against a concurrent registration for the same email
        await db.rollback()
        raise EmailAlreadyTakenError(body.email)
    await db.refresh(user)
    logger.info("Registered user %s (id %s)", user.email, user.id)

    return AccessToken(access_token=create_token_from_user(user, role))


@router.post("/login", response_model=AccessToken, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> AccessToken:
    """Exchange email and password for an access token."""
    result = await db.execute(select(User).where(User.email == body.email))
    user = result.scalar_one_or_none()
    if user is None:
        raise EmailNotRegisteredError(body.email)

    if not verify_password(body.password, user.encrypted_password):
        logger.info("Failed login for %s", body.email)
        raise WrongPasswordError()

    role = await db.get(Role, user.role_id)
    if role is None:
        raise RecordNotFoundError(f"Role of {user.name}")

    return AccessToken(access_token=create_token_from_user(user, role))


@router.get("/whoami", response_model=UserRead)
async def whoami(
    identity: TokenIdentity = Depends(get_token_identity),
    db: AsyncSession = Depends(get_db),
) -> UserRead:
    """Return the current state of the user behind the token."""
    user = await db.get(User, identity.id)
    if user is None:
        raise RecordNotFoundError(identity.name)

    role = await db.get(Role, user.role_id)
    if role is None:
        raise RecordNotFoundError(identity.name)

    return UserRead(
        id=user.id,
        name=user.name,
        email=user.email,
        image=user.image,
        role=RoleRead(id=role.id, name=role.name),
    )
