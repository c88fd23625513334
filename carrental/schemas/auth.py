"""Pydantic schemas for registration, login and the token identity."""

from __future__ import annotations

from pydantic import field_validator

from carrental.schemas.common import CamelModel


def _normalise_email(v: str) -> str:
    v = v.strip().lower()
    if "@" not in v:
        raise ValueError("Invalid email address")
    return v


class RegisterRequest(CamelModel):
    name: str
    email: str
    password: str

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be empty")
        if len(v) > 200:
            raise ValueError("Name must not exceed 200 characters")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _normalise_email(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Password must not exceed 72 bytes")
        return v


class LoginRequest(CamelModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return v.strip().lower()


class AccessToken(CamelModel):
    access_token: str


class RoleRead(CamelModel):
    id: int
    name: str


class TokenIdentity(CamelModel):
    """Claims carried by a verified access token."""

    id: int
    name: str
    email: str
    image: str | None = None
    role: RoleRead


class UserRead(CamelModel):
    id: int
    name: str
    email: str
    image: str | None
    role: RoleRead
