"""Tests for password hashing and access-token helpers."""

from datetime import timedelta
from types import SimpleNamespace

import pytest

from carrental.core.exceptions import InvalidTokenError
from carrental.core.security import (create_token_from_user,
                                     decode_access_token, encrypt_password,
                                     verify_password)

USER = SimpleNamespace(id=1, name="John Doe", email="johndoe@mail.com", image="johndoe_image")
ROLE = SimpleNamespace(id=1, name="CUSTOMER")


def test_password_roundtrip():
    hashed = encrypt_password("johndoe_password")
    assert hashed != "johndoe_password"
    assert verify_password("johndoe_password", hashed)
    assert not verify_password("incorrect_password", hashed)


def test_token_carries_fixed_claim_shape():
    claims = decode_access_token(create_token_from_user(USER, ROLE))
    assert claims == {
        "id": 1,
        "name": "John Doe",
        "email": "johndoe@mail.com",
        "image": "johndoe_image",
        "role": {"id": 1, "name": "CUSTOMER"},
    }


def test_token_signing_is_deterministic_without_expiry():
    assert create_token_from_user(USER, ROLE) == create_token_from_user(USER, ROLE)


def test_tampered_token_rejected():
    token = create_token_from_user(USER, ROLE)
    with pytest.raises(InvalidTokenError):
        decode_access_token(f"{token}incorrect")


def test_expired_token_rejected():
    token = create_token_from_user(USER, ROLE, expires_delta=timedelta(seconds=-5))
    with pytest.raises(InvalidTokenError) as excinfo:
        decode_access_token(token)
    assert "expired" in excinfo.value.message


def test_garbage_token_rejected():
    with pytest.raises(InvalidTokenError):
        decode_access_token("not-a-jwt")
