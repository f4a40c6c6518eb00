"""Tests for password hashing, tokens and principal resolution."""

from datetime import timedelta

import pytest
from fastapi import HTTPException

from songshare.api.dependencies import get_current_principal
from songshare.core.security import (
    Principal,
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


def test_password_hash_round_trip() -> None:
    hashed = get_password_hash("secret")

    assert hashed != "secret"
    assert verify_password("secret", hashed)
    assert not verify_password("wrong", hashed)


def test_expired_token_is_rejected() -> None:
    token = create_access_token({"sub": "1"}, expires_delta=timedelta(minutes=-1))

    with pytest.raises(HTTPException) as exc_info:
        decode_access_token(token)
    assert exc_info.value.status_code == 401


def test_principal_from_token() -> None:
    token = create_access_token({"sub": "7", "username": "root", "role": "admin"})

    principal = get_current_principal(token)

    assert principal == Principal(id=7, username="root", role="admin")
    assert principal.is_admin


@pytest.mark.parametrize("token", [None, "", "not-a-jwt"])
def test_missing_or_garbage_token_is_anonymous(token) -> None:
    assert get_current_principal(token) is None


def test_token_without_numeric_subject_is_anonymous() -> None:
    assert get_current_principal(create_access_token({"sub": "alice"})) is None
