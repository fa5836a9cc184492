"""
Tests for password hashing and tokens.
"""

from datetime import timedelta

import jwt
import pytest

from core.security import (
    TokenError,
    create_token,
    decode_token,
    extract_token,
    hash_password,
    verify_password,
)


def test_password_hash_roundtrip():
    hashed = hash_password("secret123")

    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)


def test_verify_against_non_bcrypt_value():
    assert not verify_password("secret123", "plain-text")


def test_token_carries_user_id():
    token = create_token("65f0c1d2e3a4b5c6d7e8f901")

    claims = decode_token(token)
    assert claims["_id"] == "65f0c1d2e3a4b5c6d7e8f901"
    assert claims["exp"] > claims["iat"]


def test_expired_token_rejected():
    token = create_token("user-1", expires_in=timedelta(seconds=-1))

    with pytest.raises(TokenError, match="expired"):
        decode_token(token)


def test_token_signed_with_other_secret_rejected():
    token = create_token("user-1", secret="another-secret")

    with pytest.raises(TokenError):
        decode_token(token)


def test_token_without_subject_rejected():
    token = jwt.encode({"sub": "user-1"}, "test-secret", algorithm="HS256")

    with pytest.raises(TokenError):
        decode_token(token, secret="test-secret")


@pytest.mark.parametrize(
    "header, expected",
    [
        (None, None),
        ("", None),
        ("abc.def.ghi", "abc.def.ghi"),
        ("Bearer abc.def.ghi", "abc.def.ghi"),
        ("bearer   abc.def.ghi ", "abc.def.ghi"),
    ],
)
def test_extract_token(header, expected):
    assert extract_token(header) == expected
