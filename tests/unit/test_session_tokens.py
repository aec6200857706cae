"""Unit tests for session token mint/verify."""

import uuid
import warnings
from datetime import UTC, datetime, timedelta

import jwt
import pytest

from backend.docchat.auth.tokens import SessionTokens
from backend.docchat.errors import Unauthenticated

SECRET = "unit-test-secret-0123456789abcdef"


@pytest.fixture
def tokens() -> SessionTokens:
    return SessionTokens(SECRET, ttl=timedelta(days=7))


def test_mint_then_verify_returns_user_id(tokens: SessionTokens) -> None:
    user_id = uuid.uuid4()

    assert tokens.verify(tokens.mint(user_id)) == user_id


@pytest.mark.parametrize("token", [None, "", "not-a-jwt", "a.b.c"])
def test_verify_rejects_absent_or_malformed(tokens: SessionTokens, token: str | None) -> None:
    with pytest.raises(Unauthenticated) as exc_info:
        tokens.verify(token)

    assert exc_info.value.message == "Unauthorized"


def test_verify_rejects_expired_token(tokens: SessionTokens) -> None:
    issued = datetime.now(UTC) - timedelta(days=8)
    token = tokens.mint(uuid.uuid4(), now=issued)

    with pytest.raises(Unauthenticated):
        tokens.verify(token)


def test_verify_rejects_token_signed_with_other_secret(tokens: SessionTokens) -> None:
    other = SessionTokens("another-service-secret-0123456789ab", ttl=timedelta(days=7))
    token = other.mint(uuid.uuid4())

    with pytest.raises(Unauthenticated):
        tokens.verify(token)


def test_verify_rejects_token_without_expiry(tokens: SessionTokens) -> None:
    token = jwt.encode({"sub": str(uuid.uuid4())}, SECRET, algorithm="HS256")

    with pytest.raises(Unauthenticated):
        tokens.verify(token)


def test_verify_rejects_non_uuid_subject(tokens: SessionTokens) -> None:
    expires = datetime.now(UTC) + timedelta(hours=1)
    token = jwt.encode({"sub": "admin", "exp": expires}, SECRET, algorithm="HS256")

    with pytest.raises(Unauthenticated):
        tokens.verify(token)


def test_missing_and_invalid_tokens_fail_identically(tokens: SessionTokens) -> None:
    """Callers cannot tell which failure case occurred."""
    with pytest.raises(Unauthenticated) as missing:
        tokens.verify(None)
    with pytest.raises(Unauthenticated) as forged:
        tokens.verify("forged.token.value")

    assert type(missing.value) is type(forged.value)
    assert missing.value.message == forged.value.message
    assert missing.value.status_code == forged.value.status_code == 401


def test_empty_secret_is_rejected() -> None:
    with pytest.raises(ValueError):
        SessionTokens("", ttl=timedelta(days=7))


def test_round_trip_emits_no_warnings(tokens: SessionTokens) -> None:
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        user_id = uuid.uuid4()

        assert tokens.verify(tokens.mint(user_id)) == user_id
