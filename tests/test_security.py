from datetime import timedelta
from types import SimpleNamespace

import jwt
import pytest

from sparplan_api.app.core.errors import UnauthorizedError
from sparplan_api.app.core.security import PasswordHasher, TokenService

from .conftest import TEST_SECRET


@pytest.fixture
def user():
    return SimpleNamespace(id=42, email="user1@example.com")


def test_issued_token_validates_and_carries_identity(token_service, user):
    token = token_service.issue(user)

    assert token_service.validate(token)
    assert token_service.identity_of(token) == 42
    assert token_service.email_of(token) == "user1@example.com"


def test_token_payload_has_subject_email_and_24h_lifetime(token_service, user):
    token = token_service.issue(user)
    payload = jwt.decode(token, TEST_SECRET, algorithms=["HS256"])

    assert payload["sub"] == "42"
    assert payload["email"] == "user1@example.com"
    assert payload["exp"] - payload["iat"] == 24 * 60 * 60


def test_decode_returns_fixed_shape_claims(token_service, user):
    claims = token_service.decode(token_service.issue(user))

    assert claims.user_id == 42
    assert claims.email == "user1@example.com"
    assert claims.expires_at - claims.issued_at == timedelta(hours=24)


def test_expired_token_is_invalid(user):
    expired = TokenService(TEST_SECRET, expires_delta=timedelta(seconds=-10))
    token = expired.issue(user)

    assert not expired.validate(token)
    assert expired.decode(token) is None


def test_token_signed_with_other_secret_is_invalid(token_service, user):
    other = TokenService("another-secret-key-that-is-also-long-enough-for-hs256")

    assert not token_service.validate(other.issue(user))


def test_tampered_payload_is_invalid(token_service, user):
    header, _, signature = token_service.issue(user).split(".")
    forged_payload = jwt.encode(
        {"sub": "1", "email": "admin@example.com", "iat": 0, "exp": 9999999999},
        "guess",
        algorithm="HS256",
    ).split(".")[1]

    assert not token_service.validate(f"{header}.{forged_payload}.{signature}")


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c", "Bearer x.y.z"])
def test_malformed_tokens_are_invalid(token_service, token):
    assert not token_service.validate(token)


def test_token_without_email_claim_is_invalid(token_service):
    token = jwt.encode({"sub": "1", "iat": 1700000000, "exp": 9999999999}, TEST_SECRET, algorithm="HS256")

    assert not token_service.validate(token)


def test_extracting_identity_from_invalid_token_raises(token_service):
    with pytest.raises(UnauthorizedError):
        token_service.identity_of("garbage")
    with pytest.raises(UnauthorizedError):
        token_service.email_of("garbage")


def test_secret_is_required():
    with pytest.raises(ValueError):
        TokenService("")


def test_secret_is_not_in_repr(token_service):
    assert TEST_SECRET not in repr(token_service)


def test_password_hash_roundtrip(hasher):
    hashed = hasher.hash("password123")

    assert hashed != "password123"
    assert hasher.verify("password123", hashed)
    assert not hasher.verify("password124", hashed)


def test_same_password_gets_different_salts(hasher):
    assert hasher.hash("password123") != hasher.hash("password123")


def test_verify_against_malformed_hash_is_false(hasher):
    assert not hasher.verify("password123", "not-a-bcrypt-hash")


def test_verify_rejects_overlong_password(hasher):
    hashed = PasswordHasher(rounds=4).hash("a" * 72)

    assert not hasher.verify("a" * 80, hashed)
