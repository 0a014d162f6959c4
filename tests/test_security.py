from datetime import timedelta

import jwt
import pytest
from bson import ObjectId

from ecomhub.config.settings import get_settings
from ecomhub.utils.security import (
    ACCESS,
    ADMIN,
    REFRESH,
    TokenError,
    create_access_token,
    create_admin_token,
    create_refresh_token,
    decode_token,
    hash_password,
    token_expiry,
    verify_password,
)
from ecomhub.utils.serializers import utcnow


def test_password_hash_round_trip():
    hashed = hash_password("secret123")
    assert hashed != "secret123"
    assert hashed.startswith("$2")
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)


def test_verify_password_handles_missing_or_malformed_hash():
    assert not verify_password("secret123", None)
    assert not verify_password("secret123", "not-a-bcrypt-hash")


def test_access_token_claims():
    customer_id = str(ObjectId())
    payload = decode_token(create_access_token(customer_id, "a@example.com"), ACCESS)

    assert payload["id"] == customer_id
    assert payload["email"] == "a@example.com"
    assert payload["type"] == ACCESS
    lifetime = payload["exp"] - payload["iat"]
    assert lifetime == get_settings().access_token_minutes * 60


def test_tokens_are_unique_per_issue():
    customer_id = str(ObjectId())
    assert create_access_token(customer_id, "a@example.com") != create_access_token(customer_id, "a@example.com")


def test_token_type_is_enforced():
    refresh = create_refresh_token(str(ObjectId()), "a@example.com")
    assert decode_token(refresh, REFRESH)["type"] == REFRESH
    with pytest.raises(TokenError):
        decode_token(refresh, ACCESS)


def test_admin_token_remember_me_lasts_longer():
    user_id = str(ObjectId())
    short = decode_token(create_admin_token(user_id, "admin@example.com"), ADMIN)
    long = decode_token(create_admin_token(user_id, "admin@example.com", remember_me=True), ADMIN)

    assert short["exp"] - short["iat"] == 24 * 3600
    assert long["exp"] - long["iat"] == 30 * 24 * 3600


def test_expired_and_tampered_tokens_are_rejected():
    settings = get_settings()
    now = utcnow()
    expired = jwt.encode(
        {"id": str(ObjectId()), "type": ACCESS, "iat": now - timedelta(hours=1), "exp": now - timedelta(minutes=1)},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    with pytest.raises(TokenError):
        decode_token(expired, ACCESS)

    forged = jwt.encode({"id": str(ObjectId()), "type": ACCESS}, "another-secret-of-at-least-32-bytes", algorithm="HS256")
    with pytest.raises(TokenError):
        decode_token(forged, ACCESS)


def test_token_subject_must_be_object_id():
    settings = get_settings()
    token = jwt.encode({"id": "42", "type": ACCESS}, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    with pytest.raises(TokenError):
        decode_token(token, ACCESS)


def test_token_expiry_is_naive_utc():
    payload = decode_token(create_access_token(str(ObjectId()), "a@example.com"), ACCESS)
    expires_at = token_expiry(payload)
    assert expires_at.tzinfo is None
    assert expires_at > utcnow()


def test_default_signing_secrets_fit_hs256():
    settings = get_settings()
    for secret in (settings.jwt_secret, settings.jwt_refresh_secret, settings.jwt_admin_secret):
        assert len(secret.encode()) >= 32
