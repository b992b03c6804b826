"""
Unit tests for TokenIssuer
"""

from datetime import timedelta

import pytest
from jose import jwt

from tenant_auth.app.services.token_issuer import TokenIssuer, hash_refresh_token
from tenant_auth.domain.entities import UserRole


def test_fresh_access_token_validates(issuer, make_user):
    user = make_user(role=UserRole.admin, tenant_id="42")
    token, expires_at = issuer.issue_access_token(user)

    result = issuer.validate_access_token(token)

    assert result.is_ok()
    claims = result.value
    assert claims.user_id == user.id
    assert claims.tenant_id == "42"
    assert claims.role == UserRole.admin
    assert claims.email == "a@x.com"
    assert claims.expires_at == expires_at
    assert expires_at - claims.issued_at == timedelta(minutes=15)


def test_access_token_valid_until_the_expiry_instant(issuer, clock, make_user):
    token, _ = issuer.issue_access_token(make_user())

    clock.advance(minutes=14, seconds=59)
    assert issuer.validate_access_token(token).is_ok()


def test_access_token_expired_at_the_expiry_instant(issuer, clock, make_user):
    token, _ = issuer.issue_access_token(make_user())

    clock.advance(minutes=15)
    result = issuer.validate_access_token(token)

    assert result.is_err()
    assert result.error.code == "EXPIRED_TOKEN"


def test_token_signed_with_other_secret_is_invalid_signature(issuer, clock, make_user):
    other = TokenIssuer(secret="another-secret", clock=clock)
    token, _ = other.issue_access_token(make_user())

    result = issuer.validate_access_token(token)

    assert result.is_err()
    assert result.error.code == "INVALID_SIGNATURE"


def test_tampered_payload_is_invalid_signature(issuer, make_user):
    token, _ = issuer.issue_access_token(make_user(role=UserRole.user))
    header, payload, signature = token.split(".")
    forged, _ = issuer.issue_access_token(make_user(role=UserRole.super_admin))
    forged_payload = forged.split(".")[1]

    result = issuer.validate_access_token(".".join([header, forged_payload, signature]))

    assert result.is_err()
    assert result.error.code == "INVALID_SIGNATURE"


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b", "a.b.c"])
def test_garbage_is_malformed(issuer, token):
    result = issuer.validate_access_token(token)

    assert result.is_err()
    assert result.error.code == "MALFORMED_TOKEN"


def test_signed_token_missing_claims_is_malformed(issuer):
    token = jwt.encode({"sub": "someone", "iss": issuer.issuer}, issuer.secret, algorithm="HS256")

    result = issuer.validate_access_token(token)

    assert result.is_err()
    assert result.error.code == "MALFORMED_TOKEN"


def test_expired_token_with_bad_signature_reports_signature(issuer, clock, make_user):
    other = TokenIssuer(secret="another-secret", clock=clock)
    token, _ = other.issue_access_token(make_user())
    clock.advance(days=1)

    result = issuer.validate_access_token(token)

    assert result.error.code == "INVALID_SIGNATURE"


def test_tenant_hint_tolerates_expiry(issuer, clock, make_user):
    token, _ = issuer.issue_access_token(make_user(tenant_id="acme-corp"))
    clock.advance(days=2)

    assert issuer.parse_tenant_hint(token) == "acme-corp"


@pytest.mark.parametrize("token", [None, "", "garbage", "a.b.c"])
def test_tenant_hint_returns_none_for_unreadable_tokens(issuer, token):
    assert issuer.parse_tenant_hint(token) is None


def test_tenant_hint_ignores_foreign_signature(issuer, clock, make_user):
    other = TokenIssuer(secret="another-secret", clock=clock)
    token, _ = other.issue_access_token(make_user(tenant_id="7"))

    assert issuer.parse_tenant_hint(token) is None


def test_refresh_tokens_are_random_and_hash_is_stable(issuer, clock):
    first, expires_at = issuer.issue_refresh_token()
    second, _ = issuer.issue_refresh_token()

    assert first != second
    assert len(first) >= 43
    assert expires_at == clock.now + timedelta(days=7)
    assert hash_refresh_token(first) == hash_refresh_token(first)
    assert hash_refresh_token(first) != first
    assert len(hash_refresh_token(first)) == 64
