"""
Unit tests for CredentialVerifier
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from tenant_auth.app.services.credential_verifier import CredentialVerifier
from tenant_auth.domain.entities import UserStatus


@pytest.fixture
def users():
    repository = MagicMock()
    repository.get_by_tenant_and_email = AsyncMock(return_value=None)
    return repository


@pytest.mark.asyncio
async def test_verify_success(users, make_user):
    user = make_user(password="p1")
    users.get_by_tenant_and_email = AsyncMock(return_value=user)

    result = await CredentialVerifier(users, rounds=4).verify("1", "a@x.com", "p1")

    assert result.is_ok()
    assert result.value is user
    users.get_by_tenant_and_email.assert_called_once_with("1", "a@x.com")


@pytest.mark.asyncio
@pytest.mark.parametrize("password", ["p2", "P1", "1", "p", "p1 ", "xp1", "q1"])
async def test_single_character_mutation_is_rejected(users, make_user, password):
    users.get_by_tenant_and_email = AsyncMock(return_value=make_user(password="p1"))

    result = await CredentialVerifier(users, rounds=4).verify("1", "a@x.com", password)

    assert result.is_err()
    assert result.error.code == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_unknown_user_gets_same_error_as_wrong_password(users, make_user):
    verifier = CredentialVerifier(users, rounds=4)
    missing = await verifier.verify("1", "nobody@x.com", "p1")

    users.get_by_tenant_and_email = AsyncMock(return_value=make_user(password="p1"))
    wrong = await verifier.verify("1", "a@x.com", "wrong")

    assert missing.error == wrong.error
    assert missing.error.message == "Invalid email or password"


@pytest.mark.asyncio
async def test_lookup_is_scoped_to_tenant(users):
    await CredentialVerifier(users, rounds=4).verify("acme", "A@X.com", "p1")

    users.get_by_tenant_and_email.assert_called_once_with("acme", "a@x.com")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status", [UserStatus.inactive, UserStatus.suspended, UserStatus.pending_verification]
)
async def test_inactive_account_reported_after_password_match(users, make_user, status):
    users.get_by_tenant_and_email = AsyncMock(return_value=make_user(password="p1", status=status))
    verifier = CredentialVerifier(users, rounds=4)

    correct = await verifier.verify("1", "a@x.com", "p1")
    wrong = await verifier.verify("1", "a@x.com", "nope")

    assert correct.error.code == "ACCOUNT_DISABLED"
    assert wrong.error.code == "INVALID_CREDENTIALS"


def test_hash_password_round_trips(users, make_user):
    verifier = CredentialVerifier(users, rounds=4)
    user = make_user()
    user.password_hash = verifier.hash_password("n3w-secret")

    assert user.password_hash.startswith("$2")
    assert verifier.check_password(user, "n3w-secret")
    assert not verifier.check_password(user, "n3w-secreT")


def test_unreadable_hash_never_matches(users, make_user):
    user = make_user()
    user.password_hash = "not-a-bcrypt-hash"

    assert not CredentialVerifier(users, rounds=4).check_password(user, "p1")


@pytest.mark.asyncio
@pytest.mark.parametrize("known", [True, False])
async def test_multibyte_password_over_72_bytes_is_rejected(users, make_user, known):
    # 40 characters, 80 bytes
    password = "é" * 40
    if known:
        users.get_by_tenant_and_email = AsyncMock(return_value=make_user(password="p1"))

    result = await CredentialVerifier(users, rounds=4).verify("1", "a@x.com", password)

    assert result.error.code == "INVALID_CREDENTIALS"
    assert result.error.message == "Invalid email or password"


@pytest.mark.asyncio
async def test_password_sharing_first_72_bytes_does_not_match(users, make_user):
    stored = "a" * 72
    users.get_by_tenant_and_email = AsyncMock(return_value=make_user(password=stored))

    result = await CredentialVerifier(users, rounds=4).verify("1", "a@x.com", stored + "b")

    assert result.error.code == "INVALID_CREDENTIALS"


def test_hash_password_rejects_over_72_bytes(users):
    with pytest.raises(ValueError):
        CredentialVerifier(users, rounds=4).hash_password("é" * 37)
