import jwt
import pytest

from we_plan_it_api.app.core.config import Settings
from we_plan_it_api.app.core.errors import UnauthenticatedError
from we_plan_it_api.app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


@pytest.fixture
def token_settings() -> Settings:
    return Settings(database_url="unused.db", token_secret="unit-secret")


def test_hash_password_is_salted():
    first = hash_password("hunter2")
    second = hash_password("hunter2")

    assert first != second
    assert verify_password("hunter2", first)
    assert verify_password("hunter2", second)
    assert not verify_password("hunter3", first)


@pytest.mark.parametrize("stored", ["", "no-separator", "zz$zz", None])
def test_verify_password_rejects_malformed_hashes(stored):
    assert verify_password("hunter2", stored) is False


def test_token_carries_user_id_and_email(token_settings):
    token = create_access_token(token_settings, "u1", "ada@example.com")

    payload = decode_access_token(token_settings, token)

    assert payload.user_id == "u1"
    assert payload.email == "ada@example.com"


def test_token_expires_after_seven_days(token_settings):
    token = create_access_token(token_settings, "u1", "ada@example.com")

    claims = jwt.decode(token, "unit-secret", algorithms=["HS256"])

    assert claims["exp"] - claims["iat"] == 7 * 24 * 60 * 60
    assert jwt.get_unverified_header(token)["alg"] == "HS256"


def test_token_without_identity_is_rejected(token_settings):
    token = jwt.encode({"sub": "someone"}, "unit-secret", algorithm="HS256")

    with pytest.raises(UnauthenticatedError):
        decode_access_token(token_settings, token)


def test_garbage_token_is_rejected(token_settings):
    with pytest.raises(UnauthenticatedError):
        decode_access_token(token_settings, "not-a-token")


def test_hash_is_hex_salt_and_key():
    salt_hex, key_hex = hash_password("hunter2").split("$")

    assert len(bytes.fromhex(salt_hex)) == 16
    assert len(bytes.fromhex(key_hex)) == 32
