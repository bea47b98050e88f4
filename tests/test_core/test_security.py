"""Tests for login tokens and password hashing."""

from datetime import timedelta

from app.core.security import (
    ACCESS_TOKEN,
    REFRESH_TOKEN,
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    verify_password,
)


class TestPasswords:
    def test_round_trip(self):
        hashed = get_password_hash("correct horse")
        assert hashed.startswith("$argon2")
        assert verify_password("correct horse", hashed) is True
        assert verify_password("battery staple", hashed) is False

    def test_account_without_password(self):
        assert verify_password("anything", None) is False
        assert verify_password("anything", "") is False

    def test_salted(self):
        assert get_password_hash("same") != get_password_hash("same")


class TestTokens:
    def test_access_token_claims(self):
        payload = decode_token(create_access_token("dev-1", permissions=["project:create"]))

        assert payload["sub"] == "dev-1"
        assert payload["type"] == ACCESS_TOKEN
        assert payload["permissions"] == ["project:create"]
        assert payload["exp"] > payload["iat"]

    def test_expired_token(self):
        token = create_access_token("dev-1", expires_delta=timedelta(seconds=-1))
        assert decode_token(token) is None

    def test_foreign_signature(self):
        header, payload, _ = create_access_token("dev-1").split(".")
        assert decode_token(f"{header}.{payload}.c2lnbmF0dXJl") is None

    def test_types_are_not_interchangeable(self):
        refresh = create_refresh_token("dev-1")

        assert decode_token(refresh) is None
        assert decode_token(refresh, expected_type=REFRESH_TOKEN)["sub"] == "dev-1"
        assert decode_token(create_access_token("dev-1"), expected_type=REFRESH_TOKEN) is None
