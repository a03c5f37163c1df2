"""
Unit tests for password hashing and token helpers.
"""

from datetime import timedelta

import pytest
from jose import jwt

from producttracker.exceptions import InvalidTokenError
from producttracker.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


SECRET = "unit-test-secret"


class TestPasswordHashing:
    """Tests for bcrypt hashing."""

    def test_hash_is_not_plaintext(self):
        hashed = get_password_hash("password123", rounds=4)

        assert hashed != "password123"
        assert hashed.startswith("$2")

    def test_default_cost_factor_is_ten(self):
        hashed = get_password_hash("password123")

        assert hashed.split("$")[2] == "10"

    def test_verify_accepts_correct_password(self):
        hashed = get_password_hash("password123", rounds=4)

        assert verify_password("password123", hashed) is True

    def test_verify_rejects_wrong_password(self):
        hashed = get_password_hash("password123", rounds=4)

        assert verify_password("password124", hashed) is False

    def test_same_password_hashes_differently(self):
        """Each hash gets a fresh salt."""
        first = get_password_hash("password123", rounds=4)
        second = get_password_hash("password123", rounds=4)

        assert first != second
        assert verify_password("password123", first)
        assert verify_password("password123", second)

    def test_malformed_hash_does_not_verify(self):
        assert verify_password("password123", "not-a-bcrypt-hash") is False


class TestAccessTokens:
    """Tests for JWT issue and verification."""

    def test_round_trip_carries_id_and_email(self):
        token = create_access_token({"id": 7, "email": "a@b.com"}, SECRET)

        payload = decode_access_token(token, SECRET)

        assert payload["id"] == 7
        assert payload["email"] == "a@b.com"
        assert "exp" in payload

    def test_token_expires_after_delta(self):
        token = create_access_token(
            {"id": 1, "email": "a@b.com"},
            SECRET,
            expires_delta=timedelta(minutes=60),
        )
        claims = jwt.get_unverified_claims(token)
        issued = jwt.get_unverified_claims(
            create_access_token({"id": 1, "email": "a@b.com"}, SECRET, timedelta(0))
        )

        assert claims["exp"] - issued["exp"] == pytest.approx(3600, abs=5)

    def test_expired_token_is_rejected(self):
        token = create_access_token(
            {"id": 1, "email": "a@b.com"},
            SECRET,
            expires_delta=timedelta(seconds=-10),
        )

        with pytest.raises(InvalidTokenError):
            decode_access_token(token, SECRET)

    def test_wrong_secret_is_rejected(self):
        token = create_access_token({"id": 1, "email": "a@b.com"}, SECRET)

        with pytest.raises(InvalidTokenError) as exc_info:
            decode_access_token(token, "another-secret")

        assert exc_info.value.status_code == 401

    def test_garbage_token_is_rejected(self):
        with pytest.raises(InvalidTokenError):
            decode_access_token("not.a.token", SECRET)

    def test_token_without_user_claims_is_rejected(self):
        token = create_access_token({"sub": "someone"}, SECRET)

        with pytest.raises(InvalidTokenError):
            decode_access_token(token, SECRET)
