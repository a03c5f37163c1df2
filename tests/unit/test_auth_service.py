"""
Unit tests for registration and login.
"""

import pytest
from sqlalchemy import func, select

from producttracker.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    ValidationError,
)
from producttracker.security import decode_access_token
from producttracker.services.auth_service import AuthService, TokenConfig
from producttracker.storage.models import User
from producttracker.storage.user_repository import UserRepository


pytestmark = pytest.mark.asyncio

SECRET = "auth-service-secret"


@pytest.fixture
def auth_service(db_session):
    return AuthService(
        UserRepository(db_session),
        TokenConfig(secret_key=SECRET, bcrypt_rounds=4),
    )


class TestRegister:
    """Tests for AuthService.register."""

    async def test_register_issues_token_for_new_user(self, auth_service):
        result = await auth_service.register("user1@example.com", "password123")

        assert result.user_id is not None
        assert result.email == "user1@example.com"
        payload = decode_access_token(result.token, SECRET)
        assert payload["id"] == result.user_id
        assert payload["email"] == "user1@example.com"

    async def test_password_is_stored_hashed(self, auth_service, db_session):
        await auth_service.register("user1@example.com", "password123")

        user = (await db_session.execute(select(User))).scalar_one()
        assert user.password_hash != "password123"
        assert user.password_hash.startswith("$2")

    async def test_duplicate_email_is_rejected(self, auth_service, db_session):
        await auth_service.register("user1@example.com", "password123")

        with pytest.raises(DuplicateEmailError) as exc_info:
            await auth_service.register("user1@example.com", "different")

        assert exc_info.value.message == "User with this email already exists"
        count = (await db_session.execute(select(func.count(User.id)))).scalar_one()
        assert count == 1

    @pytest.mark.parametrize(
        "email,password",
        [(None, "password123"), ("user1@example.com", None), ("", ""), (None, None)],
    )
    async def test_missing_fields_are_rejected(self, auth_service, email, password):
        with pytest.raises(ValidationError) as exc_info:
            await auth_service.register(email, password)

        assert exc_info.value.message == "Please Enter all Required Fields"

    async def test_overlong_password_is_rejected(self, auth_service):
        with pytest.raises(ValidationError):
            await auth_service.register("user1@example.com", "x" * 73)


class TestLogin:
    """Tests for AuthService.login."""

    async def test_login_returns_same_identity(self, auth_service):
        registered = await auth_service.register("user1@example.com", "password123")

        result = await auth_service.login("user1@example.com", "password123")

        assert result.user_id == registered.user_id
        assert decode_access_token(result.token, SECRET)["id"] == registered.user_id
        assert result.user_dict() == {"id": registered.user_id, "email": "user1@example.com"}

    async def test_wrong_password_and_unknown_email_fail_alike(self, auth_service):
        """The failure must not reveal whether the email exists."""
        await auth_service.register("user1@example.com", "password123")

        with pytest.raises(InvalidCredentialsError) as wrong_password:
            await auth_service.login("user1@example.com", "wrong")
        with pytest.raises(InvalidCredentialsError) as unknown_email:
            await auth_service.login("nobody@example.com", "password123")

        assert wrong_password.value.message == unknown_email.value.message == "Invalid Credentials"
        assert wrong_password.value.status_code == unknown_email.value.status_code == 400

    async def test_email_match_is_exact(self, auth_service):
        await auth_service.register("user1@example.com", "password123")

        with pytest.raises(InvalidCredentialsError):
            await auth_service.login("USER1@example.com", "password123")

    async def test_missing_fields_are_rejected(self, auth_service):
        with pytest.raises(ValidationError):
            await auth_service.login("user1@example.com", None)
