"""
Auth Service

Registration and login on top of the credential store, the password hasher
and the token issuer.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from loguru import logger

from producttracker.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    ValidationError,
)
from producttracker.security import (
    ALGORITHM,
    BCRYPT_ROUNDS,
    MAX_PASSWORD_BYTES,
    create_access_token,
    get_password_hash,
    verify_password,
)
from producttracker.storage.models import User
from producttracker.storage.user_repository import UserRepository


@dataclass
class TokenConfig:
    """Signing parameters for issued tokens."""

    secret_key: str
    algorithm: str = ALGORITHM
    expires_minutes: int = 60
    bcrypt_rounds: int = BCRYPT_ROUNDS


@dataclass
class AuthResult:
    """Issued token plus the public user fields."""

    token: str
    user_id: int
    email: str

    def user_dict(self) -> dict:
        return {"id": self.user_id, "email": self.email}


class AuthService:
    """Orchestrates registration and login."""

    def __init__(self, users: UserRepository, config: TokenConfig):
        """
        Initialize service.

        Args:
            users: Credential store
            config: Token signing and hashing parameters
        """
        self.users = users
        self.config = config

    def issue_token(self, user: User) -> str:
        return create_access_token(
            data={"id": user.id, "email": user.email},
            secret_key=self.config.secret_key,
            expires_delta=timedelta(minutes=self.config.expires_minutes),
            algorithm=self.config.algorithm,
        )

    @staticmethod
    def _require_credentials(email: Optional[str], password: Optional[str]) -> None:
        if not email or not password:
            raise ValidationError("Please Enter all Required Fields")

    async def register(self, email: Optional[str], password: Optional[str]) -> AuthResult:
        """
        Create a user and issue a token for it.

        Raises:
            ValidationError: If email or password is missing.
            DuplicateEmailError: If the email is already registered.
        """
        self._require_credentials(email, password)

        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes long"
            )

        if await self.users.get_by_email(email) is not None:
            raise DuplicateEmailError()

        password_hash = get_password_hash(password, rounds=self.config.bcrypt_rounds)
        user = await self.users.create(email=email, password_hash=password_hash)

        logger.info(f"Registered user {user.id}")
        return AuthResult(token=self.issue_token(user), user_id=user.id, email=user.email)

    async def login(self, email: Optional[str], password: Optional[str]) -> AuthResult:
        """
        Verify credentials and issue a token.

        Raises:
            ValidationError: If email or password is missing.
            InvalidCredentialsError: For an unknown email or a wrong password alike.
        """
        self._require_credentials(email, password)

        user = await self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Rejected login attempt")
            raise InvalidCredentialsError()

        logger.info(f"User {user.id} logged in")
        return AuthResult(token=self.issue_token(user), user_id=user.id, email=user.email)
