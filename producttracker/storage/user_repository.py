"""
User Repository

Credential storage: lookup by email and creation of new users.
"""

from typing import Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from producttracker.exceptions import DuplicateEmailError
from .models import User


class UserRepository:
    """Credential store backed by the ``users`` table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email)
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def create(self, email: str, password_hash: str) -> User:
        """
        Persist a new user.

        Raises:
            DuplicateEmailError: If the email is taken, including when a
                concurrent registration wins the unique constraint.
        """
        user = User(email=email, password_hash=password_hash)
        self.session.add(user)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise DuplicateEmailError()

        await self.session.refresh(user)
        logger.info(f"Created user {user.id}")
        return user
