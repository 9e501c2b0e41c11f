"""
UserRepository: persistence for accounts provisioned by the identity provider
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database_models import User


class UserRepository:
    """
    Queries and writes for the users table. Writes flush but never commit;
    the caller owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _first(self, *criteria) -> Optional[User]:
        result = await self.db.execute(select(User).where(*criteria))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Exact, case-sensitive match on the stored primary email."""
        return await self._first(User.email == email)

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        return await self._first(User.id == user_id)

    async def create_user(self, user_data: dict) -> User:
        """
        Insert a user from a dict with `id`, `email` and optionally
        `is_subscribed`.

        Raises:
            sqlalchemy.exc.IntegrityError: the id or email is already taken
        """
        user = User(
            id=user_data["id"],
            email=user_data["email"],
            is_subscribed=user_data.get("is_subscribed", False),
        )
        self.db.add(user)
        await self.db.flush()
        return user

    async def update_user(self, user: User, updates: dict) -> User:
        """Apply `updates` to known columns only, e.g. {"is_subscribed": True}."""
        for key, value in updates.items():
            if hasattr(user, key):
                setattr(user, key, value)
        await self.db.flush()
        return user
