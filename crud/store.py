"""
Store interface used by the services, plus its SQLAlchemy implementation.

Services only see the Store protocol, so they can be exercised against an
in-memory fake in tests.
"""

import logging
from datetime import datetime
from typing import Any, List, Optional, Protocol

from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from crud.todo import TodoRepository
from crud.user import UserRepository
from database import get_db

logger = logging.getLogger(__name__)


class Store(Protocol):
    async def find_user(self, email: str) -> Optional[Any]: ...

    async def get_user(self, user_id: str) -> Optional[Any]: ...

    async def list_todos(self, user_id: str, limit: int, offset: int) -> List[Any]: ...

    async def count_todos(self, user_id: str) -> int: ...

    async def get_todo(self, todo_id: str) -> Optional[Any]: ...

    async def create_todo(self, user_id: str, title: str) -> Any: ...

    async def update_todo(self, todo_id: str, completed: bool) -> Optional[Any]: ...

    async def update_user(
        self, email: str, is_subscribed: bool, subscription_ends: Optional[datetime]
    ) -> Optional[Any]: ...

    async def create_user(self, user_id: str, email: str) -> Optional[Any]: ...

    async def delete_todo(self, todo_id: str) -> bool: ...


class SQLStore:
    """
    Store backed by an AsyncSession. Every mutation commits on its own;
    there are no multi-statement transactions.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users = UserRepository(db)
        self.todos = TodoRepository(db)

    async def find_user(self, email: str):
        return await self.users.get_user_by_email(email)

    async def get_user(self, user_id: str):
        return await self.users.get_user_by_id(user_id)

    async def list_todos(self, user_id: str, limit: int, offset: int):
        return await self.todos.list_todos(user_id, limit, offset)

    async def count_todos(self, user_id: str) -> int:
        return await self.todos.count_todos(user_id)

    async def get_todo(self, todo_id: str):
        return await self.todos.get_todo(todo_id)

    async def create_todo(self, user_id: str, title: str):
        todo = await self.todos.create_todo(user_id, title)
        await self.db.commit()
        return todo

    async def update_todo(self, todo_id: str, completed: bool):
        todo = await self.todos.get_todo(todo_id)
        if todo is None:
            return None
        await self.todos.update_todo(todo, {"completed": completed})
        await self.db.commit()
        return todo

    async def update_user(self, email: str, is_subscribed: bool, subscription_ends: Optional[datetime]):
        user = await self.users.get_user_by_email(email)
        if user is None:
            return None
        await self.users.update_user(
            user,
            {"is_subscribed": is_subscribed, "subscription_ends": subscription_ends},
        )
        await self.db.commit()
        return user

    async def create_user(self, user_id: str, email: str):
        """
        Insert a user row. A row with the same id means the account is
        already provisioned and that row is returned, including when a
        concurrent insert wins the race. An email held by a different id
        raises IntegrityError.
        """
        existing = await self.users.get_user_by_id(user_id)
        if existing is not None:
            logger.info(f"User {user_id} already provisioned, skipping insert")
            return existing

        try:
            user = await self.users.create_user(
                {"id": user_id, "email": email, "is_subscribed": False}
            )
            await self.db.commit()
            return user
        except IntegrityError:
            await self.db.rollback()
            existing = await self.users.get_user_by_id(user_id)
            if existing is None:
                logger.warning(f"Cannot provision {user_id}: email is held by another account")
                raise
            logger.info(f"User {user_id} already provisioned, skipping insert")
            return existing

    async def delete_todo(self, todo_id: str) -> bool:
        todo = await self.todos.get_todo(todo_id)
        if todo is None:
            return False
        await self.todos.delete_todo(todo)
        await self.db.commit()
        return True


def get_store(db: AsyncSession = Depends(get_db)) -> Store:
    """Dependency wrapping the request's session in a SQLStore."""
    return SQLStore(db)
