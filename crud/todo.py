"""
TodoRepository for database operations on Todo model
"""

from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from database_models import Todo


class TodoRepository:
    """
    Repository class for Todo database operations.
    Listing is always newest first, with the id as tie-breaker so that
    consecutive pages never overlap when timestamps collide.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_todo(self, todo_id: str) -> Optional[Todo]:
        result = await self.db.execute(
            select(Todo).where(Todo.id == todo_id)
        )
        return result.scalar_one_or_none()

    async def list_todos(self, user_id: str, limit: int, offset: int) -> List[Todo]:
        """
        Return one page of a user's todos.

        Args:
            user_id: Owner of the todos
            limit: Page size
            offset: Number of rows to skip

        Returns:
            List of Todo objects ordered by created_at desc, id desc
        """
        result = await self.db.execute(
            select(Todo)
            .where(Todo.user_id == user_id)
            .order_by(Todo.created_at.desc(), Todo.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all())

    async def count_todos(self, user_id: str) -> int:
        result = await self.db.execute(
            select(func.count()).select_from(Todo).where(Todo.user_id == user_id)
        )
        return result.scalar_one()

    async def create_todo(self, user_id: str, title: str) -> Todo:
        todo = Todo(user_id=user_id, title=title, completed=False)
        self.db.add(todo)
        await self.db.flush()
        return todo

    async def update_todo(self, todo: Todo, updates: dict) -> Todo:
        for key, value in updates.items():
            if hasattr(todo, key):
                setattr(todo, key, value)

        await self.db.flush()
        return todo

    async def delete_todo(self, todo: Todo) -> None:
        await self.db.delete(todo)
        await self.db.flush()
