"""
Todo Service - a signed-in user's own todo list
"""

import logging

from config.settings import ITEMS_PER_PAGE
from crud.store import Store
from models.todo import TodoOut, TodoPage
from services.admin_service import total_pages_for
from services.errors import BadRequestError, NotFoundError

logger = logging.getLogger(__name__)


class TodoService:
    def __init__(self, store: Store, user_id: str):
        self.store = store
        self.user_id = user_id

    async def _require_user(self):
        user = await self.store.get_user(self.user_id)
        if user is None:
            # The webhook has not provisioned this account yet
            raise NotFoundError("User not found")
        return user

    async def _owned_todo(self, todo_id: str):
        todo = await self.store.get_todo(todo_id)
        if todo is None or todo.user_id != self.user_id:
            raise NotFoundError("Todo not found")
        return todo

    async def list_todos(self, page: int = 1) -> TodoPage:
        if page < 1:
            raise BadRequestError("page must be a positive integer")
        await self._require_user()
        todos = await self.store.list_todos(
            self.user_id, limit=ITEMS_PER_PAGE, offset=(page - 1) * ITEMS_PER_PAGE
        )
        total = await self.store.count_todos(self.user_id)
        return TodoPage(
            todos=[TodoOut.model_validate(todo) for todo in todos],
            total_pages=total_pages_for(total),
            current_page=page,
        )

    async def create_todo(self, title: str) -> TodoOut:
        if not title or not title.strip():
            raise BadRequestError("title is required")
        await self._require_user()
        todo = await self.store.create_todo(self.user_id, title.strip())
        logger.info(f"User {self.user_id} created todo {todo.id}")
        return TodoOut.model_validate(todo)

    async def set_completed(self, todo_id: str, completed: bool) -> TodoOut:
        await self._owned_todo(todo_id)
        todo = await self.store.update_todo(todo_id, completed)
        if todo is None:
            raise NotFoundError("Todo not found")
        return TodoOut.model_validate(todo)

    async def delete_todo(self, todo_id: str) -> dict:
        await self._owned_todo(todo_id)
        if not await self.store.delete_todo(todo_id):
            raise NotFoundError("Todo not found")
        return {"message": "Todo deleted successfully"}
