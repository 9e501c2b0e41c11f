"""
Admin Service - user lookup, todo moderation and subscription management
"""

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from config.settings import ITEMS_PER_PAGE, SUBSCRIPTION_DAYS
from crud.store import Store
from models.admin import AdminUpdateRequest, AdminUserTodosPage
from models.todo import TodoOut
from models.user import UserOut, UserWithTodos
from services.errors import BadRequestError, NotFoundError

logger = logging.getLogger(__name__)


# Largest page whose offset still fits a signed 64-bit integer
MAX_PAGE = (2**63 - 1) // ITEMS_PER_PAGE + 1


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def total_pages_for(total: int, per_page: int = ITEMS_PER_PAGE) -> int:
    return math.ceil(total / per_page)


def parse_page(raw: Optional[str]) -> int:
    """
    Parse the `page` query parameter. Missing means page 1; anything that is
    not an integer between 1 and MAX_PAGE is rejected.
    """
    if raw is None or raw == "":
        return 1
    try:
        page = int(raw)
    except (TypeError, ValueError):
        raise BadRequestError("page must be a positive integer")
    if page < 1 or page > MAX_PAGE:
        raise BadRequestError("page must be a positive integer")
    return page


class AdminService:
    """
    Business logic behind /api/admin/todos. Role checks happen before the
    service is reached.
    """

    def __init__(self, store: Store, clock: Callable[[], datetime] = utcnow):
        """
        Args:
            store: Store implementation for database operations
            clock: Returns the current time; subscription end dates derive from it
        """
        self.store = store
        self.clock = clock

    async def get_user_todos(self, email: Optional[str], page: int = 1) -> AdminUserTodosPage:
        """
        Look up a user by exact email and return one page of their todos.

        The page query and the count query are separate statements, so a
        concurrent write between them can make total_pages disagree with the
        returned page for one request.

        Returns:
            AdminUserTodosPage; user is None (total_pages 0, current_page 1)
            when nobody has that email.
        """
        if email is None or not email.strip():
            raise BadRequestError("email is required")
        if page < 1:
            raise BadRequestError("page must be a positive integer")

        user = await self.store.find_user(email)
        if user is None:
            return AdminUserTodosPage(user=None, total_pages=0, current_page=1)

        todos = await self.store.list_todos(
            user.id, limit=ITEMS_PER_PAGE, offset=(page - 1) * ITEMS_PER_PAGE
        )
        total_todos = await self.store.count_todos(user.id)

        user_out = UserWithTodos(
            **UserOut.model_validate(user).model_dump(),
            todos=[TodoOut.model_validate(todo) for todo in todos],
        )
        return AdminUserTodosPage(
            user=user_out,
            total_pages=total_pages_for(total_todos),
            current_page=page,
        )

    async def update(self, payload: AdminUpdateRequest):
        """
        Apply exactly one mutation: a todo completion toggle when both
        todo_id and todo_completed are present, otherwise a subscription
        change when is_subscribed is present.

        Returns:
            TodoOut or UserOut for the updated row
        """
        if payload.todo_id is not None and payload.todo_completed is not None:
            todo = await self.store.update_todo(payload.todo_id, payload.todo_completed)
            if todo is None:
                raise NotFoundError("Todo not found")
            logger.info(f"Admin set todo {payload.todo_id} completed={payload.todo_completed}")
            return TodoOut.model_validate(todo)

        if payload.is_subscribed is not None:
            if not payload.email:
                raise BadRequestError("email is required to change a subscription")
            subscription_ends = (
                self.clock() + timedelta(days=SUBSCRIPTION_DAYS)
                if payload.is_subscribed
                else None
            )
            user = await self.store.update_user(payload.email, payload.is_subscribed, subscription_ends)
            if user is None:
                raise NotFoundError("User not found")
            logger.info(f"Admin set subscription for {payload.email} to {payload.is_subscribed}")
            return UserOut.model_validate(user)

        raise BadRequestError()

    async def delete_todo(self, todo_id: Optional[str]) -> dict:
        if not todo_id:
            raise BadRequestError("todoId is required")
        deleted = await self.store.delete_todo(todo_id)
        if not deleted:
            raise NotFoundError("Todo not found")
        logger.info(f"Admin deleted todo {todo_id}")
        return {"message": "Todo deleted successfully"}
