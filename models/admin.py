from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from models.user import UserWithTodos


class AdminUserTodosPage(BaseModel):
    """Result of the admin user lookup. `user` is None when no user matched."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user: Optional[UserWithTodos] = None
    total_pages: int = 0
    current_page: int = 1


class AdminUpdateRequest(BaseModel):
    """
    Either {todoId, todoCompleted} or {email, isSubscribed}.
    Which mutation runs is decided by AdminService.update.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: Optional[str] = None
    todo_id: Optional[str] = None
    todo_completed: Optional[bool] = None
    is_subscribed: Optional[bool] = None


class AdminDeleteRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    todo_id: Optional[str] = None
