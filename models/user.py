from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from models.todo import TodoOut


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    email: str
    is_subscribed: bool = False
    subscription_ends: Optional[datetime] = None
    created_at: Optional[datetime] = None


class UserWithTodos(UserOut):
    todos: List[TodoOut] = []
