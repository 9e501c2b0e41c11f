from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TodoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: str
    user_id: str
    title: str
    completed: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class TodoPage(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    todos: List[TodoOut]
    total_pages: int
    current_page: int


class TodoCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=500)


class TodoUpdateRequest(BaseModel):
    completed: bool
