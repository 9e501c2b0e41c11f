import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request

from auth import Identity, get_current_identity
from crud.store import Store, get_store
from models.todo import TodoCreateRequest, TodoUpdateRequest
from services.admin_service import parse_page
from services.errors import ServiceError
from services.todo_service import TodoService
from utils.request_body import parse_body
from utils.responses import error_response

logger = logging.getLogger(__name__)

todos_router = APIRouter(prefix="/api/todos", tags=["todos"])


@todos_router.get("")
async def list_my_todos(
    page: Optional[str] = None,
    identity: Identity = Depends(get_current_identity),
    store: Store = Depends(get_store),
):
    try:
        result = await TodoService(store, identity.user_id).list_todos(parse_page(page))
        return result.model_dump(by_alias=True, mode="json")
    except ServiceError as e:
        return error_response(e.error, status=e.status_code, message=e.message)
    except Exception as e:
        logger.error(f"Error listing todos: {e}", exc_info=True)
        return error_response("Internal Server Error", status=500)


@todos_router.post("", status_code=201)
async def create_my_todo(
    request: Request,
    identity: Identity = Depends(get_current_identity),
    store: Store = Depends(get_store),
):
    try:
        body = await parse_body(request, TodoCreateRequest)
        todo = await TodoService(store, identity.user_id).create_todo(body.title)
        return todo.model_dump(by_alias=True, mode="json")
    except ServiceError as e:
        return error_response(e.error, status=e.status_code, message=e.message)
    except Exception as e:
        logger.error(f"Error creating todo: {e}", exc_info=True)
        return error_response("Internal Server Error", status=500)


@todos_router.put("/{todo_id}")
async def update_my_todo(
    todo_id: str,
    request: Request,
    identity: Identity = Depends(get_current_identity),
    store: Store = Depends(get_store),
):
    try:
        body = await parse_body(request, TodoUpdateRequest)
        todo = await TodoService(store, identity.user_id).set_completed(todo_id, body.completed)
        return todo.model_dump(by_alias=True, mode="json")
    except ServiceError as e:
        return error_response(e.error, status=e.status_code, message=e.message)
    except Exception as e:
        logger.error(f"Error updating todo: {e}", exc_info=True)
        return error_response("Internal Server Error", status=500)


@todos_router.delete("/{todo_id}")
async def delete_my_todo(
    todo_id: str,
    identity: Identity = Depends(get_current_identity),
    store: Store = Depends(get_store),
):
    try:
        return await TodoService(store, identity.user_id).delete_todo(todo_id)
    except ServiceError as e:
        return error_response(e.error, status=e.status_code, message=e.message)
    except Exception as e:
        logger.error(f"Error deleting todo: {e}", exc_info=True)
        return error_response("Internal Server Error", status=500)
