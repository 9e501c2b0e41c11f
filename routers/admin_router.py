"""
Admin Router - user/todo browsing and moderation for the admin role
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request

from auth import Identity, require_admin
from crud.store import Store, get_store
from models.admin import AdminDeleteRequest, AdminUpdateRequest
from services.admin_service import AdminService, parse_page
from services.errors import ServiceError
from utils.request_body import parse_body
from utils.responses import error_response

logger = logging.getLogger(__name__)

admin_router = APIRouter(prefix="/api/admin", tags=["admin"])


@admin_router.get("/todos")
async def get_user_todos(
    email: Optional[str] = None,
    page: Optional[str] = None,
    admin: Identity = Depends(require_admin),
    store: Store = Depends(get_store),
):
    """Fetch a user by email with one page of their todos."""
    try:
        result = await AdminService(store).get_user_todos(email, parse_page(page))
        return result.model_dump(by_alias=True, mode="json")
    except ServiceError as e:
        return error_response(e.error, status=e.status_code, message=e.message)
    except Exception as e:
        logger.error(f"Error fetching user data: {e}", exc_info=True)
        return error_response("Internal Server Error", status=500)


@admin_router.put("/todos")
async def update_todo_or_subscription(
    request: Request,
    admin: Identity = Depends(require_admin),
    store: Store = Depends(get_store),
):
    """Toggle a todo's completion or change a user's subscription."""
    try:
        # Read after require_admin so unauthenticated callers never reach the parser
        payload = await parse_body(request, AdminUpdateRequest)
        updated = await AdminService(store).update(payload)
        return updated.model_dump(by_alias=True, mode="json")
    except ServiceError as e:
        return error_response(e.error, status=e.status_code, message=e.message)
    except Exception as e:
        logger.error(f"Error updating data: {e}", exc_info=True)
        return error_response("Internal Server Error", status=500)


@admin_router.delete("/todos")
async def delete_todo(
    request: Request,
    admin: Identity = Depends(require_admin),
    store: Store = Depends(get_store),
):
    """Delete any todo by id."""
    try:
        payload = await parse_body(request, AdminDeleteRequest)
        return await AdminService(store).delete_todo(payload.todo_id)
    except ServiceError as e:
        return error_response(e.error, status=e.status_code, message=e.message)
    except Exception as e:
        logger.error(f"Error deleting todo: {e}", exc_info=True)
        return error_response("Internal Server Error", status=500)
