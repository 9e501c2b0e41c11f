"""
JSON body parsing for handlers that must authenticate before reading input
"""

import json
from typing import Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

from services.errors import BadRequestError

ModelT = TypeVar("ModelT", bound=BaseModel)


async def read_json_body(request: Request) -> dict:
    """Decode the body as a JSON object or raise BadRequestError."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise BadRequestError()
    if not isinstance(body, dict):
        raise BadRequestError()
    return body


async def parse_body(request: Request, model: Type[ModelT]) -> ModelT:
    body = await read_json_body(request)
    try:
        return model.model_validate(body)
    except ValidationError:
        raise BadRequestError()
