from typing import Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success_response(data=None, message="OK", status=200):
    return JSONResponse(
        status_code=status,
        content={
            "ok": True,
            "data": jsonable_encoder(data) if data is not None else {},
            "error": None,
            "message": message,
        }
    )


def error_response(error_code: str, status: int = 400, message: Optional[str] = None):
    """
    Uniform error body. `message` must stay generic; it is shown to clients.
    """
    return JSONResponse(
        status_code=status,
        content={
            "ok": False,
            "data": {},
            "error": error_code,
            "message": message or error_code,
        }
    )
