"""JSON envelope used by every endpoint: {status, code, data | message}"""

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success_response(data: Any = None, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "success", "code": status_code, "data": jsonable_encoder(data)},
    )


def error_response(message: Any, status_code: int = 400, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "code": status_code, "message": jsonable_encoder(message)},
        headers=headers,
    )
