"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Pre-configured HTTPException subclasses raised by the API layer, so routers
do not repeat status codes at each call site. The scheduling engines never
raise these; they only see already-validated values.

Usage:
    from shiftpro.utils.exceptions import BadRequestError, NotFoundError
    raise NotFoundError("Pattern template not found")
    raise BadRequestError("Window exceeds 3660 days")

validation_exception_handler is registered on the app for 422 responses.
"""

import math
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


class NotFoundError(HTTPException):
    """404 Not Found 예외: 요청한 리소스를 찾을 수 없을 때 사용.

    404 Not Found exception.
    Raised when a requested resource (e.g. a pattern template key) does not exist.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource not found")
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class BadRequestError(HTTPException):
    """400 Bad Request 예외: 잘못된 요청 데이터 시 사용.

    400 Bad Request exception.
    Raised when the request is well-formed but unusable beyond what Pydantic
    validation catches (e.g. an oversized window, a biweekly period without
    a reference date).

    Args:
        detail: 오류 메시지 (Error message, default: "Bad request")
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


def _json_safe(value: Any) -> Any:
    # inf/nan 입력값은 JSON으로 직렬화 불가 (Non-finite floats are not valid JSON)
    if isinstance(value, float) and not math.isfinite(value):
        return repr(value)
    if isinstance(value, dict):
        return {key: _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    return value


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """422 요청 검증 실패 응답.

    Same body as FastAPI's default handler, with non-finite inputs such as
    a JSON `1e999` rendered as strings so the response stays valid JSON.
    """
    return JSONResponse(
        status_code=422,
        content={"detail": _json_safe(jsonable_encoder(exc.errors()))},
    )
