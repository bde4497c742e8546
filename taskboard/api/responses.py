"""
Response envelope for the Taskboard API
Every response, success or failure, is {success, data, message, errors}
"""
from typing import Any, Dict, Generic, List, Optional, TypeVar

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..utils.errors import AppException, RateLimitExceededException
from ..utils.logging import log_error

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """Standard response envelope"""
    success: bool = True
    data: Optional[DataT] = None
    message: Optional[str] = None
    errors: Optional[List[Dict[str, Any]]] = None


def error_response(
    status_code: int,
    message: str,
    errors: Optional[List[Dict[str, Any]]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def _field_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    errors = []
    for error in exc.errors():
        # Drop the leading "body"/"query"/"path" location segment
        loc = [str(part) for part in error.get("loc", ())[1:]]
        errors.append({
            "field": ".".join(loc) or None,
            "message": error.get("msg", "Invalid value"),
        })
    return errors


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    elif isinstance(exc, RateLimitExceededException):
        headers = {"Retry-After": str(exc.retry_after)}
    return error_response(exc.status_code, exc.message, exc.errors, headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", _field_errors(exc))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log_error(exc, f"{request.method} {request.url.path}")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["ApiResponse", "error_response", "register_exception_handlers"]
