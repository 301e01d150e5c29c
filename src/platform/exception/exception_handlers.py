from typing import Any, Callable, Coroutine

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.responses import Response

from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io import Logger

ExceptionHandler = Callable[[Request, Exception], Coroutine[Any, Any, Response]]


def _error_response(status_code: int, detail: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={'detail': detail})


async def box_office_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Every box office error carries its own status code and a customer-safe message.

    5xx errors (provider outage, compensated partial write) still get the message
    through: it tells the customer whether money moved and what to do next.
    """
    error = exc if isinstance(exc, CustomBaseError) else CustomBaseError(str(exc))
    if error.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        Logger.base.error(
            f'🚨 [{type(error).__name__}] {request.method} {request.url.path}: {error.message}'
        )
    return _error_response(error.status_code, error.message)


async def value_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return _error_response(status.HTTP_400_BAD_REQUEST, str(exc))


async def request_validation_handler(request: Request, exc: Exception) -> JSONResponse:
    # Malformed bodies are a plain 400 for the storefront, not FastAPI's default 422
    errors = exc.errors() if isinstance(exc, RequestValidationError) else []
    return _error_response(status.HTTP_400_BAD_REQUEST, errors)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    Logger.base.opt(exception=exc).error(
        f'💥 [UNHANDLED] {request.method} {request.url.path}: {type(exc).__name__}'
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, 'Internal server error')


EXCEPTION_HANDLERS: dict[type[Exception], ExceptionHandler] = {
    CustomBaseError: box_office_error_handler,
    ValueError: value_error_handler,
    RequestValidationError: request_validation_handler,
    Exception: unhandled_error_handler,
}


def register_exception_handlers(app: FastAPI) -> None:
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
