"""
Turn every fault that leaves a route into an envelope.

Typed faults keep their catalog entry; request validation becomes
VALIDATION_ERROR; anything untyped becomes INTERNAL_SERVER_ERROR and is
logged with its stack trace.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from errors import AppError
from logger import logger
from responses import ResponseCode, respond


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.response.http_status >= 500:
        logger.error("Request failed", extra={"code": exc.response.code, "error": exc.message})
    return respond(exc.response, error=exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return respond(ResponseCode.VALIDATION_ERROR, error=_format_validation_errors(exc))


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return respond(
        ResponseCode.for_status(exc.status_code),
        error=str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled exception", exc_info=True, extra={"error": str(exc)})
    detail = "Internal error" if request.app.state.settings.is_production() else str(exc)
    return respond(ResponseCode.INTERNAL_SERVER_ERROR, error=detail)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
