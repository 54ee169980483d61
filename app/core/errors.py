"""Exception handlers: map AppError, validation and HTTP errors onto the response envelope."""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import AppError
from app.core.middleware import request_meta
from app.schemas.common import ErrorBody, ErrorResponse, FieldError

logger = logging.getLogger(__name__)

HTTP_STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    413: "PAYLOAD_TOO_LARGE",
    415: "UNSUPPORTED_MEDIA_TYPE",
    429: "RATE_LIMIT_EXCEEDED",
    503: "NOT_READY",
}


def error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: list[FieldError] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=ErrorBody(code=code, message=message, details=details),
        meta=request_meta(request),
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body.model_dump(by_alias=True, exclude_none=True)),
        headers=headers,
    )


def _field_name(loc: tuple) -> str:
    # Drop the leading "body"/"query"/"path" segment FastAPI adds
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


def _plain_message(msg: str) -> str:
    return msg.removeprefix("Value error, ")


def register_exception_handlers(app: FastAPI, *, expose_internal_errors: bool) -> None:
    """Install handlers. expose_internal_errors returns exception text for 500s (dev only)."""

    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        message = exc.message
        if exc.status_code >= 500:
            logger.error(
                "Request failed: %s",
                exc.message,
                exc_info=exc,
                extra={"error_code": exc.code, "path": request.url.path},
            )
            # Storage and email failures carry paths and upstream error text
            if not expose_internal_errors:
                message = "Internal server error"
        details = [FieldError(**d) for d in exc.details] if exc.details else None
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return error_response(request, exc.status_code, exc.code, message, details, headers)

    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = [
            FieldError(field=_field_name(tuple(err.get("loc", ()))), message=_plain_message(err.get("msg", "is invalid")))
            for err in exc.errors()
        ]
        return error_response(request, 400, "VALIDATION_ERROR", "Validation failed", details)

    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        code = HTTP_STATUS_CODES.get(exc.status_code, "INTERNAL_ERROR")
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        if exc.status_code == 404 and exc.detail == "Not Found":
            message = "Resource not found"
        return error_response(request, exc.status_code, code, message, headers=exc.headers)

    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        message = str(exc) if expose_internal_errors else "Internal server error"
        return error_response(request, 500, "INTERNAL_ERROR", message)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
