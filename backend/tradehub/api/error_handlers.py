"""Error Handlers: map every failure of a pipeline request to one JSON envelope.

Invariants:
    - Caller errors (4xx TradeHubError) are logged at INFO, server-side failures (5xx)
      at ERROR; both are tagged with pipeline, procedure, user_id and error_code
    - A body FastAPI cannot parse answers 400 INVALID_INPUT, the same envelope a
      pipeline's own schema validation produces
    - Anything unexpected answers 500 INTERNAL_ERROR with no exception text

Design Decisions:
    - The acting user is read back from X-User-Id for log tagging only; identity
      itself is resolved by the pipeline route
    - Registered from main.py through register_error_handlers()
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from tradehub.core.errors import ErrorSeverity, InvalidInputError, TradeHubError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    _register_tradehub_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_tradehub_error_handler(app: FastAPI) -> None:

    @app.exception_handler(TradeHubError)
    async def tradehub_error_handler(request: Request, exc: TradeHubError):
        log = logger.error if exc.http_status >= 500 else logger.info
        log(
            f"{exc.code} on {request.url.path}: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "pipeline": exc.context.pipeline,
                "procedure": exc.data.get("procedure"),
                "user_id": exc.context.user_id or request.headers.get("x-user-id"),
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Unparseable request body, rejected before any pipeline runs."""
        error = InvalidInputError(
            _invalid_fields(exc.errors()),
            [{"field": _field_name(e), "message": e["msg"]} for e in exc.errors()],
        )
        logger.info(
            f"Rejected request body on {request.url.path}: {error.fields}",
            extra={"error_code": error.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content=error.to_response(),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _field_name(error: dict) -> str:
    # loc starts with the request part ("body", "header", ...)
    parts = [str(p) for p in error["loc"][1:]]
    if error["type"] == "json_invalid" or not parts:
        return "payload"
    return ".".join(parts)


def _invalid_fields(errors: list[dict]) -> list[str]:
    return list(dict.fromkeys(_field_name(e) for e in errors))
