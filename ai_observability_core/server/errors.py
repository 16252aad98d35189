"""Exception handlers translating core errors into HTTP responses.

ValidationError -> 400 with every field in ``details``, NotFoundError -> 404,
UnavailableError -> 500. Unexpected exceptions are logged and reported as a
generic 500 without internal details.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ai_observability_core.exceptions import FieldError, NotFoundError, UnavailableError, ValidationError
from ai_observability_core.logging import get_pipeline_logger

from .schemas import ErrorDetail, ErrorResponse

logger = get_pipeline_logger(__name__)

_REQUEST_LOCATIONS = {"body", "query", "path", "header"}


def _error_response(status_code: int, message: str, details: list[FieldError] | None = None) -> JSONResponse:
    body = ErrorResponse(
        error=message,
        details=[ErrorDetail.from_field_error(d) for d in details] if details is not None else None,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", exclude_none=True))


def register_error_handlers(app: FastAPI) -> None:
    """Register the observability exception handlers on ``app``."""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        logger.warning("Validation error on %s: %s (%d field(s))", request.url.path, exc.message, len(exc.details))
        return _error_response(400, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = []
        for error in exc.errors():
            loc = [str(part) for part in error["loc"]]
            if loc and loc[0] in _REQUEST_LOCATIONS:
                loc = loc[1:]
            details.append(FieldError(field=".".join(loc), message=error["msg"]))
        logger.warning("Request validation failed on %s: %d field(s)", request.url.path, len(details))
        return _error_response(400, "Validation failed", details)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return _error_response(404, str(exc))

    @app.exception_handler(UnavailableError)
    async def unavailable_handler(request: Request, exc: UnavailableError) -> JSONResponse:
        logger.error("Storage unavailable on %s: %s", request.url.path, exc)
        return _error_response(500, str(exc))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled exception on %s: %s: %s", request.url.path, type(exc).__name__, exc, exc_info=exc)
        return _error_response(500, "An internal error occurred")
