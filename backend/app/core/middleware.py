"""
HTTP request logging and error handling for the FastAPI application.
"""
import time

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import ApiError, ErrorType
from app.core.logger import get_logger, log_error
from app.database.errors import DatabaseError

logger = get_logger("http")

# pydantic error type -> validation code
VALIDATION_CODES = {
    "missing": "MISSING_FIELD",
    "string_too_short": "MIN_LENGTH",
    "value_error": "INVALID_FORMAT",
    "string_type": "INVALID_FORMAT",
}


def error_response(error: ApiError, request: Request) -> JSONResponse:
    """Log an ApiError and render it for the client."""
    metadata = {
        "url": str(request.url.path),
        "method": request.method,
        "ip": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }

    level = error.log_level()
    if level == "error":
        log_error(f"Request failed: {error.message}", error, metadata)
    elif level == "warning":
        logger.warning(f"Request rejected: {error.message}", extra={"metadata": metadata})

    body = error.to_dict()
    if not error.should_expose_to_client() and error.status_code >= 500:
        body["error"]["message"] = "Internal server error"
    return JSONResponse(status_code=error.status_code, content=body)


def validation_error_from(exc: RequestValidationError) -> ApiError:
    """Convert the first request validation failure into an ApiError."""
    errors = exc.errors()
    first = errors[0] if errors else {}

    location = [str(part) for part in first.get("loc", ()) if part != "body"]
    field = ".".join(location) or None
    error_type = first.get("type", "")
    code = VALIDATION_CODES.get(error_type, "INVALID_VALUE")

    if code == "MISSING_FIELD" and field:
        message = f"{field.capitalize()} is required"
    elif code == "MIN_LENGTH":
        min_length = first.get("ctx", {}).get("min_length")
        message = f"{(field or 'Value').capitalize()} must be at least {min_length} characters long"
    elif field == "email":
        message = "Please provide a valid email address"
    else:
        message = first.get("msg", "Validation error")

    details = {"field": field, "code": code}
    if code == "MIN_LENGTH":
        details["minLength"] = first.get("ctx", {}).get("min_length")
    return ApiError.validation(message, details)


def register_error_handlers(app: FastAPI) -> None:
    """Install exception handlers that render every error as an ApiError."""

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return error_response(exc, request)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return error_response(validation_error_from(exc), request)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            error = ApiError.not_found("Route", {"path": request.url.path})
        else:
            error = ApiError(
                str(exc.detail),
                exc.status_code,
                ErrorType.INTERNAL if exc.status_code >= 500 else ErrorType.VALIDATION,
            )
        return error_response(error, request)

    @app.exception_handler(DatabaseError)
    async def database_error_handler(request: Request, exc: DatabaseError):
        return error_response(ApiError.database(str(exc)), request)


def register_http_logger(app: FastAPI) -> None:
    """Log every request and turn unhandled exceptions into 500 responses."""

    @app.middleware("http")
    async def http_logger(request: Request, call_next):
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            response = error_response(ApiError.from_error(exc), request)
        duration_ms = (time.perf_counter() - start) * 1000

        message = f"{request.method} {request.url.path} {response.status_code} - {duration_ms:.0f}ms"
        metadata = {
            "method": request.method,
            "url": str(request.url),
            "status_code": response.status_code,
            "duration": f"{duration_ms:.0f}ms",
            "user_agent": request.headers.get("user-agent"),
            "ip": request.client.host if request.client else None,
        }

        if response.status_code >= 500:
            logger.error(message, extra={"metadata": metadata})
        elif response.status_code >= 400:
            logger.warning(message, extra={"metadata": metadata})
        else:
            logger.info(message, extra={"metadata": metadata})
        return response
