"""
Custom exceptions and global exception handlers for the application.
"""
import logging
import traceback
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

# Unprocessable Content
HTTP_422 = 422


# ============================================================================
# Error Response Models
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""
    code: str
    message: str
    field: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    """Standardized error response model."""
    success: bool = False
    error: ErrorDetail
    request_id: Optional[str] = None


# ============================================================================
# Error Codes
# ============================================================================


class ErrorCode:
    """Application error codes."""
    # Validation errors (VAL_xxx)
    VAL_INVALID_INPUT = "VAL_001"

    # Resource errors (RES_xxx)
    RES_NOT_FOUND = "RES_001"
    RES_METHOD_NOT_ALLOWED = "RES_002"

    # Conditional logic errors (CND_xxx)
    CND_INVALID_EXPRESSION = "CND_001"
    CND_NESTING_LIMIT = "CND_002"
    CND_TOO_MANY_CONDITIONS = "CND_003"

    # Server errors (SRV_xxx)
    SRV_INTERNAL_ERROR = "SRV_001"


# ============================================================================
# Custom Exceptions
# ============================================================================


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        code: str = ErrorCode.SRV_INTERNAL_ERROR,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
        field: Optional[str] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        self.field = field
        super().__init__(message)


class ValidationError(AppException):
    """Input validation errors."""

    def __init__(
        self,
        message: str = "Validation failed",
        code: str = ErrorCode.VAL_INVALID_INPUT,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=HTTP_422,
            details=details,
            field=field,
        )


class ConditionLogicError(AppException):
    """Conditional logic that cannot be evaluated as submitted."""

    def __init__(
        self,
        message: str,
        code: str = ErrorCode.CND_INVALID_EXPRESSION,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=HTTP_422,
            details=details,
        )


# ============================================================================
# Exception Handlers
# ============================================================================

# Statuses the framework raises on its own (unknown route, wrong method, ...)
_STATUS_TO_CODE = {
    400: ErrorCode.VAL_INVALID_INPUT,
    404: ErrorCode.RES_NOT_FOUND,
    405: ErrorCode.RES_METHOD_NOT_ALLOWED,
    422: ErrorCode.VAL_INVALID_INPUT,
}


def _request_extra(request: Request, **fields: Any) -> Dict[str, Any]:
    """Logging extras shared by every handler."""
    return {
        "request_id": getattr(request.state, "request_id", None),
        "path": request.url.path,
        "method": request.method,
        **fields,
    }


def _loc_to_field(loc) -> str:
    # First element is the source (body, query, path)
    return ".".join(str(part) for part in loc[1:])


def create_error_response(
    code: str,
    message: str,
    status_code: int,
    field: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    request_id: Optional[str] = None,
) -> JSONResponse:
    """Create a standardized error response."""
    error_response = ErrorResponse(
        error=ErrorDetail(code=code, message=message, field=field, details=details),
        request_id=request_id,
    )
    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(exclude_none=True),
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle application exceptions, including rejected conditional logic."""
    extra = _request_extra(request, code=exc.code, details=exc.details)

    # Client mistakes are warnings; anything 5xx is ours
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(level, f"[{exc.code}] {exc.message}", extra=extra)

    return create_error_response(
        code=exc.code,
        message=exc.message,
        status_code=exc.status_code,
        field=exc.field,
        details=exc.details,
        request_id=extra["request_id"],
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Wrap framework HTTP errors in the standard envelope."""
    extra = _request_extra(request)
    code = _STATUS_TO_CODE.get(exc.status_code, ErrorCode.SRV_INTERNAL_ERROR)
    message = str(exc.detail) if exc.detail else "An error occurred"

    logger.warning(f"HTTP {exc.status_code}: {message}", extra=extra)

    return create_error_response(
        code=code,
        message=message,
        status_code=exc.status_code,
        request_id=extra["request_id"],
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed requests, e.g. an unknown operator or bad trigger config."""
    errors = exc.errors()
    first_error = errors[0] if errors else {}

    field = _loc_to_field(first_error.get("loc", ()))
    message = first_error.get("msg", "Validation failed")

    # Every failing location, not just the first
    details = {
        "errors": [
            {
                "field": _loc_to_field(err.get("loc", ())),
                "message": err.get("msg"),
                "type": err.get("type"),
            }
            for err in errors
        ]
    }

    extra = _request_extra(request, errors=details)
    logger.warning(f"Validation error: {message}", extra=extra)

    return create_error_response(
        code=ErrorCode.VAL_INVALID_INPUT,
        message=f"Validation error: {message}",
        status_code=HTTP_422,
        field=field or None,
        details=details,
        request_id=extra["request_id"],
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log the traceback and return a 500 envelope."""
    extra = _request_extra(request)
    logger.exception(f"Unhandled exception: {exc}", extra=extra)

    from conatus.core.config import settings

    # Tracebacks only leave the process outside production
    if settings.is_production:
        message = "An internal error occurred"
        details = None
    else:
        message = str(exc)
        details = {"traceback": traceback.format_exc().split("\n")}

    return create_error_response(
        code=ErrorCode.SRV_INTERNAL_ERROR,
        message=message,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        details=details,
        request_id=extra["request_id"],
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
