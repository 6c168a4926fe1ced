"""
Centralized Error Handling and Logging System
Structured error logging, request tracing and the exception-to-response mapping
shared by every endpoint.
"""

import json
import logging
import traceback
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union
from contextvars import ContextVar

from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.middleware.base import BaseHTTPMiddleware

from database.errors import VersionConflictError

# Context variable for request tracing
request_id_var: ContextVar[str] = ContextVar('request_id', default='')

logger = logging.getLogger(__name__)

STALE_VERSION_ERROR = {"error": "You seem to have a stale version of the record"}


class ErrorHandlingConfig:
    """Centralized configuration for error handling behavior"""

    # Security settings
    SANITIZE_SENSITIVE_FIELDS = True
    SENSITIVE_FIELD_PATTERNS = [
        'password', 'token', 'key', 'secret', 'authorization',
        'auth', 'bearer', 'credential', 'api_key'
    ]

    # Logging settings
    LOG_REQUEST_BODIES = True
    LOG_HEADERS = True
    MAX_BODY_LOG_SIZE = 5000  # Truncate large bodies

    # Error response settings
    INCLUDE_TRACE_ID = True
    INCLUDE_TIMESTAMP = True

    @classmethod
    def is_sensitive_field(cls, field_name: str) -> bool:
        """Check if a field contains sensitive data"""
        field_lower = field_name.lower()
        return any(pattern in field_lower for pattern in cls.SENSITIVE_FIELD_PATTERNS)

    @classmethod
    def sanitize_data(cls, data: Union[Dict, str, Any]) -> Any:
        """Recursively sanitize sensitive data from logs"""
        if not cls.SANITIZE_SENSITIVE_FIELDS:
            return data

        if isinstance(data, dict):
            return {
                key: "***REDACTED***" if cls.is_sensitive_field(key) else cls.sanitize_data(value)
                for key, value in data.items()
            }
        elif isinstance(data, list):
            return [cls.sanitize_data(item) for item in data]
        elif isinstance(data, str) and len(data) > cls.MAX_BODY_LOG_SIZE:
            return data[:cls.MAX_BODY_LOG_SIZE] + "...[TRUNCATED]"
        else:
            return data


class StructuredLogger:
    """Structured logging with consistent format and context"""

    @staticmethod
    def log_error(
        error_type: str,
        message: str,
        request: Optional[Request] = None,
        exception: Optional[Exception] = None,
        extra_context: Optional[Dict] = None,
        include_traceback: bool = True
    ) -> str:
        """Log structured error with full context, returning the trace ID"""

        # Reuse the request's trace ID when the middleware assigned one
        trace_id = request_id_var.get('') or str(uuid.uuid4())[:8]

        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "trace_id": trace_id,
            "error_type": error_type,
            "message": message,
            "level": "ERROR"
        }

        if request:
            headers = dict(request.headers)
            log_entry["request"] = {
                "method": request.method,
                "url": str(request.url),
                "path": request.url.path,
                "query_params": dict(request.query_params),
                "headers": ErrorHandlingConfig.sanitize_data(headers) if ErrorHandlingConfig.LOG_HEADERS else {},
                "client_ip": request.client.host if request.client else None,
                "user_agent": headers.get("user-agent", "unknown")
            }

        if exception:
            log_entry["exception"] = {
                "type": type(exception).__name__,
                "details": str(exception),
                "module": getattr(exception, '__module__', 'unknown')
            }

            if include_traceback:
                log_entry["exception"]["traceback"] = "".join(
                    traceback.format_exception(type(exception), exception, exception.__traceback__)
                )

        if extra_context:
            log_entry["context"] = ErrorHandlingConfig.sanitize_data(extra_context)

        logger.error(json.dumps(log_entry, indent=2, default=str))

        return trace_id


def _captured_body(request: Request) -> Optional[str]:
    """Decode the body stashed by RequestContextMiddleware, if any"""
    captured = getattr(request.state, 'captured_body', None)
    if not captured:
        return None
    try:
        return captured.decode('utf-8')
    except UnicodeDecodeError:
        return "DECODE_ERROR"


def _with_metadata(content: Dict[str, Any], trace_id: Optional[str]) -> Dict[str, Any]:
    if ErrorHandlingConfig.INCLUDE_TRACE_ID and trace_id:
        content["trace_id"] = trace_id
    if ErrorHandlingConfig.INCLUDE_TIMESTAMP:
        content["timestamp"] = datetime.now(timezone.utc).isoformat()
    return content


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to capture request context and add request IDs"""

    async def dispatch(self, request: Request, call_next):
        trace_id = str(uuid.uuid4())[:8]
        request_id_var.set(trace_id)

        # Store request body for potential error logging
        body = None
        if ErrorHandlingConfig.LOG_REQUEST_BODIES:
            body = await request.body()

        request.state.captured_body = body
        request.state.trace_id = trace_id

        response = await call_next(request)
        # Add trace ID to response headers for client-side debugging
        response.headers["X-Trace-ID"] = trace_id
        return response


# Global Exception Handlers
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with logging"""

    trace_id = None
    if exc.status_code >= 500:
        trace_id = StructuredLogger.log_error(
            f"http_{exc.status_code}",
            f"HTTP {exc.status_code}: {exc.detail}",
            request=request,
            exception=exc,
            extra_context={
                "status_code": exc.status_code,
                "request_body": ErrorHandlingConfig.sanitize_data(_captured_body(request))
            }
        )
    else:
        logger.info(f"HTTP {exc.status_code} for {request.method} {request.url.path}: {exc.detail}")

    response_content = _with_metadata({
        "error": f"HTTP {exc.status_code}",
        "message": exc.detail,
    }, trace_id)

    return JSONResponse(
        status_code=exc.status_code,
        content=response_content,
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle FastAPI validation errors (HTTP 422)"""

    validation_details = []
    for error in exc.errors():
        validation_details.append({
            "field": " -> ".join(str(loc) for loc in error.get("loc", [])),
            "message": error.get("msg", "Unknown validation error"),
            "type": error.get("type", "unknown")
        })

    trace_id = StructuredLogger.log_error(
        "validation_error_422",
        f"Request validation failed: {len(validation_details)} validation errors",
        request=request,
        exception=exc,
        extra_context={
            "validation_errors": validation_details,
            "request_body": ErrorHandlingConfig.sanitize_data(_captured_body(request))
        },
        include_traceback=False
    )

    response_content = _with_metadata({
        "error": "Validation Error",
        "message": "Request validation failed",
        "detail": validation_details,
        "error_count": len(validation_details)
    }, trace_id)

    return JSONResponse(
        status_code=422,
        content=response_content
    )


async def version_conflict_handler(request: Request, exc: VersionConflictError) -> JSONResponse:
    """Map optimistic-lock violations on any write path to 409"""
    logger.info(
        f"Conflict - Could not write user for {request.method} {request.url.path}, "
        f"Error Message = {exc}"
    )
    return JSONResponse(status_code=409, content=STALE_VERSION_ERROR)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other exceptions"""

    trace_id = StructuredLogger.log_error(
        "internal_server_error",
        f"Unhandled exception: {str(exc)}",
        request=request,
        exception=exc,
        extra_context={
            "request_body": ErrorHandlingConfig.sanitize_data(_captured_body(request))
        }
    )

    # Don't expose internal details
    response_content = _with_metadata({
        "error": "Internal Server Error",
        "message": "An unexpected error occurred",
    }, trace_id)

    return JSONResponse(
        status_code=500,
        content=response_content
    )


def setup_error_handling(app):
    """Setup comprehensive error handling for FastAPI app"""

    app.add_middleware(RequestContextMiddleware)

    # Most specific first
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(VersionConflictError, version_conflict_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Centralized error handling system initialized")
