"""
Error handling utilities for MelonScope.

Wires the exception hierarchy into FastAPI so every endpoint answers with the
standard ``{error, code}`` envelope instead of a stack trace.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .codes import ErrorCode
from .exceptions import MelonScopeError
from .response import error_response

logger = logging.getLogger("melonscope.errors")


def log_error(
    logger: logging.Logger, error: Exception, context: Optional[str] = None, include_traceback: bool = True
) -> None:
    """Log an error with consistent formatting.

    Args:
        logger: Logger instance to use
        error: The exception to log
        context: Optional context string to prefix the message
        include_traceback: Whether to include the full stack trace

    Example:
        >>> log_error(logger, err, context="Chat")
        # Logs: "[Chat] UPSTREAM_HTTP_ERROR: Groq API error: 429 - rate limited"
    """
    if isinstance(error, MelonScopeError):
        message = f"{error.code.value}: {error.message}"
    else:
        message = str(error)

    if context:
        message = f"[{context}] {message}"

    logger.error(message, exc_info=include_traceback)


async def _melonscope_error_handler(request: Request, exc: MelonScopeError) -> JSONResponse:
    # Client mistakes are not worth a traceback
    log_error(logger, exc, context=request.url.path, include_traceback=exc.status_code >= 500)
    return JSONResponse(status_code=exc.status_code, content=error_response(exc))


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"Invalid request: {location} {first.get('msg', '')}".strip() if location else "Invalid request body"
    logger.warning(f"[{request.url.path}] {message}")
    return JSONResponse(
        status_code=400,
        content={"error": message, "code": ErrorCode.VALIDATION_INVALID_FORMAT.value},
    )


async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log_error(logger, exc, context=request.url.path)
    return JSONResponse(status_code=500, content=error_response(exc))


def register_exception_handlers(app: FastAPI) -> None:
    """Install the MelonScope error handlers on an application."""
    app.add_exception_handler(MelonScopeError, _melonscope_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unexpected_error_handler)
