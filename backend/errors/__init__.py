"""
MelonScope Error Handling Module

Provides standardized error codes, exceptions, and response builders
for consistent error handling across the application.

Usage:
    from errors import (
        # Error codes
        ErrorCode,

        # Exceptions
        MelonScopeError,
        ValidationError,
        ConfigurationError,
        UpstreamError,
        LLMError,

        # Response builders
        error_response,

        # FastAPI wiring
        register_exception_handlers,
        log_error,
    )

Example:
    from errors import ConfigurationError, UpstreamError

    async def send(...):
        if not api_key:
            raise ConfigurationError(
                "GROQ_API_KEY not configured",
                env_var="GROQ_API_KEY",
            )

        if response.status_code >= 400:
            raise UpstreamError(
                f"Groq API error: {response.status_code} - {response.text}",
                service="groq",
                upstream_status=response.status_code,
            )
"""

from .codes import ErrorCode
from .exceptions import (
    MelonScopeError,
    ValidationError,
    ConfigurationError,
    UpstreamError,
    LLMError,
)
from .response import error_response
from .handlers import (
    register_exception_handlers,
    log_error,
)

__all__ = [
    # Error codes
    "ErrorCode",
    # Exceptions
    "MelonScopeError",
    "ValidationError",
    "ConfigurationError",
    "UpstreamError",
    "LLMError",
    # Response builders
    "error_response",
    # FastAPI wiring
    "register_exception_handlers",
    "log_error",
]
