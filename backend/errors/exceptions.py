"""
Custom exception hierarchy for MelonScope.

All exceptions inherit from MelonScopeError and include:
- code: ErrorCode for categorization
- message: Human-readable error message
- details: Optional additional context
- recoverable: Whether the user can retry/fix the issue
- status_code: HTTP status the API layer answers with
- context: Additional key-value pairs for debugging
"""

from typing import Any, Optional
from .codes import ErrorCode


class MelonScopeError(Exception):
    """Base exception for all MelonScope errors.

    Attributes:
        code: The ErrorCode categorizing this error
        message: Human-readable error message
        details: Optional additional context for the user
        recoverable: Whether the error can be resolved by user action
        status_code: HTTP status returned by the API error handlers
        context: Additional debugging information
    """

    code: ErrorCode = ErrorCode.INTERNAL_UNEXPECTED
    recoverable: bool = False
    status_code: int = 500

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        code: Optional[ErrorCode] = None,
        recoverable: Optional[bool] = None,
        **context: Any,
    ):
        self.message = message
        self.details = details
        self.context = context if context else None

        # Allow overriding class defaults
        if code is not None:
            self.code = code
        if recoverable is not None:
            self.recoverable = recoverable

        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message

    def to_dict(self) -> dict:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
            "context": self.context,
        }


class ValidationError(MelonScopeError):
    """Error during request validation."""

    code = ErrorCode.VALIDATION_MISSING_PARAM
    recoverable = True
    status_code = 400

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        parameter: Optional[str] = None,
        expected: Optional[str] = None,
        received: Optional[str] = None,
        code: Optional[ErrorCode] = None,
        **context: Any,
    ):
        ctx = {**context}
        if parameter:
            ctx["parameter"] = parameter
        if expected:
            ctx["expected"] = expected
        if received:
            ctx["received"] = received
        super().__init__(message, details, code=code, **ctx)


class ConfigurationError(MelonScopeError):
    """A required credential or setting is missing. Never retried."""

    code = ErrorCode.CONFIG_MISSING_CREDENTIAL
    recoverable = False
    status_code = 500

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        env_var: Optional[str] = None,
        **context: Any,
    ):
        ctx = {**context}
        if env_var:
            ctx["env_var"] = env_var
        super().__init__(message, details, **ctx)


class UpstreamError(MelonScopeError):
    """Non-OK status or malformed payload from a provider or the image API.

    The message embeds the upstream status and body text verbatim, e.g.
    ``"Claude API error: 529 - overloaded"``.
    """

    code = ErrorCode.UPSTREAM_HTTP_ERROR
    recoverable = True
    status_code = 502

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        service: Optional[str] = None,
        upstream_status: Optional[int] = None,
        error_type: Optional[str] = None,
        **context: Any,
    ):
        # Set appropriate code based on error type
        if error_type == "network":
            code = ErrorCode.UPSTREAM_NETWORK_ERROR
        elif error_type == "payload":
            code = ErrorCode.UPSTREAM_INVALID_PAYLOAD
        elif error_type == "image":
            code = ErrorCode.UPSTREAM_IMAGE_FAILED
        else:
            code = ErrorCode.UPSTREAM_HTTP_ERROR

        self.upstream_status = upstream_status

        ctx = {**context}
        if service:
            ctx["service"] = service
        if upstream_status:
            ctx["upstream_status"] = upstream_status
        super().__init__(message, details, code=code, **ctx)


class LLMError(MelonScopeError):
    """Model returned output the orchestration cannot use."""

    code = ErrorCode.LLM_UNAVAILABLE
    recoverable = False
    status_code = 502

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        model: Optional[str] = None,
        error_type: Optional[str] = None,
        **context: Any,
    ):
        if error_type == "invalid":
            code = ErrorCode.LLM_RESPONSE_INVALID
        else:
            code = ErrorCode.LLM_UNAVAILABLE

        ctx = {**context}
        if model:
            ctx["model"] = model
        super().__init__(message, details, code=code, **ctx)
