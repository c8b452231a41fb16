"""
Standard error response builders for MelonScope.

Every failed API call answers with the same JSON envelope.
"""

from .codes import ErrorCode
from .exceptions import MelonScopeError

GENERIC_ERROR_MESSAGE = "Internal server error"


def error_response(error: MelonScopeError | Exception) -> dict:
    """Build the standard error envelope.

    Details and context stay in the logs; the client only sees the message.

    Example:
        >>> from errors import ValidationError, error_response
        >>> error_response(ValidationError("Missing model", parameter="model"))
        {"error": "Missing model", "code": "VALIDATION_MISSING_PARAM"}
    """
    if isinstance(error, MelonScopeError):
        return {"error": error.message, "code": error.code.value}

    # Never leak internals of unexpected exceptions
    return {"error": GENERIC_ERROR_MESSAGE, "code": ErrorCode.INTERNAL_UNEXPECTED.value}
