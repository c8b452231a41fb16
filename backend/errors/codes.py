"""
Error codes for MelonScope.

Provides a standardized taxonomy of error codes organized by category.
Use these codes consistently across all error responses.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes for MelonScope.

    Categories:
    - VALIDATION_*: Request shape errors (HTTP 400)
    - CONFIG_*: Missing or invalid configuration (HTTP 500)
    - UPSTREAM_*: Provider / image API failures (HTTP 502)
    - LLM_*: Unusable model output (HTTP 502)
    - INTERNAL_*: Internal/unexpected errors (HTTP 500)
    """

    # Validation errors (input checking)
    VALIDATION_MISSING_PARAM = "VALIDATION_MISSING_PARAM"
    VALIDATION_INVALID_TYPE = "VALIDATION_INVALID_TYPE"
    VALIDATION_UNKNOWN_PROVIDER = "VALIDATION_UNKNOWN_PROVIDER"
    VALIDATION_INVALID_FORMAT = "VALIDATION_INVALID_FORMAT"

    # Configuration errors
    CONFIG_MISSING_CREDENTIAL = "CONFIG_MISSING_CREDENTIAL"

    # Upstream errors (provider and image APIs)
    UPSTREAM_HTTP_ERROR = "UPSTREAM_HTTP_ERROR"
    UPSTREAM_NETWORK_ERROR = "UPSTREAM_NETWORK_ERROR"
    UPSTREAM_INVALID_PAYLOAD = "UPSTREAM_INVALID_PAYLOAD"
    UPSTREAM_IMAGE_FAILED = "UPSTREAM_IMAGE_FAILED"

    # LLM errors (model output)
    LLM_RESPONSE_INVALID = "LLM_RESPONSE_INVALID"
    LLM_UNAVAILABLE = "LLM_UNAVAILABLE"

    # Internal errors (unexpected failures)
    INTERNAL_UNEXPECTED = "INTERNAL_UNEXPECTED"
