"""Error taxonomy and helpers for consistent error responses."""

import logging
from enum import Enum
from typing import Any

import httpx
import openai
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Standard error codes used in logs and exceptions."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    RATE_LIMITED = "RATE_LIMITED"
    PARSE_FAILURE = "PARSE_FAILURE"

    # Upstream (model provider) errors
    UPSTREAM_FAILURE = "UPSTREAM_FAILURE"
    UPSTREAM_AUTH = "UPSTREAM_AUTH"
    UPSTREAM_RATE_LIMITED = "UPSTREAM_RATE_LIMITED"
    UPSTREAM_UNAVAILABLE = "UPSTREAM_UNAVAILABLE"
    TIMEOUT = "TIMEOUT"

    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorResponse(BaseModel):
    """HTTP error response body."""

    error: str


# Messages shown to callers, by error code
USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.CONFIGURATION_ERROR: "Missing OPENAI_API_KEY environment variable.",
    ErrorCode.INVALID_INPUT: "Invalid description",
    ErrorCode.RATE_LIMITED: "Slow down a sprout. Try again in a moment.",
}

DEFAULT_USER_MESSAGE = "Something went wrong"


def get_user_message(code: ErrorCode) -> str:
    """Get the caller-facing message for an error code.

    Codes without a dedicated message share DEFAULT_USER_MESSAGE.
    """
    return USER_MESSAGES.get(code, DEFAULT_USER_MESSAGE)


class PlantNamerError(Exception):
    """Base class for errors that map onto an HTTP response.

    Attributes:
        code: Error code for logs.
        status_code: HTTP status returned to the caller.
        message: Caller-facing message, never internal detail.
    """

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    status_code: int = 500

    def __init__(self, detail: str | None = None):
        self.message = get_user_message(self.code)
        self.detail = detail
        super().__init__(detail or self.message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=self.message)


class ConfigurationError(PlantNamerError):
    """The model API credential is not configured."""

    code = ErrorCode.CONFIGURATION_ERROR
    status_code = 500


class InvalidInput(PlantNamerError):
    """Malformed body or out-of-range description."""

    code = ErrorCode.INVALID_INPUT
    status_code = 400


class RateLimited(PlantNamerError):
    """Client asked again before its cooldown elapsed."""

    code = ErrorCode.RATE_LIMITED
    status_code = 429


class ParseFailure(PlantNamerError):
    """Model output did not match the two-line format.

    Recovered inside the generation pipeline; never reaches a caller.
    """

    code = ErrorCode.PARSE_FAILURE


class UpstreamFailure(PlantNamerError):
    """The model call itself failed (network, auth, provider error).

    Attributes:
        upstream_code: Classification of the underlying exception.
    """

    code = ErrorCode.UPSTREAM_FAILURE
    status_code = 500

    def __init__(self, original_error: Exception):
        self.original_error = original_error
        self.upstream_code = classify_exception(original_error)
        super().__init__(f"{type(original_error).__name__}: {original_error}")


def classify_exception(exc: Exception) -> ErrorCode:
    """Classify an exception raised while calling the model.

    Args:
        exc: The exception to classify.

    Returns:
        Appropriate error code.
    """
    if isinstance(exc, PlantNamerError):
        return exc.code

    # OpenAI SDK errors
    if isinstance(exc, openai.APITimeoutError):
        return ErrorCode.TIMEOUT
    if isinstance(exc, openai.APIConnectionError):
        return ErrorCode.UPSTREAM_UNAVAILABLE
    if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return ErrorCode.UPSTREAM_AUTH
    if isinstance(exc, openai.RateLimitError):
        return ErrorCode.UPSTREAM_RATE_LIMITED
    if isinstance(exc, openai.APIStatusError):
        if exc.status_code >= 500:
            return ErrorCode.UPSTREAM_UNAVAILABLE
        return ErrorCode.UPSTREAM_FAILURE

    # Raw transport errors
    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        if status_code in (401, 403):
            return ErrorCode.UPSTREAM_AUTH
        elif status_code == 429:
            return ErrorCode.UPSTREAM_RATE_LIMITED
        elif status_code >= 500:
            return ErrorCode.UPSTREAM_UNAVAILABLE
        return ErrorCode.UPSTREAM_FAILURE

    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return ErrorCode.TIMEOUT

    if isinstance(exc, (httpx.ConnectError, ConnectionError)):
        return ErrorCode.UPSTREAM_UNAVAILABLE

    return ErrorCode.INTERNAL_ERROR


def log_error(
    exc: Exception,
    code: ErrorCode | None = None,
    request_id: str | None = None,
    **context: Any,
) -> None:
    """Log an error with context.

    Logs the full exception for debugging; callers only ever see the
    generic message for the code.

    Args:
        exc: The exception that occurred.
        code: Optional pre-classified error code.
        request_id: Optional request ID.
        **context: Additional context to include in log.
    """
    if code is None:
        code = classify_exception(exc)

    log_extra = {
        "error_code": code.value,
        "error_type": type(exc).__name__,
        "request_id": request_id,
        **context,
    }

    if code == ErrorCode.INTERNAL_ERROR:
        logger.exception("Internal error occurred", extra=log_extra)
    else:
        logger.error(f"Request error: {exc}", extra=log_extra)
