"""Shared error types and helpers."""

from plantnamer.utils.errors import (
    ConfigurationError,
    ErrorCode,
    InvalidInput,
    ParseFailure,
    PlantNamerError,
    RateLimited,
    UpstreamFailure,
    classify_exception,
)

__all__ = [
    "ConfigurationError",
    "ErrorCode",
    "InvalidInput",
    "ParseFailure",
    "PlantNamerError",
    "RateLimited",
    "UpstreamFailure",
    "classify_exception",
]
