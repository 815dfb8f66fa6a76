"""
Parse AI - Custom Exceptions.

Centralized exception handling with standardized error responses.

Pipeline operations do not raise these for expected failures (bad URLs,
unparsable files, model outages); those are returned as typed values.
Exceptions are reserved for the HTTP surface and for the Gemini wrapper,
whose errors the analysis engine absorbs.
"""

from typing import Any
from uuid import UUID


class ParseAIException(Exception):
    """Base exception for Parse AI."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
        request_id: UUID | None = None,
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        self.request_id = request_id
        super().__init__(message)


class ValidationException(ParseAIException):
    """Raised for validation errors."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details={"errors": errors} if errors else None,
        )


class FeatureDisabledException(ParseAIException):
    """Raised when a feature flag is disabled."""

    def __init__(self, feature_name: str):
        super().__init__(
            code="FEATURE_DISABLED",
            message=f"Feature '{feature_name}' is currently disabled",
            status_code=503,
            details={"feature": feature_name},
        )


class ExternalServiceException(ParseAIException):
    """Raised when an external service fails."""

    def __init__(self, service_name: str, message: str):
        super().__init__(
            code="EXTERNAL_SERVICE_ERROR",
            message=f"{service_name} error: {message}",
            status_code=502,
            details={"service": service_name},
        )


class ModelNotConfiguredException(ParseAIException):
    """Raised when a model call is attempted without credentials."""

    def __init__(self):
        super().__init__(
            code="MODEL_NOT_CONFIGURED",
            message="No Gemini API key configured. Set GEMINI_API_KEY to enable model responses.",
            status_code=503,
        )
