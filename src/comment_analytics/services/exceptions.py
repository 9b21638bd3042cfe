"""
Service Exceptions
Typed error hierarchy shared by services, clients and the API boundary
"""

from typing import Any, Dict, Optional


class ServiceError(Exception):
    """Base class for all service-layer errors"""

    error_code = "SERVICE_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for API responses"""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


# ============================================================================
# Resource Errors
# ============================================================================


class ResourceNotFoundError(ServiceError):
    """Requested resource does not exist or is inaccessible"""

    error_code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource_type: str, resource_id: str, message: Optional[str] = None):
        super().__init__(
            message or f"{resource_type} not found: {resource_id}",
            details={"resource_type": resource_type, "resource_id": resource_id},
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ============================================================================
# Validation Errors
# ============================================================================


class ValidationError(ServiceError):
    """Malformed input, rejected before any collaborator call"""

    error_code = "VALIDATION_ERROR"

    def __init__(self, field: str, message: str, value: Any = None):
        details = {"field": field}
        if value is not None:
            details["value"] = value
        super().__init__(message, details=details)
        self.field = field
        self.value = value


# ============================================================================
# External Service Errors
# ============================================================================


class ExternalServiceError(ServiceError):
    """A collaborator (YouTube, LLM provider) failed"""

    error_code = "EXTERNAL_SERVICE_ERROR"

    def __init__(
        self,
        service_name: str,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        merged = {"service": service_name}
        if status_code is not None:
            merged["status_code"] = status_code
        merged.update(details or {})
        super().__init__(message, details=merged)
        self.service_name = service_name
        self.status_code = status_code


class YouTubeAPIError(ExternalServiceError):
    """YouTube Data API request failed"""

    error_code = "YOUTUBE_API_ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None, **details: Any):
        super().__init__("youtube", message, status_code=status_code, details=details)


class RateLimitExceededError(ExternalServiceError):
    """Upstream quota or rate limit exhausted"""

    error_code = "RATE_LIMIT_EXCEEDED"

    def __init__(self, service_name: str, message: str, retry_after: Optional[int] = None):
        super().__init__(
            service_name, message, status_code=429, details={"retry_after": retry_after}
        )
        self.retry_after = retry_after


class ClassificationError(ExternalServiceError):
    """LLM classification or generation call failed"""

    error_code = "CLASSIFICATION_ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None, **details: Any):
        super().__init__("llm", message, status_code=status_code, details=details)


# ============================================================================
# Utility Functions
# ============================================================================


def error_to_http_status(error: Exception) -> int:
    """Map a service exception to an HTTP status code"""
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, ResourceNotFoundError):
        return 404
    if isinstance(error, RateLimitExceededError):
        return 429
    if isinstance(error, ExternalServiceError):
        return 502
    return 500


def is_client_error(error: Exception) -> bool:
    """Whether the caller can fix the request (details are safe to return)"""
    return 400 <= error_to_http_status(error) < 500 and not isinstance(
        error, RateLimitExceededError
    )
