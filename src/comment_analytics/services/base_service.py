"""
Base Service
Shared logging, validation and error translation for service classes
"""

import logging
from typing import Any, Dict, Optional

from comment_analytics.services.exceptions import ServiceError, ValidationError


class BaseService:
    """
    Base class for business-logic services

    Provides:
    - Per-service logger
    - Common input validation helpers
    - Translation of unexpected errors into ServiceError
    """

    def __init__(self, config=None):
        self.config = config
        self.logger = logging.getLogger(f"comment_analytics.services.{self.get_service_name()}")

    def get_service_name(self) -> str:
        return self.__class__.__name__.lower()

    # ========================================================================
    # Logging
    # ========================================================================

    def log_debug(self, message: str, **context: Any) -> None:
        self.logger.debug(message, extra={"context": context} if context else None)

    def log_info(self, message: str, **context: Any) -> None:
        self.logger.info(message, extra={"context": context} if context else None)

    def log_warning(self, message: str, **context: Any) -> None:
        self.logger.warning(message, extra={"context": context} if context else None)

    def log_error(self, message: str, error: Optional[Exception] = None) -> None:
        self.logger.error(f"{message}: {error}" if error else message, exc_info=error)

    # ========================================================================
    # Validation
    # ========================================================================

    def validate_positive(self, value: int, field_name: str) -> None:
        if value is None or value < 1:
            raise ValidationError(field_name, f"{field_name} must be positive", value)

    # ========================================================================
    # Error Handling
    # ========================================================================

    def handle_error(
        self, error: Exception, operation: str, context: Optional[Dict[str, Any]] = None
    ) -> ServiceError:
        """
        Translate an exception raised during ``operation`` into a ServiceError

        ServiceErrors pass through unchanged; anything else is logged with its
        traceback and wrapped so the boundary can answer with a generic message.
        """
        if isinstance(error, ServiceError):
            return error

        self.log_error(f"Unexpected error in {self.get_service_name()}.{operation}", error=error)
        return ServiceError(
            f"{operation} failed",
            details={"operation": operation, **(context or {})},
        )
