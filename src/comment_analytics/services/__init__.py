"""
Services Package
Business logic layer for YouTube Comment Analytics
"""

from .base_service import BaseService
from .comment_pipeline import CommentPipeline, RelevanceTopStrategy, LatestByTimeStrategy
from .sentiment_service import BatchSentimentAnalyzer, make_batches, apply_default_sentiment
from .analytics_service import AnalyticsService, compute_analytics, compute_creator_analytics
from .language_detector import detect_language
from .exceptions import (
    # Base
    ServiceError,
    # Resource Errors
    ResourceNotFoundError,
    # Validation Errors
    ValidationError,
    # External Service Errors
    ExternalServiceError,
    YouTubeAPIError,
    RateLimitExceededError,
    ClassificationError,
    # Utility Functions
    error_to_http_status,
    is_client_error,
)

__all__ = [
    # Base Classes
    "BaseService",
    # Services
    "CommentPipeline",
    "RelevanceTopStrategy",
    "LatestByTimeStrategy",
    "BatchSentimentAnalyzer",
    "AnalyticsService",
    # Pure functions
    "make_batches",
    "apply_default_sentiment",
    "compute_analytics",
    "compute_creator_analytics",
    "detect_language",
    # Exceptions
    "ServiceError",
    "ResourceNotFoundError",
    "ValidationError",
    "ExternalServiceError",
    "YouTubeAPIError",
    "RateLimitExceededError",
    "ClassificationError",
    "error_to_http_status",
    "is_client_error",
]
