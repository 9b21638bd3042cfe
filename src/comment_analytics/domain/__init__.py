# src/comment_analytics/domain/__init__.py
"""
Domain layer: value objects and collaborator interfaces.

    from comment_analytics.domain import Comment, CommentSource, ...
"""
from .interfaces import (  # re-export for convenience
    CommentSource,
    SentimentClassifier,
    VideoStatisticsSource,
    ReplyComposer,
)
from .models import (
    MAX_CLASSIFIER_BATCH,
    Sentiment,
    Comment,
    CommentBatch,
    VideoStatistics,
    SentimentDistribution,
    EngagementTrendPoint,
    ChannelComparison,
    AnalyticsResult,
    CreatorAnalytics,
    DistributionView,
    DisplayPage,
)

__all__ = [
    "CommentSource",
    "SentimentClassifier",
    "VideoStatisticsSource",
    "ReplyComposer",
    "MAX_CLASSIFIER_BATCH",
    "Sentiment",
    "Comment",
    "CommentBatch",
    "VideoStatistics",
    "SentimentDistribution",
    "EngagementTrendPoint",
    "ChannelComparison",
    "AnalyticsResult",
    "CreatorAnalytics",
    "DistributionView",
    "DisplayPage",
]
