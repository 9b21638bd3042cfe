"""
Domain models for the comment sentiment pipeline.

Plain frozen dataclasses: records are built by the comment source at fetch
time, annotated by the classifier (which produces new records) and discarded
at the end of the request. API routes convert them to Pydantic schemas.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

# Per-call maximum accepted by the sentiment classifier
MAX_CLASSIFIER_BATCH = 100

DEFAULT_CONFIDENCE = 0.5
DEFAULT_LANGUAGE = "en"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


@dataclass(frozen=True)
class Comment:
    """
    A top-level YouTube comment, optionally annotated with sentiment.

    Annotation fields stay ``None`` until the classifier (or the fallback)
    produces an annotated copy via :meth:`annotate`.
    """

    id: str
    text: str
    author_name: str
    like_count: int = 0
    published_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    author_avatar_url: Optional[str] = None
    author_channel_id: Optional[str] = None
    reply_count: Optional[int] = None

    sentiment: Optional[Sentiment] = None
    confidence: Optional[float] = None
    detected_language: Optional[str] = None
    is_fallback: bool = False

    def __post_init__(self):
        if self.like_count < 0:
            raise ValueError(f"like_count must be non-negative, got {self.like_count}")
        if self.confidence is not None and not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")

    @property
    def is_annotated(self) -> bool:
        return self.sentiment is not None

    def annotate(
        self, sentiment: Sentiment, confidence: float, detected_language: str
    ) -> "Comment":
        """Return a classified copy of this comment"""
        return replace(
            self,
            sentiment=Sentiment(sentiment),
            confidence=confidence,
            detected_language=detected_language,
            is_fallback=False,
        )

    def with_default_sentiment(self) -> "Comment":
        """Return a copy carrying the neutral fallback annotation"""
        return replace(
            self,
            sentiment=Sentiment.NEUTRAL,
            confidence=DEFAULT_CONFIDENCE,
            detected_language=DEFAULT_LANGUAGE,
            is_fallback=True,
        )


@dataclass(frozen=True)
class CommentBatch:
    """An ordered slice of comments submitted to the classifier in one call"""

    index: int
    comments: Tuple[Comment, ...]

    def __post_init__(self):
        if len(self.comments) > MAX_CLASSIFIER_BATCH:
            raise ValueError(
                f"Batch {self.index} holds {len(self.comments)} comments "
                f"(max {MAX_CLASSIFIER_BATCH})"
            )

    def __len__(self) -> int:
        return len(self.comments)


@dataclass(frozen=True)
class VideoStatistics:
    """Snapshot of a video's public counters"""

    video_id: str
    view_count: int
    like_count: int
    comment_count: int
    published_at: datetime
    title: str = ""
    channel_id: Optional[str] = None

    def __post_init__(self):
        for name in ("view_count", "like_count", "comment_count"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")


@dataclass(frozen=True)
class SentimentDistribution:
    positive: int = 0
    neutral: int = 0
    negative: int = 0

    @property
    def total(self) -> int:
        return self.positive + self.neutral + self.negative

    @classmethod
    def from_comments(cls, comments: Sequence[Comment]) -> "SentimentDistribution":
        """Count annotated comments per class (unannotated ones are skipped)"""
        counts = {sentiment: 0 for sentiment in Sentiment}
        for comment in comments:
            if comment.is_annotated:
                counts[comment.sentiment] += 1
        return cls(
            positive=counts[Sentiment.POSITIVE],
            neutral=counts[Sentiment.NEUTRAL],
            negative=counts[Sentiment.NEGATIVE],
        )

    def percentages(self) -> Dict[str, float]:
        """Share of each class in percent, 1 decimal; all zero when empty"""
        total = self.total
        return {
            sentiment.value: (
                round(getattr(self, sentiment.value) / total * 100, 1) if total else 0.0
            )
            for sentiment in Sentiment
        }

    def to_dict(self) -> Dict[str, int]:
        return {
            "positive": self.positive,
            "neutral": self.neutral,
            "negative": self.negative,
            "total": self.total,
        }


@dataclass(frozen=True)
class EngagementTrendPoint:
    """Engagement rate of one upload, oldest first in a trend"""

    video_id: str
    published_at: datetime
    engagement_rate: float


@dataclass(frozen=True)
class ChannelComparison:
    """How a video stands against the channel's other uploads"""

    video_count: int
    average_engagement_rate: float
    average_views: float
    engagement_vs_average: float
    best_video_id: Optional[str] = None
    worst_video_id: Optional[str] = None
    best_posting_hour: int = 14
    engagement_trend: List[EngagementTrendPoint] = field(default_factory=list)


@dataclass(frozen=True)
class AnalyticsResult:
    video_id: str
    engagement_rate: float
    like_to_view_ratio: float
    comment_to_view_ratio: float
    days_since_publish: int
    view_velocity: int
    virality_score: float
    estimated_reach: int
    estimated_impressions: int
    comment_velocity: int
    performance_score: int
    sentiment: Optional[SentimentDistribution] = None
    positive_percentage: Optional[float] = None
    channel: Optional[ChannelComparison] = None


@dataclass(frozen=True)
class CreatorAnalytics:
    """Creator-level variant: video metrics plus comment-derived signals"""

    metrics: AnalyticsResult
    total_comments: int
    comments_retrieved: int
    likes_per_thousand_views: float
    comment_response_rate: float
    subscriber_growth_potential: float
    language_breakdown: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class DistributionView:
    """Relevance-ranked classified sample used for summary charts"""

    video_id: str
    comments: List[Comment]
    distribution: SentimentDistribution


@dataclass(frozen=True)
class DisplayPage:
    """One page of the time-ranked classified feed"""

    video_id: str
    comments: List[Comment]
    next_page_token: Optional[str]
    total_analyzed: int
    total_available: int


__all__ = [
    "MAX_CLASSIFIER_BATCH",
    "DEFAULT_CONFIDENCE",
    "DEFAULT_LANGUAGE",
    "Sentiment",
    "Comment",
    "CommentBatch",
    "VideoStatistics",
    "SentimentDistribution",
    "ChannelComparison",
    "AnalyticsResult",
    "CreatorAnalytics",
    "DistributionView",
    "DisplayPage",
]
