"""
API Schemas
Pydantic request/response models and domain → schema converters
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from comment_analytics.domain.models import (
    AnalyticsResult,
    ChannelComparison,
    Comment,
    CreatorAnalytics,
    DisplayPage,
    DistributionView,
    SentimentDistribution,
)


# ============================================================================
# Response Models
# ============================================================================


class CommentSchema(BaseModel):
    """Sentiment-annotated comment"""

    id: str
    text: str
    author_name: str
    author_avatar_url: Optional[str] = None
    author_channel_id: Optional[str] = None
    like_count: int = 0
    reply_count: Optional[int] = None
    published_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    sentiment: Optional[str] = None
    confidence: Optional[float] = None
    detected_language: Optional[str] = None
    is_fallback: bool = False


class SentimentDistributionSchema(BaseModel):
    positive: int
    neutral: int
    negative: int
    total: int
    percentages: Dict[str, float] = Field(default_factory=dict)


class DisplayPageResponse(BaseModel):
    """Paginated, time-ranked comment feed"""

    video_id: str
    comments: List[CommentSchema]
    next_page_token: Optional[str] = None
    total_analyzed: int
    total_available: int


class DistributionResponse(BaseModel):
    """Relevance-ranked sample with its sentiment breakdown"""

    video_id: str
    comments: List[CommentSchema]
    distribution: SentimentDistributionSchema


class EngagementTrendPointSchema(BaseModel):
    video_id: str
    published_at: datetime
    engagement_rate: float


class ChannelComparisonSchema(BaseModel):
    video_count: int
    average_engagement_rate: float
    average_views: float
    engagement_vs_average: float
    best_video_id: Optional[str] = None
    worst_video_id: Optional[str] = None
    best_posting_hour: int
    engagement_trend: List[EngagementTrendPointSchema] = Field(default_factory=list)


class AnalyticsResponse(BaseModel):
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
    sentiment: Optional[SentimentDistributionSchema] = None
    positive_percentage: Optional[float] = None
    channel: Optional[ChannelComparisonSchema] = None


class CreatorAnalyticsResponse(BaseModel):
    metrics: AnalyticsResponse
    total_comments: int
    comments_retrieved: int
    likes_per_thousand_views: float
    comment_response_rate: float
    subscriber_growth_potential: float
    language_breakdown: Dict[str, int] = Field(default_factory=dict)


# ============================================================================
# Request Models
# ============================================================================


class ReplyRequest(BaseModel):
    """Request a suggested creator reply"""

    comment_text: str = Field(..., min_length=1, description="Comment to answer")
    video_title: str = Field(default="", description="Title of the video")
    author_name: str = Field(default="", description="Comment author")
    sentiment: Optional[str] = Field(default=None, description="Known sentiment, if any")
    tone: str = Field(default="friendly", description="friendly/professional/casual/humorous")


class ReplyResponse(BaseModel):
    reply: str
    tone: str


# ============================================================================
# Converters
# ============================================================================


def comment_to_schema(comment: Comment) -> CommentSchema:
    return CommentSchema(
        id=comment.id,
        text=comment.text,
        author_name=comment.author_name,
        author_avatar_url=comment.author_avatar_url,
        author_channel_id=comment.author_channel_id,
        like_count=comment.like_count,
        reply_count=comment.reply_count,
        published_at=comment.published_at,
        updated_at=comment.updated_at,
        sentiment=comment.sentiment.value if comment.sentiment else None,
        confidence=comment.confidence,
        detected_language=comment.detected_language,
        is_fallback=comment.is_fallback,
    )


def distribution_to_schema(distribution: SentimentDistribution) -> SentimentDistributionSchema:
    return SentimentDistributionSchema(
        **distribution.to_dict(), percentages=distribution.percentages()
    )


def display_page_to_response(page: DisplayPage) -> DisplayPageResponse:
    return DisplayPageResponse(
        video_id=page.video_id,
        comments=[comment_to_schema(c) for c in page.comments],
        next_page_token=page.next_page_token,
        total_analyzed=page.total_analyzed,
        total_available=page.total_available,
    )


def distribution_view_to_response(view: DistributionView) -> DistributionResponse:
    return DistributionResponse(
        video_id=view.video_id,
        comments=[comment_to_schema(c) for c in view.comments],
        distribution=distribution_to_schema(view.distribution),
    )


def _channel_to_schema(channel: Optional[ChannelComparison]) -> Optional[ChannelComparisonSchema]:
    if channel is None:
        return None
    return ChannelComparisonSchema(
        video_count=channel.video_count,
        average_engagement_rate=channel.average_engagement_rate,
        average_views=channel.average_views,
        engagement_vs_average=channel.engagement_vs_average,
        best_video_id=channel.best_video_id,
        worst_video_id=channel.worst_video_id,
        best_posting_hour=channel.best_posting_hour,
        engagement_trend=[
            EngagementTrendPointSchema(
                video_id=point.video_id,
                published_at=point.published_at,
                engagement_rate=point.engagement_rate,
            )
            for point in channel.engagement_trend
        ],
    )


def analytics_to_response(result: AnalyticsResult) -> AnalyticsResponse:
    return AnalyticsResponse(
        video_id=result.video_id,
        engagement_rate=result.engagement_rate,
        like_to_view_ratio=result.like_to_view_ratio,
        comment_to_view_ratio=result.comment_to_view_ratio,
        days_since_publish=result.days_since_publish,
        view_velocity=result.view_velocity,
        virality_score=result.virality_score,
        estimated_reach=result.estimated_reach,
        estimated_impressions=result.estimated_impressions,
        comment_velocity=result.comment_velocity,
        performance_score=result.performance_score,
        sentiment=distribution_to_schema(result.sentiment) if result.sentiment else None,
        positive_percentage=result.positive_percentage,
        channel=_channel_to_schema(result.channel),
    )


def creator_analytics_to_response(result: CreatorAnalytics) -> CreatorAnalyticsResponse:
    return CreatorAnalyticsResponse(
        metrics=analytics_to_response(result.metrics),
        total_comments=result.total_comments,
        comments_retrieved=result.comments_retrieved,
        likes_per_thousand_views=result.likes_per_thousand_views,
        comment_response_rate=result.comment_response_rate,
        subscriber_growth_potential=result.subscriber_growth_potential,
        language_breakdown=result.language_breakdown,
    )
