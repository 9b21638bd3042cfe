"""
Analytics Service
Derived engagement / virality metrics from raw video counters
"""

import math
from collections import Counter
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from comment_analytics.domain.interfaces import VideoStatisticsSource
from comment_analytics.domain.models import (
    AnalyticsResult,
    ChannelComparison,
    Comment,
    CreatorAnalytics,
    EngagementTrendPoint,
    SentimentDistribution,
    VideoStatistics,
)
from comment_analytics.services.base_service import BaseService
from comment_analytics.services.comment_pipeline import CommentPipeline
from comment_analytics.services.exceptions import ResourceNotFoundError, ServiceError
from comment_analytics.services.validators import validate_channel_id, validate_video_id

# Coarse industry-average multipliers, not measured values
REACH_MULTIPLIER = 1.2
IMPRESSIONS_MULTIPLIER = 3.5

DEFAULT_POSTING_HOUR = 14
ENGAGEMENT_TREND_LENGTH = 7
MEANINGFUL_COMMENT_MIN_LENGTH = 20
_SPAM_MARKERS = ("first", "🔥🔥🔥")

_SECONDS_PER_DAY = 86400
_SECONDS_PER_HOUR = 3600


# ============================================================================
# Metric Helpers
# ============================================================================


def _percent(numerator: float, denominator: float, digits: int = 2) -> float:
    """numerator / denominator * 100, rounded; 0 for a zero denominator"""
    if not denominator:
        return 0.0
    return round(numerator / denominator * 100, digits)


def _utc(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


def calculate_engagement_rate(video: VideoStatistics) -> float:
    return _percent(video.like_count + video.comment_count, video.view_count)


def calculate_days_since_publish(video: VideoStatistics, now: Optional[datetime] = None) -> int:
    """Whole days since publish, at least 1"""
    now = _utc(now or datetime.now(timezone.utc))
    elapsed = (now - _utc(video.published_at)).total_seconds()
    return max(1, math.floor(elapsed / _SECONDS_PER_DAY))


def calculate_comment_velocity(video: VideoStatistics, now: Optional[datetime] = None) -> int:
    """Comments per hour since publish, at least 1 hour elapsed"""
    now = _utc(now or datetime.now(timezone.utc))
    elapsed = (now - _utc(video.published_at)).total_seconds()
    hours = max(1.0, elapsed / _SECONDS_PER_HOUR)
    return int(round(video.comment_count / hours))


def calculate_performance_score(video: VideoStatistics) -> int:
    """Interactions per ten thousand views, capped at 100"""
    if not video.view_count:
        return 0
    interactions = video.like_count + video.comment_count
    return min(100, int(round(interactions / video.view_count * 10000)))


def calculate_engagement_trend(
    videos: Sequence[VideoStatistics], length: int = ENGAGEMENT_TREND_LENGTH
) -> List[EngagementTrendPoint]:
    """Engagement rate of the most recent uploads, oldest first"""
    recent = sorted(videos, key=lambda v: _utc(v.published_at))[-length:]
    return [
        EngagementTrendPoint(
            video_id=v.video_id,
            published_at=v.published_at,
            engagement_rate=calculate_engagement_rate(v),
        )
        for v in recent
    ]


def derive_best_posting_hour(videos: Sequence[VideoStatistics]) -> int:
    """Most frequent UTC publish hour; earliest hour wins ties"""
    if not videos:
        return DEFAULT_POSTING_HOUR

    hours = Counter(_utc(video.published_at).hour for video in videos)
    best_count = max(hours.values())
    return min(hour for hour, count in hours.items() if count == best_count)


def compare_with_channel(
    video: VideoStatistics, sibling_videos: Sequence[VideoStatistics]
) -> Optional[ChannelComparison]:
    """Roll up the channel's other uploads; None when there are none"""
    others = [v for v in sibling_videos if v.video_id != video.video_id]
    if not others:
        return None

    rates = {v.video_id: calculate_engagement_rate(v) for v in others}
    average_rate = round(sum(rates.values()) / len(rates), 2)
    average_views = round(sum(v.view_count for v in others) / len(others), 2)

    return ChannelComparison(
        video_count=len(others),
        average_engagement_rate=average_rate,
        average_views=average_views,
        engagement_vs_average=round(calculate_engagement_rate(video) - average_rate, 2),
        best_video_id=max(rates, key=rates.get),
        worst_video_id=min(rates, key=rates.get),
        best_posting_hour=derive_best_posting_hour(others),
        engagement_trend=calculate_engagement_trend(others + [video]),
    )


# ============================================================================
# Aggregators
# ============================================================================


def compute_analytics(
    video: VideoStatistics,
    sentiment_distribution: Optional[SentimentDistribution] = None,
    sibling_videos: Optional[Sequence[VideoStatistics]] = None,
    now: Optional[datetime] = None,
) -> AnalyticsResult:
    """
    Derive engagement and virality metrics for a single video.

    Every ratio is 0 when the video has no views. Velocity uses whole days
    since publish (minimum 1) and the virality score combines the square root
    of the unrounded velocity with the rounded engagement rate, capped at 100.

    Args:
        video: Raw video counters
        sentiment_distribution: Optional distribution to fold in
        sibling_videos: Optional other uploads of the same channel
        now: Reference instant (defaults to the current UTC time)

    Returns:
        Immutable AnalyticsResult
    """
    views = video.view_count
    engagement_rate = calculate_engagement_rate(video)
    days = calculate_days_since_publish(video, now)
    raw_velocity = views / days

    virality = min(100.0, math.sqrt(raw_velocity) * engagement_rate / 10)

    positive_percentage = None
    if sentiment_distribution is not None:
        positive_percentage = _percent(
            sentiment_distribution.positive, sentiment_distribution.total, digits=1
        )

    return AnalyticsResult(
        video_id=video.video_id,
        engagement_rate=engagement_rate,
        like_to_view_ratio=_percent(video.like_count, views),
        comment_to_view_ratio=_percent(video.comment_count, views),
        days_since_publish=days,
        view_velocity=int(round(raw_velocity)),
        virality_score=round(virality, 1),
        estimated_reach=int(round(views * REACH_MULTIPLIER)),
        estimated_impressions=int(round(views * IMPRESSIONS_MULTIPLIER)),
        comment_velocity=calculate_comment_velocity(video, now),
        performance_score=calculate_performance_score(video),
        sentiment=sentiment_distribution,
        positive_percentage=positive_percentage,
        channel=compare_with_channel(video, sibling_videos) if sibling_videos else None,
    )


def is_meaningful_comment(comment: Comment) -> bool:
    """Substantial comments a creator would want to answer"""
    text = comment.text.lower()
    return len(text) > MEANINGFUL_COMMENT_MIN_LENGTH and not any(
        marker in text for marker in _SPAM_MARKERS
    )


def compute_creator_analytics(
    video: VideoStatistics,
    comments: Sequence[Comment],
    sibling_videos: Optional[Sequence[VideoStatistics]] = None,
    now: Optional[datetime] = None,
) -> CreatorAnalytics:
    """Creator-level analytics over a video and its classified comments"""
    distribution = SentimentDistribution.from_comments(comments)
    views = video.view_count

    languages: Dict[str, int] = Counter(
        comment.detected_language for comment in comments if comment.detected_language
    )
    meaningful = sum(1 for comment in comments if is_meaningful_comment(comment))

    return CreatorAnalytics(
        metrics=compute_analytics(video, distribution, sibling_videos, now),
        total_comments=video.comment_count,
        comments_retrieved=len(comments),
        likes_per_thousand_views=(
            round(video.like_count / views * 1000, 1) if views else 0.0
        ),
        comment_response_rate=_percent(meaningful, len(comments), digits=1),
        subscriber_growth_potential=_percent(
            video.like_count + video.comment_count * 2, views
        ),
        language_breakdown=dict(languages),
    )


# ============================================================================
# Service
# ============================================================================


class AnalyticsService(BaseService):
    """
    Analytics orchestration

    Handles:
    - Identifier validation before any collaborator call
    - Video statistics and sibling-video lookups
    - Optional sentiment folding via the comment pipeline
    """

    def __init__(
        self,
        statistics_source: VideoStatisticsSource,
        pipeline: CommentPipeline,
        max_sibling_videos: int = 50,
        config=None,
    ):
        super().__init__(config=config)
        self.statistics = statistics_source
        self.pipeline = pipeline
        self.max_sibling_videos = max_sibling_videos

    def get_service_name(self) -> str:
        return "analytics"

    async def get_video_analytics(
        self,
        video_id: str,
        channel_id: Optional[str] = None,
        include_sentiment: bool = False,
    ) -> AnalyticsResult:
        """
        Compute analytics for a video

        Args:
            video_id: YouTube video ID
            channel_id: Channel whose other uploads are compared against
            include_sentiment: Fold in the relevance-ranked distribution

        Returns:
            AnalyticsResult
        """
        validate_video_id(video_id)
        if channel_id is not None:
            validate_channel_id(channel_id)

        try:
            video = await self.statistics.get_video(video_id)
            siblings = await self._load_siblings(channel_id)

            distribution = None
            if include_sentiment:
                comments = await self._load_comment_sample(video_id)
                if comments:
                    distribution = SentimentDistribution.from_comments(comments)
        except ServiceError:
            raise
        except Exception as e:
            raise self.handle_error(e, "get_video_analytics", {"video_id": video_id}) from e

        self.log_info(f"Computing analytics for {video_id}")
        return compute_analytics(video, distribution, siblings)

    async def get_creator_analytics(
        self, video_id: str, channel_id: Optional[str] = None
    ) -> CreatorAnalytics:
        """Creator-level analytics over the relevance-ranked comment sample"""
        validate_video_id(video_id)
        if channel_id is not None:
            validate_channel_id(channel_id)

        try:
            video = await self.statistics.get_video(video_id)
            siblings = await self._load_siblings(channel_id)
            comments = await self._load_comment_sample(video_id)
        except ServiceError:
            raise
        except Exception as e:
            raise self.handle_error(e, "get_creator_analytics", {"video_id": video_id}) from e

        return compute_creator_analytics(video, comments, siblings)

    async def _load_comment_sample(self, video_id: str) -> List[Comment]:
        """
        Relevance-ranked classified comments; empty when the video has none

        Only called once the video itself has been found, so a missing
        comment collection (disabled or empty) leaves the metrics intact.
        """
        try:
            view = await self.pipeline.fetch_for_distribution(video_id)
        except ResourceNotFoundError:
            self.log_info(f"No comments available for {video_id}, skipping sentiment")
            return []
        return view.comments

    async def _load_siblings(self, channel_id: Optional[str]) -> List[VideoStatistics]:
        if channel_id is None:
            return []
        return await self.statistics.get_channel_videos(
            channel_id, max_results=self.max_sibling_videos
        )
