"""
Comment Pipeline
Source → batching → classification → distribution / display views
"""

from dataclasses import dataclass
from typing import List, Optional

from comment_analytics.domain.interfaces import CommentSource
from comment_analytics.domain.models import (
    Comment,
    DisplayPage,
    DistributionView,
    SentimentDistribution,
)
from comment_analytics.services.base_service import BaseService
from comment_analytics.services.exceptions import ResourceNotFoundError
from comment_analytics.services.sentiment_service import (
    BatchSentimentAnalyzer,
    apply_default_sentiment,
)
from comment_analytics.services.validators import parse_page_token, validate_video_id


# ============================================================================
# Selection Strategies
# ============================================================================


@dataclass(frozen=True)
class RelevanceTopStrategy:
    """Top-N comments in the source's own relevance order (summary charts)"""

    limit: int = 100

    async def select(self, source: CommentSource, video_id: str) -> List[Comment]:
        comments = await source.list_all(video_id)
        return list(comments[: self.limit])


@dataclass(frozen=True)
class LatestByTimeStrategy:
    """Newest-first window of comments (display feed)"""

    window: int = 25

    async def select(self, source: CommentSource, video_id: str) -> List[Comment]:
        comments = await source.list_latest(video_id, self.window)
        return list(comments[: self.window])


# ============================================================================
# Pipeline
# ============================================================================


class CommentPipeline(BaseService):
    """
    Comment sentiment pipeline

    Produces two views over the same source with deliberately different
    selection orders:
    - distribution: relevance-ranked top-N, fully classified
    - display: time-ranked latest-N, classified then paginated
    """

    def __init__(
        self,
        comment_source: CommentSource,
        analyzer: BatchSentimentAnalyzer,
        distribution_strategy: Optional[RelevanceTopStrategy] = None,
        display_strategy: Optional[LatestByTimeStrategy] = None,
        default_page_size: int = 25,
        config=None,
    ):
        super().__init__(config=config)
        self.source = comment_source
        self.analyzer = analyzer
        self.distribution_strategy = distribution_strategy or RelevanceTopStrategy()
        self.display_strategy = display_strategy or LatestByTimeStrategy()
        self.default_page_size = default_page_size

    def get_service_name(self) -> str:
        return "comment_pipeline"

    async def fetch_for_distribution(self, video_id: str) -> DistributionView:
        """
        Classify the relevance-ranked sample of a video's comments

        Args:
            video_id: YouTube video ID

        Returns:
            Classified comments and their sentiment distribution

        Raises:
            ValidationError: Malformed video ID
            ResourceNotFoundError: Video missing or without comments
        """
        validate_video_id(video_id)

        comments = await self.distribution_strategy.select(self.source, video_id)
        self._ensure_not_empty(comments, video_id)

        self.log_info(f"Processing top {len(comments)} comments of {video_id} for distribution")

        try:
            classified = await self.analyzer.analyze(comments)
        except Exception as e:
            self.log_error(f"Sentiment analysis failed for {video_id}, using neutral fallback", error=e)
            classified = apply_default_sentiment(comments)

        return DistributionView(
            video_id=video_id,
            comments=classified,
            distribution=SentimentDistribution.from_comments(classified),
        )

    async def fetch_for_display(
        self,
        video_id: str,
        limit: Optional[int] = None,
        page_token: Optional[str] = None,
    ) -> DisplayPage:
        """
        Classify the latest comments and return one page of them

        Args:
            video_id: YouTube video ID
            limit: Page size (defaults to the configured page size)
            page_token: Zero-based start offset as a decimal string

        Returns:
            DisplayPage with the next page token and analysis counts
        """
        validate_video_id(video_id)
        limit = self.default_page_size if limit is None else limit
        self.validate_positive(limit, "limit")
        start = parse_page_token(page_token)

        latest = await self.display_strategy.select(self.source, video_id)
        self._ensure_not_empty(latest, video_id)

        try:
            classified = await self.analyzer.analyze(latest)
        except Exception as e:
            self.log_error(f"Sentiment analysis failed for {video_id}, using neutral fallback", error=e)
            classified = apply_default_sentiment(latest)

        end = min(start + limit, len(classified))
        page = classified[start:end]
        next_page_token = str(end) if end < len(classified) else None

        return DisplayPage(
            video_id=video_id,
            comments=page,
            next_page_token=next_page_token,
            total_analyzed=sum(1 for comment in classified if not comment.is_fallback),
            total_available=len(latest),
        )

    def _ensure_not_empty(self, comments: List[Comment], video_id: str) -> None:
        if not comments:
            raise ResourceNotFoundError(
                "Comments",
                video_id,
                message="Comments not available or video not found",
            )
