"""
Unit Tests for CommentPipeline
Selection strategies, pagination and error paths
"""

import pytest
from unittest.mock import AsyncMock

from comment_analytics.domain.models import Sentiment
from comment_analytics.infrastructure.clients import StubSentimentClassifier
from comment_analytics.services.comment_pipeline import (
    CommentPipeline,
    LatestByTimeStrategy,
    RelevanceTopStrategy,
)
from comment_analytics.services.exceptions import ResourceNotFoundError, ValidationError
from comment_analytics.services.sentiment_service import BatchSentimentAnalyzer

from conftest import VIDEO_ID, FakeCommentSource, make_comment


@pytest.fixture
def classifier():
    return StubSentimentClassifier(Sentiment.POSITIVE, 0.9)


@pytest.fixture
def pipeline(source, classifier):
    return CommentPipeline(source, BatchSentimentAnalyzer(classifier))


class FailsOnIds:
    """Classifier that fails any batch containing one of ``ids``"""

    def __init__(self, ids):
        self.ids = set(ids)

    async def classify(self, batch):
        if self.ids & {c.id for c in batch}:
            raise RuntimeError("classifier down")
        return [c.annotate(Sentiment.NEGATIVE, 0.8, "en") for c in batch]


# ============================================================================
# Strategies
# ============================================================================


class TestStrategies:
    @pytest.mark.asyncio
    async def test_relevance_keeps_source_order(self, source, comments):
        selected = await RelevanceTopStrategy(limit=100).select(source, VIDEO_ID)

        assert [c.id for c in selected] == [c.id for c in comments[:100]]

    @pytest.mark.asyncio
    async def test_latest_is_newest_first(self, source):
        selected = await LatestByTimeStrategy(window=25).select(source, VIDEO_ID)

        assert len(selected) == 25
        assert selected[0].id == "c249"
        assert ("list_latest", VIDEO_ID, 25) in source.calls


# ============================================================================
# Distribution View
# ============================================================================


class TestFetchForDistribution:
    """Test the relevance-ranked distribution view"""

    @pytest.mark.asyncio
    async def test_classifies_top_100(self, pipeline, classifier):
        view = await pipeline.fetch_for_distribution(VIDEO_ID)

        assert len(view.comments) == 100
        assert view.distribution.positive == 100
        assert view.distribution.total == len(view.comments)
        assert classifier.calls == 1

    @pytest.mark.asyncio
    async def test_no_comments_is_not_found(self, classifier):
        pipeline = CommentPipeline(FakeCommentSource(), BatchSentimentAnalyzer(classifier))

        with pytest.raises(ResourceNotFoundError) as exc_info:
            await pipeline.fetch_for_distribution(VIDEO_ID)
        assert "not available" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_invalid_id_never_reaches_source(self, pipeline, source):
        with pytest.raises(ValidationError):
            await pipeline.fetch_for_distribution("bad id")

        assert source.calls == []

    @pytest.mark.asyncio
    async def test_analyzer_crash_falls_back_to_neutral(self, source):
        analyzer = AsyncMock()
        analyzer.analyze.side_effect = RuntimeError("event loop gone")
        pipeline = CommentPipeline(source, analyzer)

        view = await pipeline.fetch_for_distribution(VIDEO_ID)

        assert view.distribution.neutral == 100
        assert all(c.is_fallback for c in view.comments)


# ============================================================================
# Display View
# ============================================================================


class TestFetchForDisplay:
    """Test the time-ranked paginated display view"""

    @pytest.mark.asyncio
    async def test_first_page_uses_default_size(self, pipeline):
        page = await pipeline.fetch_for_display(VIDEO_ID)

        assert len(page.comments) == 25
        assert page.next_page_token is None
        assert page.total_available == 25
        assert page.total_analyzed == 25

    @pytest.mark.asyncio
    async def test_pagination(self, pipeline):
        page = await pipeline.fetch_for_display(VIDEO_ID, limit=10, page_token="10")

        assert [c.id for c in page.comments] == [f"c{i}" for i in range(239, 229, -1)]
        assert page.next_page_token == "20"

    @pytest.mark.asyncio
    async def test_last_page_has_no_token(self, pipeline):
        page = await pipeline.fetch_for_display(VIDEO_ID, limit=10, page_token="20")

        assert len(page.comments) == 5
        assert page.next_page_token is None

    @pytest.mark.asyncio
    async def test_offset_past_end_is_empty(self, pipeline):
        page = await pipeline.fetch_for_display(VIDEO_ID, limit=10, page_token="100")

        assert page.comments == []
        assert page.next_page_token is None

    @pytest.mark.asyncio
    async def test_display_only_uses_latest(self, pipeline, source):
        await pipeline.fetch_for_display(VIDEO_ID)

        assert [call[0] for call in source.calls] == ["list_latest"]

    @pytest.mark.asyncio
    async def test_total_analyzed_excludes_fallbacks(self):
        comments = [make_comment(i) for i in range(250)]
        source = FakeCommentSource(comments=comments)
        analyzer = BatchSentimentAnalyzer(FailsOnIds({"c249"}), batch_size=10)
        pipeline = CommentPipeline(source, analyzer)

        page = await pipeline.fetch_for_display(VIDEO_ID)

        assert page.total_available == 25
        assert page.total_analyzed == 15
        assert all(c.is_fallback for c in page.comments[:10])
        assert not any(c.is_fallback for c in page.comments[10:])

    @pytest.mark.asyncio
    async def test_invalid_limit(self, pipeline):
        with pytest.raises(ValidationError):
            await pipeline.fetch_for_display(VIDEO_ID, limit=0)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", ["next", "9" * 5000])
    async def test_invalid_page_token(self, pipeline, source, token):
        with pytest.raises(ValidationError):
            await pipeline.fetch_for_display(VIDEO_ID, page_token=token)

        assert source.calls == []

    @pytest.mark.asyncio
    async def test_no_comments_is_not_found(self, classifier):
        pipeline = CommentPipeline(FakeCommentSource(), BatchSentimentAnalyzer(classifier))

        with pytest.raises(ResourceNotFoundError):
            await pipeline.fetch_for_display(VIDEO_ID)
