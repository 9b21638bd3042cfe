"""
Service Dependency Injection
FastAPI dependency providers for services
"""

import logging
from functools import lru_cache

from comment_analytics.app.config import get_config
from comment_analytics.domain.interfaces import ReplyComposer, SentimentClassifier
from comment_analytics.infrastructure.clients import (
    GroqChatClient,
    GroqReplyComposer,
    GroqSentimentClassifier,
    StubReplyComposer,
    StubSentimentClassifier,
    YouTubeDataSource,
    create_youtube_client,
)
from comment_analytics.services import (
    AnalyticsService,
    BatchSentimentAnalyzer,
    CommentPipeline,
    LatestByTimeStrategy,
    RelevanceTopStrategy,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Collaborator Factories (Singletons)
# ============================================================================


@lru_cache()
def get_youtube_source() -> YouTubeDataSource:
    """YouTube-backed comment and statistics source"""
    config = get_config()
    return YouTubeDataSource(
        create_youtube_client(),
        max_comment_pages=config.youtube_api.max_comment_pages,
    )


@lru_cache()
def get_chat_client() -> GroqChatClient:
    return GroqChatClient(get_config().llm)


def _use_stub() -> bool:
    config = get_config()
    return config.pipeline.use_stub_classifier or not config.llm.api_key


@lru_cache()
def get_sentiment_classifier() -> SentimentClassifier:
    """
    Network classifier when a Groq key is configured, stub otherwise
    """
    if _use_stub():
        logger.warning("⚠️ Using the deterministic stub sentiment classifier")
        return StubSentimentClassifier()
    return GroqSentimentClassifier(get_chat_client())


@lru_cache()
def get_reply_composer() -> ReplyComposer:
    if _use_stub():
        return StubReplyComposer()
    return GroqReplyComposer(get_chat_client())


# ============================================================================
# Service Providers (per request)
# ============================================================================


def get_comment_pipeline() -> CommentPipeline:
    """
    Dependency provider for CommentPipeline

    Usage in FastAPI:
        @router.get("/comments/{video_id}")
        async def list_comments(
            video_id: str,
            pipeline: CommentPipeline = Depends(get_comment_pipeline),
        ):
            return await pipeline.fetch_for_display(video_id)
    """
    config = get_config()
    settings = config.pipeline

    analyzer = BatchSentimentAnalyzer(
        get_sentiment_classifier(),
        batch_size=settings.classifier_batch_size,
        max_concurrent_requests=config.llm.max_concurrent_requests,
        config=config,
    )
    return CommentPipeline(
        get_youtube_source(),
        analyzer,
        distribution_strategy=RelevanceTopStrategy(limit=settings.distribution_sample_size),
        display_strategy=LatestByTimeStrategy(window=settings.display_window),
        default_page_size=settings.default_page_size,
        config=config,
    )


def get_analytics_service() -> AnalyticsService:
    """Dependency provider for AnalyticsService"""
    return AnalyticsService(
        get_youtube_source(),
        get_comment_pipeline(),
        config=get_config(),
    )


# ============================================================================
# Lifecycle
# ============================================================================


async def close_clients() -> None:
    """Close network clients that were created during the app's lifetime"""
    if get_youtube_source.cache_info().currsize:
        get_youtube_source().client.close()
        logger.info("🔌 YouTube client closed")
    if get_chat_client.cache_info().currsize:
        await get_chat_client().aclose()
        logger.info("🔌 Groq client closed")

    get_youtube_source.cache_clear()
    get_chat_client.cache_clear()
    get_sentiment_classifier.cache_clear()
    get_reply_composer.cache_clear()
