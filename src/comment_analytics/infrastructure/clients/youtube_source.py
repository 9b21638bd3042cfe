"""
Async adapter exposing the YouTube Data API client as the pipeline's
comment and video-statistics source.
"""

import asyncio
import logging
from typing import List

from comment_analytics.domain.models import Comment, VideoStatistics
from comment_analytics.infrastructure.clients.youtube_api import (
    CommentResponse,
    VideoResponse,
    YouTubeAPIClient,
)

logger = logging.getLogger(__name__)

COMMENTS_PER_PAGE = 100


def comment_from_response(item: CommentResponse) -> Comment:
    snippet = item.snippet
    return Comment(
        id=item.id,
        text=snippet.text_display,
        author_name=snippet.author_display_name,
        author_avatar_url=snippet.author_profile_image_url,
        author_channel_id=(snippet.author_channel_id or {}).get("value"),
        like_count=snippet.like_count,
        published_at=snippet.published_at,
        updated_at=snippet.updated_at,
        reply_count=item.total_reply_count,
    )


def statistics_from_response(item: VideoResponse) -> VideoStatistics:
    return VideoStatistics(
        video_id=item.id,
        view_count=item.statistics.view_count,
        like_count=item.statistics.like_count,
        comment_count=item.statistics.comment_count,
        published_at=item.snippet.published_at,
        title=item.snippet.title,
        channel_id=item.snippet.channel_id,
    )


class YouTubeDataSource:
    """CommentSource + VideoStatisticsSource backed by YouTubeAPIClient"""

    def __init__(self, client: YouTubeAPIClient, max_comment_pages: int = 20):
        self.client = client
        self.max_comment_pages = max_comment_pages

    async def list_all(self, video_id: str) -> List[Comment]:
        items = await asyncio.to_thread(
            self.client.get_video_comments,
            video_id,
            max_results=self.max_comment_pages * COMMENTS_PER_PAGE,
            order="relevance",
            max_pages=self.max_comment_pages,
        )
        logger.debug(f"Fetched {len(items)} relevance-ordered comments for {video_id}")
        return [comment_from_response(item) for item in items]

    async def list_latest(self, video_id: str, n: int) -> List[Comment]:
        items = await asyncio.to_thread(
            self.client.get_video_comments,
            video_id,
            max_results=min(n, COMMENTS_PER_PAGE),
            order="time",
            max_pages=1,
        )
        return [comment_from_response(item) for item in items]

    async def get_video(self, video_id: str) -> VideoStatistics:
        item = await asyncio.to_thread(self.client.get_video, video_id)
        return statistics_from_response(item)

    async def get_channel_videos(
        self, channel_id: str, max_results: int = 50
    ) -> List[VideoStatistics]:
        items = await asyncio.to_thread(
            self.client.get_channel_videos, channel_id, max_results
        )
        return [statistics_from_response(item) for item in items]
