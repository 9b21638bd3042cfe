"""
Shared fixtures for the unit tests
"""

from datetime import datetime, timedelta, timezone
from typing import List

import pytest

from comment_analytics.app import dependencies
from comment_analytics.app.config import reset_config
from comment_analytics.domain.models import Comment, VideoStatistics

VIDEO_ID = "dQw4w9WgXcQ"
CHANNEL_ID = "UC" + "a" * 22
NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class FakeCommentSource:
    """In-memory CommentSource + VideoStatisticsSource"""

    def __init__(self, comments=None, video=None, channel_videos=None):
        self.comments: List[Comment] = list(comments or [])
        self.video = video
        self.channel_videos = list(channel_videos or [])
        self.calls: List[tuple] = []

    async def list_all(self, video_id):
        self.calls.append(("list_all", video_id))
        return list(self.comments)

    async def list_latest(self, video_id, n):
        self.calls.append(("list_latest", video_id, n))
        ordered = sorted(self.comments, key=lambda c: c.published_at, reverse=True)
        return ordered[:n]

    async def get_video(self, video_id):
        self.calls.append(("get_video", video_id))
        return self.video

    async def get_channel_videos(self, channel_id, max_results=50):
        self.calls.append(("get_channel_videos", channel_id, max_results))
        return self.channel_videos[:max_results]


def make_comment(index: int, text: str = None, **overrides) -> Comment:
    """Comment #index; higher index = newer"""
    values = dict(
        id=f"c{index}",
        text=text if text is not None else f"Comment number {index}",
        author_name=f"user{index}",
        like_count=index,
        published_at=NOW - timedelta(minutes=1000 - index),
    )
    values.update(overrides)
    return Comment(**values)


def make_video(
    video_id: str = VIDEO_ID,
    views: int = 1000,
    likes: int = 50,
    comments: int = 20,
    days_old: float = 10,
    **overrides,
) -> VideoStatistics:
    values = dict(
        video_id=video_id,
        view_count=views,
        like_count=likes,
        comment_count=comments,
        published_at=NOW - timedelta(days=days_old),
    )
    values.update(overrides)
    return VideoStatistics(**values)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Isolate each test from real keys and cached singletons"""
    for name in ("YOUTUBE_API_KEY", "GROQ_API_KEY", "PIPELINE_USE_STUB_CLASSIFIER"):
        monkeypatch.delenv(name, raising=False)

    reset_config()
    yield
    reset_config()
    dependencies.get_youtube_source.cache_clear()
    dependencies.get_chat_client.cache_clear()
    dependencies.get_sentiment_classifier.cache_clear()
    dependencies.get_reply_composer.cache_clear()


@pytest.fixture
def comments():
    """250 comments, oldest first"""
    return [make_comment(i) for i in range(250)]


@pytest.fixture
def source(comments):
    return FakeCommentSource(comments=comments, video=make_video())
