"""
Collaborator interfaces (Protocols).

Concrete clients satisfy these via duck typing; there is no inheritance
requirement. Tests substitute fakes or the deterministic stub classifier.
"""
from __future__ import annotations

from typing import List, Protocol, Sequence, runtime_checkable

from comment_analytics.domain.models import Comment, VideoStatistics


@runtime_checkable
class CommentSource(Protocol):
    """Retrieves top-level comments for a video."""

    async def list_all(self, video_id: str) -> List[Comment]:
        """
        Best-effort full retrieval in relevance order.

        Returns an empty list when comments are disabled and raises
        ResourceNotFoundError when the video does not exist.
        """
        ...

    async def list_latest(self, video_id: str, n: int) -> List[Comment]:
        """Newest first, at most ``n`` comments."""
        ...


@runtime_checkable
class SentimentClassifier(Protocol):
    """Annotates one bounded batch; may fail as a unit."""

    async def classify(self, batch: Sequence[Comment]) -> List[Comment]:
        """Return annotated copies, same length and order as ``batch``."""
        ...


@runtime_checkable
class VideoStatisticsSource(Protocol):
    async def get_video(self, video_id: str) -> VideoStatistics: ...

    async def get_channel_videos(
        self, channel_id: str, max_results: int = 50
    ) -> List[VideoStatistics]: ...


@runtime_checkable
class ReplyComposer(Protocol):
    async def compose_reply(
        self, comment: Comment, video_title: str, tone: str = "friendly"
    ) -> str: ...
