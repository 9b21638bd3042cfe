# src/comment_analytics/infrastructure/clients/youtube_api.py
"""
YouTube Data API v3 Client
Handles authentication, quota management, retry logic, and structured data fetching.

Features:
- Automatic quota tracking and warnings
- Exponential backoff retry for server and network errors
- Typed errors: missing videos, disabled comments, exhausted quota
- Type-safe response parsing with Pydantic
"""

import logging
import os
import time
from typing import List, Dict, Any, Optional, Literal
from datetime import datetime, timedelta
from dataclasses import dataclass, field

import httpx
from pydantic import BaseModel, ConfigDict, Field

from comment_analytics.app.config import get_config
from comment_analytics.services.exceptions import (
    RateLimitExceededError,
    ResourceNotFoundError,
    YouTubeAPIError,
)

logger = logging.getLogger(__name__)


class CommentsDisabledError(YouTubeAPIError):
    """Video exists but has comments turned off"""

    error_code = "COMMENTS_DISABLED"


# ============================================================================
# Response Models (Type-Safe Data Containers)
# ============================================================================


class VideoSnippet(BaseModel):
    """Video metadata snippet"""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str = ""
    published_at: datetime = Field(alias="publishedAt")
    channel_id: str = Field(alias="channelId")
    channel_title: str = Field(alias="channelTitle", default="")


class VideoStatisticsResponse(BaseModel):
    """Video engagement statistics (the API returns counts as strings)"""

    model_config = ConfigDict(populate_by_name=True)

    view_count: int = Field(alias="viewCount", default=0)
    like_count: int = Field(alias="likeCount", default=0)
    comment_count: int = Field(alias="commentCount", default=0)


class VideoResponse(BaseModel):
    """Video data response"""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    snippet: VideoSnippet
    statistics: VideoStatisticsResponse = Field(default_factory=VideoStatisticsResponse)


class CommentSnippet(BaseModel):
    """Comment metadata"""

    model_config = ConfigDict(populate_by_name=True)

    text_display: str = Field(alias="textDisplay", default="")
    author_display_name: str = Field(alias="authorDisplayName", default="")
    author_profile_image_url: Optional[str] = Field(
        alias="authorProfileImageUrl", default=None
    )
    author_channel_id: Optional[Dict[str, str]] = Field(
        alias="authorChannelId", default=None
    )
    like_count: int = Field(alias="likeCount", default=0)
    published_at: datetime = Field(alias="publishedAt")
    updated_at: Optional[datetime] = Field(alias="updatedAt", default=None)


class CommentResponse(BaseModel):
    """Top-level comment of a comment thread"""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    snippet: CommentSnippet
    total_reply_count: Optional[int] = None


# ============================================================================
# Quota Management
# ============================================================================


@dataclass
class QuotaTracker:
    """Tracks API quota usage with daily reset"""

    daily_limit: int = 10000  # YouTube API default quota
    used_quota: int = 0
    reset_time: datetime = field(
        default_factory=lambda: datetime.now() + timedelta(days=1)
    )

    # Quota costs per operation (YouTube API v3 costs)
    COSTS = {
        "search": 100,
        "videos": 1,
        "channels": 1,
        "comment_threads": 1,
    }

    def check_quota(self, operation: str, count: int = 1) -> bool:
        """Check if sufficient quota available"""
        self._reset_if_needed()
        cost = self.COSTS.get(operation, 1) * count
        return (self.used_quota + cost) <= self.daily_limit

    def consume_quota(self, operation: str, count: int = 1) -> None:
        """Consume quota for an operation"""
        self._reset_if_needed()
        cost = self.COSTS.get(operation, 1) * count
        self.used_quota += cost

        remaining = self.daily_limit - self.used_quota
        if remaining < 1000:
            logger.warning(f"⚠️ Low quota remaining: {remaining} units")

    def _reset_if_needed(self) -> None:
        """Reset quota counter if daily limit expired"""
        if datetime.now() >= self.reset_time:
            logger.info("🔄 Daily quota reset")
            self.used_quota = 0
            self.reset_time = datetime.now() + timedelta(days=1)

    def get_status(self) -> Dict[str, Any]:
        """Get current quota status"""
        self._reset_if_needed()
        return {
            "used": self.used_quota,
            "limit": self.daily_limit,
            "remaining": self.daily_limit - self.used_quota,
            "reset_at": self.reset_time.isoformat(),
            "percentage_used": round((self.used_quota / self.daily_limit) * 100, 2),
        }


def _error_reason(response: httpx.Response) -> str:
    """First error reason from a Google API error body, if any"""
    try:
        errors = response.json().get("error", {}).get("errors", [])
    except ValueError:
        return ""
    return errors[0].get("reason", "") if errors else ""


# ============================================================================
# Main API Client
# ============================================================================


class YouTubeAPIClient:
    """
    YouTube Data API v3 Client

    Handles:
    - Video statistics retrieval (single and batch)
    - Channel upload enumeration
    - Comment thread fetching with pagination

    Synchronous; async callers wrap it with asyncio.to_thread.
    """

    BASE_URL = "https://www.googleapis.com/youtube/v3"

    def __init__(
        self,
        api_key: Optional[str] = None,
        max_retries: Optional[int] = None,
        timeout: Optional[int] = None,
        transport: Optional[httpx.BaseTransport] = None,
        backoff_base: float = 2.0,
    ):
        """
        Initialize YouTube API client

        Args:
            api_key: YouTube Data API key (reads from env/config if not provided)
            max_retries: Maximum attempts for retryable failures
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
            backoff_base: Base of the exponential backoff, in seconds
        """
        settings = get_config().youtube_api

        self.api_key = api_key or os.getenv("YOUTUBE_API_KEY") or settings.api_key
        if not self.api_key:
            raise ValueError(
                "YouTube API key not found. Set YOUTUBE_API_KEY in .env or pass to constructor"
            )

        self.max_retries = max_retries or settings.max_retries
        self.timeout = timeout or settings.request_timeout
        self.backoff_base = backoff_base
        self.text_format = settings.comment_text_format

        # HTTP client with connection pooling
        self.client = httpx.Client(
            timeout=self.timeout,
            limits=httpx.Limits(max_keepalive_connections=5),
            transport=transport,
        )

        self.quota_tracker = QuotaTracker(daily_limit=settings.daily_quota_limit)

        logger.info("✅ YouTube API client initialized")

    def _request(
        self, endpoint: str, params: Dict[str, Any], operation: str = "videos"
    ) -> Dict[str, Any]:
        """
        Make API request with retry logic and quota management

        Args:
            endpoint: API endpoint path (e.g., 'videos', 'commentThreads')
            params: Query parameters
            operation: Operation type for quota tracking

        Returns:
            Parsed JSON response

        Raises:
            ResourceNotFoundError: The requested video does not exist
            CommentsDisabledError: Comments are turned off for the video
            RateLimitExceededError: Local or remote quota exhausted
            YouTubeAPIError: Any other failure
        """
        if not self.quota_tracker.check_quota(operation):
            raise RateLimitExceededError(
                "youtube", f"Quota exceeded. Status: {self.quota_tracker.get_status()}"
            )

        url = f"{self.BASE_URL}/{endpoint}"
        params = {**params, "key": self.api_key}

        for attempt in range(self.max_retries):
            try:
                response = self.client.get(url, params=params)
                response.raise_for_status()

                self.quota_tracker.consume_quota(operation)
                return response.json()

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                reason = _error_reason(e.response)

                if status == 404 or reason == "videoNotFound":
                    raise ResourceNotFoundError(
                        "Video", params.get("videoId") or params.get("id", "")
                    ) from e

                if status == 403:
                    if reason == "commentsDisabled":
                        raise CommentsDisabledError(
                            "Comments are disabled for this video", status_code=403
                        ) from e
                    if reason in ("quotaExceeded", "dailyLimitExceeded", "rateLimitExceeded"):
                        logger.error(f"❌ API quota exhausted: {reason}")
                        raise RateLimitExceededError("youtube", "YouTube API quota exceeded") from e
                    logger.error(f"❌ API error 403: {e.response.text}")
                    raise YouTubeAPIError(
                        "YouTube API access denied", status_code=403, reason=reason
                    ) from e

                if status >= 500 and attempt < self.max_retries - 1:
                    wait_time = self.backoff_base**attempt
                    logger.warning(
                        f"⚠️ Server error {status}, "
                        f"retrying in {wait_time}s (attempt {attempt + 1}/{self.max_retries})"
                    )
                    time.sleep(wait_time)
                    continue

                logger.error(f"❌ YouTube API error {status}: {e.response.text}")
                raise YouTubeAPIError(
                    f"YouTube API error: {status}", status_code=status, reason=reason
                ) from e

            except httpx.RequestError as e:
                if attempt == self.max_retries - 1:
                    raise YouTubeAPIError(
                        f"Network error after {self.max_retries} attempts: {e}"
                    ) from e
                wait_time = self.backoff_base**attempt
                logger.warning(
                    f"⚠️ Network error: {e}, "
                    f"retrying in {wait_time}s (attempt {attempt + 1}/{self.max_retries})"
                )
                time.sleep(wait_time)

        raise YouTubeAPIError(f"Failed after {self.max_retries} retries")

    # ========================================================================
    # Video Operations
    # ========================================================================

    def get_video(self, video_id: str) -> VideoResponse:
        """
        Fetch video snippet and statistics

        Raises:
            ResourceNotFoundError: Unknown video ID
        """
        params = {"part": "snippet,statistics", "id": video_id}

        response = self._request("videos", params, operation="videos")

        if not response.get("items"):
            raise ResourceNotFoundError("Video", video_id)

        return VideoResponse(**response["items"][0])

    def get_videos_batch(self, video_ids: List[str]) -> List[VideoResponse]:
        """
        Fetch multiple videos in a single request (up to 50 IDs)
        """
        if not video_ids:
            return []
        if len(video_ids) > 50:
            raise ValueError("Maximum 50 video IDs per batch request")

        params = {"part": "snippet,statistics", "id": ",".join(video_ids)}

        response = self._request("videos", params, operation="videos")

        return [VideoResponse(**item) for item in response.get("items", [])]

    # ========================================================================
    # Channel Operations
    # ========================================================================

    def get_channel_video_ids(self, channel_id: str, max_results: int = 50) -> List[str]:
        """
        Latest video IDs of a channel

        Note:
            Search costs 100 quota units per request!
        """
        params = {
            "part": "id",
            "channelId": channel_id,
            "type": "video",
            "maxResults": min(max_results, 50),
            "order": "date",
        }

        response = self._request("search", params, operation="search")

        return [item["id"]["videoId"] for item in response.get("items", [])]

    def get_channel_videos(self, channel_id: str, max_results: int = 50) -> List[VideoResponse]:
        """Statistics for a channel's latest uploads"""
        return self.get_videos_batch(self.get_channel_video_ids(channel_id, max_results))

    # ========================================================================
    # Comment Operations
    # ========================================================================

    def get_video_comments(
        self,
        video_id: str,
        max_results: int = 100,
        order: Literal["time", "relevance"] = "relevance",
        max_pages: Optional[int] = None,
    ) -> List[CommentResponse]:
        """
        Fetch top-level comments for a video with pagination

        Args:
            video_id: YouTube video ID
            max_results: Maximum comments to fetch
            order: Comment ordering (time or relevance), preserved as returned
            max_pages: Maximum pages to request

        Returns:
            List of CommentResponse objects; empty when comments are disabled

        Raises:
            ResourceNotFoundError: Video does not exist
        """
        comments: List[CommentResponse] = []
        page_token = None
        pages = 0

        while len(comments) < max_results:
            params = {
                "part": "snippet",
                "videoId": video_id,
                "maxResults": min(100, max_results - len(comments)),
                "order": order,
                "textFormat": self.text_format,
            }

            if page_token:
                params["pageToken"] = page_token

            try:
                response = self._request(
                    "commentThreads", params, operation="comment_threads"
                )
            except CommentsDisabledError:
                logger.info(f"💬 Comments disabled for {video_id}")
                return []

            pages += 1

            for item in response.get("items", []):
                thread = item["snippet"]
                comments.append(
                    CommentResponse(
                        **thread["topLevelComment"],
                        total_reply_count=thread.get("totalReplyCount"),
                    )
                )

            page_token = response.get("nextPageToken")
            if not page_token or (max_pages is not None and pages >= max_pages):
                break

        return comments[:max_results]

    # ========================================================================
    # Utility Methods
    # ========================================================================

    def close(self) -> None:
        """Close HTTP client connection pool"""
        self.client.close()
        logger.info("🔌 YouTube API client closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def create_youtube_client(api_key: Optional[str] = None) -> YouTubeAPIClient:
    """
    Factory function to create YouTube API client

    Args:
        api_key: Optional API key (reads from env if not provided)

    Returns:
        Configured YouTubeAPIClient instance
    """
    return YouTubeAPIClient(api_key=api_key)
