"""
Unit Tests for YouTube API Client
Tests quota tracking, error mapping, pagination and the async source adapter
"""

from datetime import datetime, timedelta

import httpx
import pytest

from comment_analytics.infrastructure.clients.youtube_api import (
    QuotaTracker,
    YouTubeAPIClient,
)
from comment_analytics.infrastructure.clients.youtube_source import YouTubeDataSource
from comment_analytics.services.exceptions import (
    RateLimitExceededError,
    ResourceNotFoundError,
    YouTubeAPIError,
)

API_KEY = "test-key-0123456789abcdef"


def thread(comment_id, text="Nice video", likes=0, replies=0):
    return {
        "snippet": {
            "topLevelComment": {
                "id": comment_id,
                "snippet": {
                    "textDisplay": text,
                    "authorDisplayName": "viewer",
                    "authorProfileImageUrl": "https://example.com/a.jpg",
                    "authorChannelId": {"value": "UC" + "z" * 22},
                    "likeCount": likes,
                    "publishedAt": "2024-01-01T10:00:00Z",
                },
            },
            "totalReplyCount": replies,
        }
    }


def video_item(video_id="dQw4w9WgXcQ", views="1000"):
    return {
        "id": video_id,
        "snippet": {
            "title": "Test Video",
            "publishedAt": "2024-01-01T14:00:00Z",
            "channelId": "UC" + "a" * 22,
            "channelTitle": "Channel",
        },
        "statistics": {"viewCount": views, "likeCount": "50", "commentCount": "20"},
    }


def google_error(status, reason):
    return httpx.Response(
        status, json={"error": {"code": status, "errors": [{"reason": reason}]}}
    )


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr(
        "comment_analytics.infrastructure.clients.youtube_api.time.sleep", lambda _: None
    )


def make_client(handler, **kwargs):
    return YouTubeAPIClient(
        api_key=API_KEY, max_retries=3, transport=httpx.MockTransport(handler), **kwargs
    )


# ============================================================================
# Quota Tracker Tests
# ============================================================================


class TestQuotaTracker:
    """Test quota management functionality"""

    def test_quota_initialization(self):
        tracker = QuotaTracker(daily_limit=1000)

        assert tracker.daily_limit == 1000
        assert tracker.used_quota == 0
        assert tracker.reset_time > datetime.now()

    def test_quota_check(self):
        tracker = QuotaTracker(daily_limit=1000)
        assert tracker.check_quota("search", count=5) is True

        tracker.used_quota = 950
        assert tracker.check_quota("search") is False
        assert tracker.check_quota("comment_threads") is True

    def test_quota_consumption(self):
        tracker = QuotaTracker(daily_limit=1000)
        tracker.consume_quota("videos")
        tracker.consume_quota("search")

        assert tracker.used_quota == 101

    def test_quota_reset(self):
        tracker = QuotaTracker(daily_limit=1000, used_quota=900)
        tracker.reset_time = datetime.now() - timedelta(seconds=1)

        assert tracker.get_status()["used"] == 0


# ============================================================================
# Client Tests
# ============================================================================


class TestYouTubeAPIClient:
    """Test request handling and error mapping"""

    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            YouTubeAPIClient()

    def test_get_video(self):
        def handler(request):
            assert request.url.path.endswith("/videos")
            assert request.url.params["key"] == API_KEY
            return httpx.Response(200, json={"items": [video_item()]})

        video = make_client(handler).get_video("dQw4w9WgXcQ")

        assert video.statistics.view_count == 1000
        assert video.snippet.channel_id.startswith("UC")

    def test_missing_video_is_not_found(self):
        client = make_client(lambda request: httpx.Response(200, json={"items": []}))

        with pytest.raises(ResourceNotFoundError):
            client.get_video("dQw4w9WgXcQ")

    def test_404_is_not_found(self):
        client = make_client(lambda request: google_error(404, "videoNotFound"))

        with pytest.raises(ResourceNotFoundError):
            client.get_video_comments("dQw4w9WgXcQ")

    def test_comments_disabled_returns_empty(self):
        client = make_client(lambda request: google_error(403, "commentsDisabled"))

        assert client.get_video_comments("dQw4w9WgXcQ") == []

    def test_quota_exceeded(self):
        client = make_client(lambda request: google_error(403, "quotaExceeded"))

        with pytest.raises(RateLimitExceededError):
            client.get_video("dQw4w9WgXcQ")

    def test_other_403_is_api_error(self):
        client = make_client(lambda request: google_error(403, "forbidden"))

        with pytest.raises(YouTubeAPIError) as exc_info:
            client.get_video("dQw4w9WgXcQ")
        assert exc_info.value.status_code == 403

    def test_server_error_is_retried(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) < 3:
                return httpx.Response(503)
            return httpx.Response(200, json={"items": [video_item()]})

        video = make_client(handler).get_video("dQw4w9WgXcQ")

        assert len(attempts) == 3
        assert video.id == "dQw4w9WgXcQ"

    def test_network_error_exhausts_retries(self):
        def handler(request):
            raise httpx.ConnectError("unreachable")

        with pytest.raises(YouTubeAPIError):
            make_client(handler).get_video("dQw4w9WgXcQ")

    def test_local_quota_exhausted(self):
        client = make_client(lambda request: httpx.Response(200, json={"items": []}))
        client.quota_tracker.used_quota = client.quota_tracker.daily_limit

        with pytest.raises(RateLimitExceededError):
            client.get_video("dQw4w9WgXcQ")


class TestCommentPagination:
    """Test commentThreads paging"""

    def test_follows_page_tokens(self):
        pages = {
            None: {"items": [thread("c1"), thread("c2")], "nextPageToken": "p2"},
            "p2": {"items": [thread("c3")]},
        }
        seen_orders = []

        def handler(request):
            seen_orders.append(request.url.params["order"])
            return httpx.Response(200, json=pages[request.url.params.get("pageToken")])

        comments = make_client(handler).get_video_comments("dQw4w9WgXcQ", max_results=10)

        assert [c.id for c in comments] == ["c1", "c2", "c3"]
        assert seen_orders == ["relevance", "relevance"]

    def test_respects_max_pages(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(
                200, json={"items": [thread(f"c{len(calls)}")], "nextPageToken": "more"}
            )

        comments = make_client(handler).get_video_comments(
            "dQw4w9WgXcQ", max_results=100, max_pages=2
        )

        assert len(calls) == 2
        assert len(comments) == 2

    def test_parses_comment_fields(self):
        client = make_client(
            lambda request: httpx.Response(200, json={"items": [thread("c1", likes=4, replies=2)]})
        )

        comment = client.get_video_comments("dQw4w9WgXcQ", order="time")[0]

        assert comment.snippet.like_count == 4
        assert comment.total_reply_count == 2


# ============================================================================
# Async Source Adapter
# ============================================================================


class TestYouTubeDataSource:
    @pytest.mark.asyncio
    async def test_list_latest_requests_time_order(self):
        seen = []

        def handler(request):
            seen.append(dict(request.url.params))
            return httpx.Response(200, json={"items": [thread("c1", "Hola amigo")]})

        source = YouTubeDataSource(make_client(handler))
        comments = await source.list_latest("dQw4w9WgXcQ", 25)

        assert seen[0]["order"] == "time"
        assert seen[0]["maxResults"] == "25"
        assert comments[0].id == "c1"
        assert comments[0].author_channel_id == "UC" + "z" * 22
        assert comments[0].sentiment is None

    @pytest.mark.asyncio
    async def test_get_video_maps_statistics(self):
        source = YouTubeDataSource(
            make_client(lambda request: httpx.Response(200, json={"items": [video_item()]}))
        )

        video = await source.get_video("dQw4w9WgXcQ")

        assert (video.view_count, video.like_count, video.comment_count) == (1000, 50, 20)
        assert video.title == "Test Video"
