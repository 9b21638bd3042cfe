"""
Identifier validators.

Applied at the pipeline boundary so malformed input never reaches a
collaborator.
"""
import re
from typing import Optional

from comment_analytics.services.exceptions import ValidationError

VIDEO_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{11}$")
CHANNEL_ID_PATTERN = re.compile(r"^UC[A-Za-z0-9_-]{22}$")

# Offsets index a display window of at most 100 comments
MAX_PAGE_TOKEN_DIGITS = 9


def validate_video_id(video_id: Optional[str]) -> str:
    if not video_id:
        raise ValidationError("video_id", "video_id parameter is required")
    if not VIDEO_ID_PATTERN.match(video_id):
        raise ValidationError("video_id", "Invalid video ID format", video_id)
    return video_id


def validate_channel_id(channel_id: Optional[str]) -> str:
    if not channel_id:
        raise ValidationError("channel_id", "channel_id parameter is required")
    if not CHANNEL_ID_PATTERN.match(channel_id):
        raise ValidationError("channel_id", "Invalid channel ID format", channel_id)
    return channel_id


def parse_page_token(page_token: Optional[str]) -> int:
    """Decode a display page token (a zero-based offset); None means 0"""
    if page_token is None or page_token == "":
        return 0
    if len(page_token) > MAX_PAGE_TOKEN_DIGITS:
        raise ValidationError(
            "page_token", "Invalid page token", page_token[:MAX_PAGE_TOKEN_DIGITS]
        )
    if not page_token.isdecimal():
        raise ValidationError("page_token", "Invalid page token", page_token)
    return int(page_token)
