"""
Comments API Router
Sentiment-annotated comment feed, distribution and reply suggestions
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from comment_analytics.api.schemas import (
    DisplayPageResponse,
    DistributionResponse,
    ReplyRequest,
    ReplyResponse,
    display_page_to_response,
    distribution_view_to_response,
)
from comment_analytics.app.dependencies import get_comment_pipeline, get_reply_composer
from comment_analytics.domain.interfaces import ReplyComposer
from comment_analytics.domain.models import Comment, Sentiment
from comment_analytics.infrastructure.clients.groq_client import REPLY_TONES
from comment_analytics.services import CommentPipeline, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/comments", tags=["Comments"])


# ============================================================================
# Reply Suggestions
# ============================================================================


@router.post("/reply", response_model=ReplyResponse)
async def suggest_reply(
    request: ReplyRequest,
    composer: ReplyComposer = Depends(get_reply_composer),
):
    """
    Suggest a creator reply to a comment

    The tone must be one of friendly, professional, casual or humorous.
    """
    if request.tone not in REPLY_TONES:
        raise ValidationError("tone", f"Must be one of: {', '.join(REPLY_TONES)}", request.tone)

    sentiment = None
    if request.sentiment:
        try:
            sentiment = Sentiment(request.sentiment.lower())
        except ValueError:
            raise ValidationError(
                "sentiment", "Unknown sentiment label", request.sentiment
            ) from None

    comment = Comment(
        id="reply-request",
        text=request.comment_text,
        author_name=request.author_name,
        sentiment=sentiment,
    )
    reply = await composer.compose_reply(comment, request.video_title, request.tone)
    logger.info(f"💬 Reply suggested (tone={request.tone})")
    return ReplyResponse(reply=reply, tone=request.tone)


# ============================================================================
# Comment Views
# ============================================================================


@router.get("/{video_id}", response_model=DisplayPageResponse)
async def list_comments(
    video_id: str = Path(..., description="YouTube video ID"),
    limit: Optional[int] = Query(None, description="Page size"),
    page_token: Optional[str] = Query(None, description="Opaque continuation token"),
    pipeline: CommentPipeline = Depends(get_comment_pipeline),
):
    """
    Newest comments with sentiment, one page at a time
    """
    page = await pipeline.fetch_for_display(video_id, limit=limit, page_token=page_token)
    return display_page_to_response(page)


@router.get("/{video_id}/distribution", response_model=DistributionResponse)
async def get_distribution(
    video_id: str = Path(..., description="YouTube video ID"),
    pipeline: CommentPipeline = Depends(get_comment_pipeline),
):
    """Sentiment distribution over the most relevant comments"""
    view = await pipeline.fetch_for_distribution(video_id)
    return distribution_view_to_response(view)
