"""
Analytics API Router
Engagement, velocity and channel-comparison metrics
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from comment_analytics.api.schemas import (
    AnalyticsResponse,
    CreatorAnalyticsResponse,
    analytics_to_response,
    creator_analytics_to_response,
)
from comment_analytics.app.dependencies import get_analytics_service
from comment_analytics.services import AnalyticsService

router = APIRouter(prefix="/api/v1/analytics", tags=["Analytics"])


@router.get("/videos/{video_id}", response_model=AnalyticsResponse)
async def get_video_analytics(
    video_id: str = Path(..., description="YouTube video ID"),
    channel_id: Optional[str] = Query(None, description="Compare against this channel"),
    include_sentiment: bool = Query(False, description="Fold in comment sentiment"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Derived metrics for a single video

    Pass `channel_id` to compare against the channel's other uploads.
    """
    result = await service.get_video_analytics(
        video_id, channel_id=channel_id, include_sentiment=include_sentiment
    )
    return analytics_to_response(result)


@router.get("/videos/{video_id}/creator", response_model=CreatorAnalyticsResponse)
async def get_creator_analytics(
    video_id: str = Path(..., description="YouTube video ID"),
    channel_id: Optional[str] = Query(None, description="Compare against this channel"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    result = await service.get_creator_analytics(video_id, channel_id=channel_id)
    return creator_analytics_to_response(result)
