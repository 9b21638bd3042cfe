"""API Routers"""

from .comments_router import router as comments_router
from .analytics_router import router as analytics_router

__all__ = ["comments_router", "analytics_router"]
