"""API Clients"""

from .youtube_api import YouTubeAPIClient, QuotaTracker, create_youtube_client
from .youtube_source import YouTubeDataSource
from .groq_client import GroqChatClient, GroqSentimentClassifier, GroqReplyComposer
from .stub_classifier import StubSentimentClassifier, StubReplyComposer

__all__ = [
    "YouTubeAPIClient",
    "QuotaTracker",
    "create_youtube_client",
    "YouTubeDataSource",
    "GroqChatClient",
    "GroqSentimentClassifier",
    "GroqReplyComposer",
    "StubSentimentClassifier",
    "StubReplyComposer",
]
