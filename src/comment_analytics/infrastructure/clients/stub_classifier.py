"""
Deterministic offline collaborators.

Used when no LLM key is configured and throughout the test-suite: every
comment gets the same fixed annotation, languages come from the heuristic
detector.
"""
from typing import List, Sequence

from comment_analytics.domain.models import Comment, Sentiment
from comment_analytics.services.language_detector import detect_language


class StubSentimentClassifier:
    """Annotates every comment with a fixed sentiment and confidence"""

    def __init__(self, sentiment: Sentiment = Sentiment.NEUTRAL, confidence: float = 0.9):
        self.sentiment = Sentiment(sentiment)
        self.confidence = confidence
        self.calls = 0

    async def classify(self, batch: Sequence[Comment]) -> List[Comment]:
        self.calls += 1
        return [
            comment.annotate(self.sentiment, self.confidence, detect_language(comment.text))
            for comment in batch
        ]


class StubReplyComposer:
    """Returns a canned reply"""

    def __init__(self, reply: str = "Thanks for watching and for the comment!"):
        self.reply = reply

    async def compose_reply(
        self, comment: Comment, video_title: str, tone: str = "friendly"
    ) -> str:
        return self.reply
