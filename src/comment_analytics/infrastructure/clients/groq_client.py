# src/comment_analytics/infrastructure/clients/groq_client.py
"""
Groq Chat Completions Client
LLM-backed sentiment classification and reply generation.

Features:
- OpenAI-compatible /chat/completions calls over httpx
- One request per comment batch; failures raise ClassificationError
- Tolerant JSON extraction (markdown fences, surrounding prose)
- Per-item validation with Pydantic
"""

import html
import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator

from comment_analytics.app.config import LLMSettings, get_config
from comment_analytics.domain.models import Comment, Sentiment
from comment_analytics.services.exceptions import ClassificationError, RateLimitExceededError
from comment_analytics.services.language_detector import detect_language

logger = logging.getLogger(__name__)

MAX_COMMENT_CHARS = 800
REPLY_TONES = ("friendly", "professional", "casual", "humorous")

_WHITESPACE = re.compile(r"\s+")
_FENCE = re.compile(r"```(?:json)?")
_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")

SENTIMENT_SYSTEM_PROMPT = (
    "You are an expert multilingual sentiment analyzer for YouTube comments. "
    "You understand context, sarcasm, and cultural nuances across languages."
)

SENTIMENT_GUIDELINES = """ANALYSIS GUIDELINES:
POSITIVE: gratitude, praise, excitement, appreciation, constructive feedback, support
NEGATIVE: criticism, complaints, anger, disappointment, frustration, insults
NEUTRAL: questions, factual statements, observations, requests, timestamps

RETURN EXACTLY one JSON object per comment, in input order:
[{"id": 0, "sentiment": "positive", "confidence": 0.92, "language": "en"}]

Return ONLY the JSON array with no additional text."""


# ============================================================================
# Response Models
# ============================================================================


class SentimentItem(BaseModel):
    """One element of the model's JSON answer"""

    id: Optional[int] = None
    sentiment: Sentiment = Sentiment.NEUTRAL
    confidence: float = 0.5
    language: Optional[str] = None

    @field_validator("sentiment", mode="before")
    @classmethod
    def coerce_sentiment(cls, v: Any) -> Any:
        value = str(v or "").strip().lower()
        return value if value in {s.value for s in Sentiment} else Sentiment.NEUTRAL

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v: Any) -> float:
        try:
            value = float(v)
        except (TypeError, ValueError):
            return 0.5
        return max(0.0, min(1.0, value))


# ============================================================================
# Prompt / Response Helpers
# ============================================================================


def clean_comment_text(text: str) -> str:
    """Decode markup entities and collapse whitespace"""
    return _WHITESPACE.sub(" ", html.unescape(text or "")).strip()


def build_sentiment_prompt(comments: Sequence[Comment]) -> str:
    payload = [
        {
            "id": index,
            "text": clean_comment_text(comment.text)[:MAX_COMMENT_CHARS],
            "likes": comment.like_count,
            "language": detect_language(comment.text),
        }
        for index, comment in enumerate(comments)
    ]
    return (
        "Analyze the sentiment of these YouTube comments. Consider context, "
        "cultural nuances, and multiple languages.\n\n"
        f"COMMENTS DATA:\n{json.dumps(payload, ensure_ascii=False, indent=2)}\n\n"
        f"{SENTIMENT_GUIDELINES}"
    )


def extract_json_array(text: str) -> List[Any]:
    """
    Pull the JSON array out of a model answer

    Raises:
        ValueError: No parseable array in ``text``
    """
    cleaned = _FENCE.sub("", text or "").strip()
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        match = _JSON_ARRAY.search(cleaned)
        if not match:
            raise ValueError("No JSON array found in model response")
        parsed = json.loads(match.group(0))

    if not isinstance(parsed, list):
        raise ValueError("Expected a JSON array")
    return parsed


def parse_sentiment_response(text: str, comments: Sequence[Comment]) -> List[Comment]:
    """
    Map a model answer back onto ``comments``

    Raises:
        ClassificationError: Unparseable answer or wrong number of items
    """
    try:
        raw_items = extract_json_array(text)
        items = [SentimentItem.model_validate(item) for item in raw_items]
    except (ValueError, PydanticValidationError) as e:
        raise ClassificationError(f"Could not parse sentiment response: {e}") from e

    if len(items) != len(comments):
        raise ClassificationError(
            f"Expected {len(comments)} sentiment results, got {len(items)}"
        )

    return [
        comment.annotate(
            sentiment=item.sentiment,
            confidence=item.confidence,
            detected_language=item.language or detect_language(comment.text),
        )
        for comment, item in zip(comments, items)
    ]


# ============================================================================
# Base Client
# ============================================================================


class GroqChatClient:
    """Minimal async client for the Groq chat completions endpoint"""

    def __init__(
        self,
        settings: Optional[LLMSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_config().llm
        if not self.settings.api_key:
            raise ValueError("Groq API key not found. Set GROQ_API_KEY in .env")

        self.client = httpx.AsyncClient(
            base_url=self.settings.base_url,
            timeout=self.settings.request_timeout,
            headers={"Authorization": f"Bearer {self.settings.api_key}"},
            transport=transport,
        )

    async def complete(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Run one chat completion and return the message content

        Raises:
            RateLimitExceededError: HTTP 429
            ClassificationError: Any other transport or API failure
        """
        body = {
            "model": model or self.settings.model,
            "messages": messages,
            "temperature": self.settings.temperature if temperature is None else temperature,
            "max_tokens": max_tokens or self.settings.max_tokens,
            "stream": False,
        }

        try:
            response = await self.client.post("/chat/completions", json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 429:
                raise RateLimitExceededError("groq", "Groq rate limit exceeded") from e
            raise ClassificationError(f"Groq API error: {status}", status_code=status) from e
        except httpx.RequestError as e:
            raise ClassificationError(f"Groq request failed: {e}") from e

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ClassificationError("Malformed Groq response") from e

        if not content or not content.strip():
            raise ClassificationError("Empty response from Groq")
        return content.strip()

    async def aclose(self) -> None:
        await self.client.aclose()


# ============================================================================
# Capability Implementations
# ============================================================================


class GroqSentimentClassifier:
    """SentimentClassifier backed by a Groq-hosted LLM"""

    def __init__(self, chat: GroqChatClient):
        self.chat = chat

    async def classify(self, batch: Sequence[Comment]) -> List[Comment]:
        if not batch:
            return []

        messages = [
            {"role": "system", "content": SENTIMENT_SYSTEM_PROMPT},
            {"role": "user", "content": build_sentiment_prompt(batch)},
        ]
        answer = await self.chat.complete(messages)
        classified = parse_sentiment_response(answer, batch)

        logger.debug(f"Classified batch of {len(classified)} comments")
        return classified


class GroqReplyComposer:
    """ReplyComposer generating short creator replies"""

    def __init__(self, chat: GroqChatClient):
        self.chat = chat

    async def compose_reply(
        self, comment: Comment, video_title: str, tone: str = "friendly"
    ) -> str:
        if tone not in REPLY_TONES:
            tone = "friendly"

        language = comment.detected_language or detect_language(comment.text)
        sentiment = (comment.sentiment or Sentiment.NEUTRAL).value

        prompt = (
            "You're a YouTube creator replying to this comment. Be authentic and brief.\n\n"
            f'COMMENT: "{clean_comment_text(comment.text)[:200]}"\n'
            f'VIDEO: "{video_title[:100]}"\n'
            f"SENTIMENT: {sentiment}\n"
            f"TONE: {tone}\n\n"
            "Write one personal reply of 10-25 words that matches the comment's "
            f"energy, uses simple conversational language and is written in '{language}'.\n"
            "Return only the reply text."
        )

        reply = await self.chat.complete(
            [{"role": "user", "content": prompt}],
            model=self.chat.settings.reply_model,
            temperature=0.7,
            max_tokens=150,
        )
        return reply.strip().strip('"')
