"""
Unit Tests for the Groq sentiment classifier and reply composer
"""

import json

import httpx
import pytest

from comment_analytics.app.config import LLMSettings
from comment_analytics.domain.models import Sentiment
from comment_analytics.infrastructure.clients.groq_client import (
    GroqChatClient,
    GroqReplyComposer,
    GroqSentimentClassifier,
    build_sentiment_prompt,
    clean_comment_text,
    extract_json_array,
    parse_sentiment_response,
)
from comment_analytics.services.exceptions import ClassificationError, RateLimitExceededError

from conftest import make_comment


def chat_response(content):
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


def make_chat(handler):
    settings = LLMSettings(api_key="gsk_test")
    return GroqChatClient(settings, transport=httpx.MockTransport(handler))


# ============================================================================
# Parsing Helpers
# ============================================================================


class TestResponseParsing:
    """Test tolerant extraction of the model's JSON answer"""

    def test_plain_array(self):
        assert extract_json_array('[{"id": 0}]') == [{"id": 0}]

    def test_fenced_array(self):
        text = '```json\n[{"id": 0, "sentiment": "positive"}]\n```'
        assert extract_json_array(text)[0]["sentiment"] == "positive"

    def test_array_inside_prose(self):
        text = 'Here you go: [{"id": 0}] hope that helps'
        assert extract_json_array(text) == [{"id": 0}]

    def test_no_array(self):
        with pytest.raises(ValueError):
            extract_json_array("I cannot help with that")

    def test_maps_items_onto_comments(self):
        comments = [make_comment(0, "Love it"), make_comment(1, "Gracias, muy bien")]
        text = json.dumps(
            [
                {"id": 0, "sentiment": "POSITIVE", "confidence": 0.93, "language": "en"},
                {"id": 1, "sentiment": "weird", "confidence": 7},
            ]
        )

        result = parse_sentiment_response(text, comments)

        assert result[0].sentiment == Sentiment.POSITIVE
        assert result[0].confidence == 0.93
        assert result[1].sentiment == Sentiment.NEUTRAL
        assert result[1].confidence == 1.0
        assert result[1].detected_language == "es"
        assert not any(c.is_fallback for c in result)

    def test_count_mismatch_raises(self):
        comments = [make_comment(0), make_comment(1)]

        with pytest.raises(ClassificationError):
            parse_sentiment_response('[{"id": 0, "sentiment": "positive"}]', comments)

    def test_garbage_raises(self):
        with pytest.raises(ClassificationError):
            parse_sentiment_response("not json", [make_comment(0)])


def test_clean_comment_text():
    assert clean_comment_text("Tom &amp; Jerry\n\n  rocks ") == "Tom & Jerry rocks"


def test_prompt_carries_every_comment():
    prompt = build_sentiment_prompt([make_comment(0, "first"), make_comment(1, "second")])

    assert '"id": 0' in prompt
    assert '"id": 1' in prompt
    assert "JSON array" in prompt


# ============================================================================
# Chat Client
# ============================================================================


class TestGroqChatClient:
    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            GroqChatClient(LLMSettings(api_key=""))

    @pytest.mark.asyncio
    async def test_complete_returns_content(self):
        def handler(request):
            body = json.loads(request.content)
            assert request.url.path.endswith("/chat/completions")
            assert request.headers["Authorization"] == "Bearer gsk_test"
            assert body["stream"] is False
            return chat_response("  hello  ")

        chat = make_chat(handler)
        assert await chat.complete([{"role": "user", "content": "hi"}]) == "hello"
        await chat.aclose()

    @pytest.mark.asyncio
    async def test_rate_limit(self):
        chat = make_chat(lambda request: httpx.Response(429))

        with pytest.raises(RateLimitExceededError):
            await chat.complete([{"role": "user", "content": "hi"}])

    @pytest.mark.asyncio
    async def test_server_error(self):
        chat = make_chat(lambda request: httpx.Response(500))

        with pytest.raises(ClassificationError):
            await chat.complete([{"role": "user", "content": "hi"}])

    @pytest.mark.asyncio
    async def test_empty_content(self):
        chat = make_chat(lambda request: chat_response("   "))

        with pytest.raises(ClassificationError):
            await chat.complete([{"role": "user", "content": "hi"}])


# ============================================================================
# Capabilities
# ============================================================================


class TestGroqSentimentClassifier:
    @pytest.mark.asyncio
    async def test_classifies_batch(self):
        answer = json.dumps(
            [
                {"id": 0, "sentiment": "positive", "confidence": 0.9, "language": "en"},
                {"id": 1, "sentiment": "negative", "confidence": 0.8, "language": "en"},
            ]
        )
        classifier = GroqSentimentClassifier(make_chat(lambda request: chat_response(answer)))

        result = await classifier.classify([make_comment(0), make_comment(1)])

        assert [c.sentiment for c in result] == [Sentiment.POSITIVE, Sentiment.NEGATIVE]

    @pytest.mark.asyncio
    async def test_empty_batch_skips_call(self):
        def handler(request):
            raise AssertionError("no request expected")

        classifier = GroqSentimentClassifier(make_chat(handler))
        assert await classifier.classify([]) == []


class TestGroqReplyComposer:
    @pytest.mark.asyncio
    async def test_compose_reply(self):
        prompts = []

        def handler(request):
            prompts.append(json.loads(request.content)["messages"][0]["content"])
            return chat_response('"Thanks so much, glad it helped!"')

        composer = GroqReplyComposer(make_chat(handler))
        comment = make_comment(0, "This helped a lot").annotate(Sentiment.POSITIVE, 0.9, "en")

        reply = await composer.compose_reply(comment, "Python tips", tone="casual")

        assert reply == "Thanks so much, glad it helped!"
        assert "TONE: casual" in prompts[0]
        assert "SENTIMENT: positive" in prompts[0]

    @pytest.mark.asyncio
    async def test_unknown_tone_defaults_to_friendly(self):
        prompts = []

        def handler(request):
            prompts.append(json.loads(request.content)["messages"][0]["content"])
            return chat_response("Thanks!")

        composer = GroqReplyComposer(make_chat(handler))
        await composer.compose_reply(make_comment(0), "Video", tone="sarcastic")

        assert "TONE: friendly" in prompts[0]
