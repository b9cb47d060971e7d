"""
Remote Provider Tests.

============================================================
PURPOSE
============================================================
Unit tests for reply parsing and the three remote providers.
HTTP is replaced with a mocked aiohttp session; no network access.

TEST CATEGORIES:
- Parsing tests: strict decode, balanced-object recovery
- OpenAI tests: request shape, reply normalization
- Gemini tests: mood vocabulary normalization
- Google Natural Language tests: structured scores
- Transport tests: status codes, timeouts, credential masking

============================================================
"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from affect_engine.exceptions import (
    ConfigurationAbsentError,
    FetchError,
    NormalizationError,
    ParseError,
    RateLimitError,
)
from affect_engine.logging_utils import mask_headers, mask_url, mask_value
from affect_engine.models import (
    Category,
    Intent,
    ProviderKind,
    ProviderStatus,
    RemoteProviderConfig,
    SentimentLabel,
    SentimentScore,
)
from affect_engine.parsing import find_balanced_object, parse_json_object
from affect_engine.providers import GeminiProvider, GoogleLanguageProvider, OpenAIChatProvider


# ============================================================
# HELPERS
# ============================================================

def make_response(status=200, body="", headers=None):
    response = MagicMock()
    response.status = status
    response.headers = headers or {}
    response.text = AsyncMock(return_value=body)
    return response


def make_session(response=None, error=None):
    """aiohttp session whose post() is an async context manager."""
    context = MagicMock()
    if error is not None:
        context.__aenter__ = AsyncMock(side_effect=error)
    else:
        context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.post = MagicMock(return_value=context)
    session.closed = False
    session.close = AsyncMock()
    return session


def openai_body(content):
    return json.dumps({"choices": [{"message": {"role": "assistant", "content": content}}]})


def gemini_body(content):
    return json.dumps({"candidates": [{"content": {"parts": [{"text": content}]}}]})


FULL_REPLY = {
    "sentiment": {"label": "negative", "score": -2},
    "intent": "bug_report",
    "categories": ["reliability", "performance"],
    "suggestions": ["Restart the app.", "Send crash logs."],
}


# ============================================================
# PARSING TESTS
# ============================================================

class TestParsing:
    """Tests for reply parsing."""

    def test_strict_json(self):
        assert parse_json_object('{"a": 1}') == {"a": 1}

    def test_chatty_reply(self):
        content = 'Sure! Here is the analysis:\n```json\n{"intent": "feedback", "suggestions": []}\n```\nHope it helps.'

        assert parse_json_object(content) == {"intent": "feedback", "suggestions": []}

    def test_first_object_wins(self):
        content = 'first {"a": 1} then {"b": 2}'

        assert parse_json_object(content) == {"a": 1}

    def test_braces_inside_strings(self):
        content = 'Result: {"note": "use {braces} and \\"quotes\\"", "n": {"x": 1}} trailing }'

        assert find_balanced_object(content) == '{"note": "use {braces} and \\"quotes\\"", "n": {"x": 1}}'
        assert parse_json_object(content)["n"] == {"x": 1}

    def test_no_object(self):
        with pytest.raises(ParseError):
            parse_json_object("I could not analyze that.")

    def test_unbalanced_object(self):
        assert find_balanced_object('{"a": {"b": 1}') is None

        with pytest.raises(ParseError):
            parse_json_object('{"a": {"b": 1}')

    def test_undecodable_object(self):
        with pytest.raises(ParseError):
            parse_json_object("here: {not json at all}")

    def test_empty_reply(self):
        with pytest.raises(ParseError):
            parse_json_object("   ")

    def test_top_level_array_falls_back_to_embedded_object(self):
        assert parse_json_object('[{"a": 1}]') == {"a": 1}


# ============================================================
# OPENAI TESTS
# ============================================================

class TestOpenAIChatProvider:
    """Tests for OpenAIChatProvider."""

    @pytest.fixture
    def provider(self):
        return OpenAIChatProvider()

    @pytest.fixture
    def config(self):
        return RemoteProviderConfig(ProviderKind.OPENAI, api_key="sk-test-123456")

    @pytest.mark.asyncio
    async def test_full_reply(self, provider, config):
        session = make_session(make_response(200, openai_body(json.dumps(FULL_REPLY))))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            result = await provider.analyze("The app keeps crashing", config)

        assert result.sentiment == SentimentScore(SentimentLabel.NEGATIVE, -2)
        assert result.intent == Intent.BUG_REPORT
        assert result.categories == frozenset({Category.RELIABILITY, Category.PERFORMANCE})
        assert result.suggestions == ("Restart the app.", "Send crash logs.")
        assert result.source == "remote:openai"

    @pytest.mark.parametrize("score", ["1e400", "Infinity", "NaN", '"inf"'])
    @pytest.mark.asyncio
    async def test_non_finite_score_keeps_reply(self, provider, config, score):
        content = (
            '{"sentiment": {"label": "negative", "score": ' + score + '}, '
            '"intent": "bug_report", "suggestions": ["Send crash logs."]}'
        )
        session = make_session(make_response(200, openai_body(content)))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            result = await provider.analyze("text", config)

        assert result.sentiment == SentimentScore(SentimentLabel.NEGATIVE, 0)
        assert result.intent == Intent.BUG_REPORT
        assert result.suggestions == ("Send crash logs.",)

    @pytest.mark.asyncio
    async def test_request_shape(self, provider, config):
        session = make_session(make_response(200, openai_body(json.dumps(FULL_REPLY))))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            await provider.analyze("x" * 9000, config)

        session.post.assert_called_once()
        args, kwargs = session.post.call_args
        assert args[0] == OpenAIChatProvider.BASE_URL
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test-123456"
        assert kwargs["json"]["model"] == "gpt-4o-mini"
        assert len(kwargs["json"]["messages"][1]["content"]) == OpenAIChatProvider.MAX_TEXT_CHARS

    @pytest.mark.asyncio
    async def test_model_override(self, provider):
        config = RemoteProviderConfig(ProviderKind.OPENAI, api_key="k", model_name="gpt-4o")
        session = make_session(make_response(200, openai_body(json.dumps(FULL_REPLY))))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            await provider.analyze("text", config)

        assert session.post.call_args.kwargs["json"]["model"] == "gpt-4o"

    @pytest.mark.asyncio
    async def test_chatty_content(self, provider, config):
        content = "Here you go:\n" + json.dumps(FULL_REPLY) + "\nLet me know!"
        session = make_session(make_response(200, openai_body(content)))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            result = await provider.analyze("text", config)

        assert result.intent == Intent.BUG_REPORT

    @pytest.mark.asyncio
    async def test_bare_string_sentiment_and_unknown_fields(self, provider, config):
        reply = {
            "sentiment": "Positive",
            "intent": "praise",
            "categories": ["speed", "billing"],
            "suggestions": ["Keep going.", "", 3],
        }
        session = make_session(make_response(200, openai_body(json.dumps(reply))))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            result = await provider.analyze("text", config)

        assert result.sentiment == SentimentScore(SentimentLabel.POSITIVE, 0)
        assert result.intent is None
        assert result.categories == frozenset({Category.BILLING})
        assert result.suggestions == ("Keep going.",)

    @pytest.mark.asyncio
    async def test_flat_label_shape(self, provider, config):
        reply = {"label": "negative", "score": -1.6, "suggestions": ["Breathe."]}
        session = make_session(make_response(200, openai_body(json.dumps(reply))))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            result = await provider.analyze("text", config)

        assert result.sentiment == SentimentScore(SentimentLabel.NEGATIVE, -2)

    @pytest.mark.asyncio
    async def test_missing_suggestions(self, provider, config):
        reply = {"sentiment": {"label": "neutral", "score": 0}, "intent": "feedback"}
        session = make_session(make_response(200, openai_body(json.dumps(reply))))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            with pytest.raises(NormalizationError):
                await provider.analyze("text", config)

    @pytest.mark.asyncio
    async def test_missing_choices(self, provider, config):
        session = make_session(make_response(200, json.dumps({"choices": []})))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            with pytest.raises(ParseError):
                await provider.analyze("text", config)

    @pytest.mark.asyncio
    async def test_no_key_no_request(self, provider):
        config = RemoteProviderConfig(ProviderKind.OPENAI, api_key="  ")
        get_session = AsyncMock()

        with patch.object(provider, "_get_session", get_session):
            with pytest.raises(ConfigurationAbsentError):
                await provider.analyze("text", config)

        get_session.assert_not_called()


# ============================================================
# GEMINI TESTS
# ============================================================

class TestGeminiProvider:
    """Tests for GeminiProvider."""

    @pytest.fixture
    def provider(self):
        return GeminiProvider()

    @pytest.fixture
    def config(self):
        return RemoteProviderConfig(ProviderKind.GEMINI, api_key="gem-key-987654")

    @pytest.mark.asyncio
    async def test_mood_string_normalized(self, provider, config):
        reply = {
            "mood": "stressed",
            "intensity": "high",
            "emotions": ["worry"],
            "confidence": 0.8,
            "suggestions": ["Take a short break."],
        }
        session = make_session(make_response(200, gemini_body(json.dumps(reply))))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            result = await provider.analyze("I am so behind on everything", config)

        assert result.sentiment == SentimentScore(SentimentLabel.NEGATIVE, -3)
        assert result.intent is None
        assert result.categories == frozenset()
        assert result.suggestions == ("Take a short break.",)
        assert result.source == "remote:gemini"

    @pytest.mark.asyncio
    async def test_explicit_sentiment_preferred(self, provider, config):
        reply = {"mood": "sad", "sentiment": "positive", "suggestions": []}
        session = make_session(make_response(200, gemini_body(json.dumps(reply))))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            result = await provider.analyze("text", config)

        assert result.sentiment == SentimentScore(SentimentLabel.POSITIVE, 1)

    @pytest.mark.asyncio
    async def test_unrecognized_mood(self, provider, config):
        reply = {"mood": "pensive", "suggestions": ["Reflect."]}
        session = make_session(make_response(200, gemini_body(json.dumps(reply))))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            result = await provider.analyze("text", config)

        assert result.sentiment is None

    @pytest.mark.asyncio
    async def test_key_in_query_string(self, provider, config):
        session = make_session(make_response(200, gemini_body('{"suggestions": []}')))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            await provider.analyze("y" * 5000, config)

        url = session.post.call_args.args[0]
        assert url.endswith(":generateContent?key=gem-key-987654")
        assert "/gemini-pro:" in url
        prompt = session.post.call_args.kwargs["json"]["contents"][0]["parts"][0]["text"]
        assert "y" * 4000 in prompt
        assert "y" * 4001 not in prompt

    @pytest.mark.asyncio
    async def test_empty_candidates(self, provider, config):
        session = make_session(make_response(200, json.dumps({"candidates": []})))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            with pytest.raises(ParseError):
                await provider.analyze("text", config)


# ============================================================
# GOOGLE NATURAL LANGUAGE TESTS
# ============================================================

class TestGoogleLanguageProvider:
    """Tests for GoogleLanguageProvider."""

    @pytest.fixture
    def provider(self):
        return GoogleLanguageProvider()

    @pytest.fixture
    def config(self):
        return RemoteProviderConfig(ProviderKind.GOOGLE_LANGUAGE, api_key="g-key-555555")

    @pytest.mark.parametrize("raw,label,score", [
        (0.8, SentimentLabel.POSITIVE, 4),
        (0.2, SentimentLabel.NEUTRAL, 1),
        (0.0, SentimentLabel.NEUTRAL, 0),
        (-0.6, SentimentLabel.NEGATIVE, -3),
    ])
    @pytest.mark.asyncio
    async def test_score_thresholds(self, provider, config, raw, label, score):
        body = json.dumps({"documentSentiment": {"score": raw, "magnitude": 1.0}})
        session = make_session(make_response(200, body))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            result = await provider.analyze("text", config)

        assert result.sentiment == SentimentScore(label, score)
        assert result.intent is None
        assert result.suggestions == ()
        assert result.source == "remote:google_language"

    @pytest.mark.asyncio
    async def test_request_document(self, provider, config):
        body = json.dumps({"documentSentiment": {"score": 0.5}})
        session = make_session(make_response(200, body))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            await provider.analyze("hello", config)

        kwargs = session.post.call_args.kwargs
        assert kwargs["json"]["document"] == {"type": "PLAIN_TEXT", "content": "hello"}

    @pytest.mark.asyncio
    async def test_missing_document_sentiment(self, provider, config):
        session = make_session(make_response(200, json.dumps({"sentences": []})))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            with pytest.raises(NormalizationError):
                await provider.analyze("text", config)

    @pytest.mark.asyncio
    async def test_non_numeric_score(self, provider, config):
        body = json.dumps({"documentSentiment": {"score": "high"}})
        session = make_session(make_response(200, body))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            with pytest.raises(NormalizationError):
                await provider.analyze("text", config)

    @pytest.mark.parametrize("score", ["1e400", "-Infinity", "NaN"])
    @pytest.mark.asyncio
    async def test_non_finite_score(self, provider, config, score):
        body = '{"documentSentiment": {"score": ' + score + ', "magnitude": 1.0}}'
        session = make_session(make_response(200, body))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            with pytest.raises(NormalizationError):
                await provider.analyze("text", config)


# ============================================================
# TRANSPORT TESTS
# ============================================================

class TestTransport:
    """Tests for the shared HTTP path in BaseRemoteProvider."""

    @pytest.fixture
    def provider(self):
        return OpenAIChatProvider()

    @pytest.fixture
    def config(self):
        return RemoteProviderConfig(ProviderKind.OPENAI, api_key="sk-test-123456", timeout_seconds=2.0)

    @pytest.mark.asyncio
    async def test_rate_limited(self, provider, config):
        session = make_session(make_response(429, "", headers={"Retry-After": "30"}))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            with pytest.raises(RateLimitError) as exc_info:
                await provider.analyze("text", config)

        assert exc_info.value.retry_after_seconds == 30
        assert exc_info.value.status_code == 429
        health = await provider.get_health()
        assert health.status == ProviderStatus.RATE_LIMITED

    @pytest.mark.asyncio
    async def test_server_error(self, provider, config):
        session = make_session(make_response(500, "internal error"))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            with pytest.raises(FetchError) as exc_info:
                await provider.analyze("text", config)

        assert exc_info.value.status_code == 500
        assert exc_info.value.incident_type == "transient_network_failure"

    @pytest.mark.asyncio
    async def test_timeout(self, provider, config):
        session = make_session(error=asyncio.TimeoutError())

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            with pytest.raises(FetchError, match="timed out"):
                await provider.analyze("text", config)

    @pytest.mark.asyncio
    async def test_connection_error(self, provider, config):
        session = make_session(error=aiohttp.ClientConnectionError("refused"))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            with pytest.raises(FetchError, match="Network error"):
                await provider.analyze("text", config)

    @pytest.mark.asyncio
    async def test_body_not_json(self, provider, config):
        session = make_session(make_response(200, "<html>oops</html>"))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            with pytest.raises(ParseError):
                await provider.analyze("text", config)

    @pytest.mark.asyncio
    async def test_health_degrades_then_recovers(self, provider, config):
        failing = make_session(make_response(503, ""))
        healthy = make_session(make_response(200, openai_body(json.dumps(FULL_REPLY))))

        with patch.object(provider, "_get_session", AsyncMock(return_value=failing)):
            for _ in range(3):
                with pytest.raises(FetchError):
                    await provider.analyze("text", config)

        assert (await provider.get_health()).status == ProviderStatus.UNAVAILABLE

        with patch.object(provider, "_get_session", AsyncMock(return_value=healthy)):
            await provider.analyze("text", config)

        health = await provider.get_health()
        assert health.status == ProviderStatus.HEALTHY
        assert health.consecutive_failures == 0
        assert health.error_count == 3

    @pytest.mark.asyncio
    async def test_gemini_error_url_masked(self):
        provider = GeminiProvider()
        gemini_config = RemoteProviderConfig(ProviderKind.GEMINI, api_key="secret-gemini-key")
        session = make_session(make_response(403, "forbidden"))

        with patch.object(provider, "_get_session", AsyncMock(return_value=session)):
            with pytest.raises(FetchError) as exc_info:
                await provider.analyze("text", gemini_config)

        assert "secret-gemini-key" not in exc_info.value.url
        assert "key=***" in exc_info.value.url

    @pytest.mark.asyncio
    async def test_close_session(self, provider):
        session = make_session()
        provider._session = session

        await provider.close()

        session.close.assert_awaited_once()


class TestMasking:
    """Tests for credential masking helpers."""

    def test_mask_value(self):
        assert mask_value("sk-abcdef123") == "sk-a...***"
        assert mask_value("abc") == "***"
        assert mask_value(None) == "***"

    def test_mask_headers(self):
        masked = mask_headers({"Authorization": "Bearer sk-abcdef", "Content-Type": "application/json"})

        assert masked["Authorization"] == "Bear...***"
        assert masked["Content-Type"] == "application/json"

    def test_mask_url(self):
        url = "https://example.com/v1/x:generateContent?key=abc123&alt=json"

        assert mask_url(url) == "https://example.com/v1/x:generateContent?key=***&alt=json"

    def test_mask_url_without_params(self):
        assert mask_url("https://api.openai.com/v1/chat/completions") == "https://api.openai.com/v1/chat/completions"
