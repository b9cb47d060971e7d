"""
OpenAI Chat Provider - Chat-completions model asked for strict JSON.

This is the provider family that returns suggestion lists. The model
is told to answer with keys sentiment, intent, categories and
suggestions; replies wrapped in prose are recovered by the balanced
object parser.
"""

import logging
from typing import Any, Optional

from ..base import BaseRemoteProvider, ProviderRequest
from ..exceptions import ParseError
from ..models import (
    AnalysisResult,
    ProviderMetadata,
    RemoteProviderConfig,
)
from ..parsing import parse_json_object


logger = logging.getLogger(__name__)


SYSTEM_PROMPT = (
    "You are a helpful assistant that analyzes user-provided text to extract: "
    "sentiment (positive/neutral/negative), "
    "intent (bug_report/feature_request/support_request/feedback/unknown), "
    "categories (performance/usability/reliability/integration/billing), "
    "and 3-6 actionable suggestions to resolve the problem. "
    "Respond in strict JSON with keys: sentiment, intent, categories, suggestions. "
    'sentiment is an object {"label": ..., "score": integer}.'
)


class OpenAIChatProvider(BaseRemoteProvider):
    """
    OpenAI chat-completions provider.

    Reply shape (inside choices[0].message.content):
        {"sentiment": {"label": "negative", "score": -2},
         "intent": "bug_report",
         "categories": ["reliability"],
         "suggestions": ["...", "..."]}

    Older prompts produced a flat shape with top-level label/score keys;
    both are accepted.
    """

    BASE_URL = "https://api.openai.com/v1/chat/completions"
    DEFAULT_MODEL = "gpt-4o-mini"
    MAX_TEXT_CHARS = 8000
    TEMPERATURE = 0.2

    def __init__(self, timeout: Optional[float] = None) -> None:
        super().__init__(timeout)

    @property
    def metadata(self) -> ProviderMetadata:
        return ProviderMetadata(
            name="openai",
            display_name="OpenAI Chat",
            version="1.0.0",
            max_text_chars=self.MAX_TEXT_CHARS,
            default_model=self.DEFAULT_MODEL,
            base_url=self.BASE_URL,
            documentation_url="https://platform.openai.com/docs/api-reference/chat",
            returns_suggestions=True,
            tags=["llm", "chat", "json"],
        )

    def _build_request(
        self,
        text: str,
        config: RemoteProviderConfig,
    ) -> ProviderRequest:
        return ProviderRequest(
            url=self.BASE_URL,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {config.api_key}",
            },
            body={
                "model": config.model_name or self.DEFAULT_MODEL,
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": text},
                ],
                "temperature": self.TEMPERATURE,
            },
        )

    def _extract_reply(self, data: dict[str, Any]) -> dict[str, Any]:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise ParseError(
                "Response has no message content",
                provider_name=self.metadata.name,
                raw_data=str(data),
            )

        if not isinstance(content, str):
            raise ParseError(
                "Message content is not text",
                provider_name=self.metadata.name,
                raw_data=str(content),
            )

        return parse_json_object(content, provider_name=self.metadata.name)

    def _normalize(self, reply: dict[str, Any]) -> AnalysisResult:
        suggestions = self._require_suggestions(reply)

        sentiment_value = reply.get("sentiment")
        if not isinstance(sentiment_value, dict) and "label" in reply:
            # Flat shape: {"sentiment": "...", "label": "...", "score": n}
            sentiment_value = {
                "label": reply.get("label") or sentiment_value,
                "score": reply.get("score"),
            }

        return AnalysisResult(
            sentiment=self._coerce_sentiment(sentiment_value),
            intent=self._coerce_intent(reply.get("intent")),
            categories=self._coerce_categories(reply.get("categories") or []),
            suggestions=suggestions,
            source=f"remote:{self.metadata.name}",
        )
