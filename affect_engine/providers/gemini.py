"""
Gemini Provider - generateContent model describing mood.

Gemini answers with a free-form mood string (happy, stressed, ...) and
an optional sentiment label. The mood vocabulary is folded into the
three sentiment labels here so nothing downstream sees it.
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

from ..base import BaseRemoteProvider, ProviderRequest
from ..exceptions import ParseError
from ..models import (
    AnalysisResult,
    ProviderMetadata,
    RemoteProviderConfig,
    SentimentLabel,
    SentimentScore,
)
from ..parsing import parse_json_object


logger = logging.getLogger(__name__)


MOOD_TO_SENTIMENT: dict[str, SentimentLabel] = {
    "positive": SentimentLabel.POSITIVE,
    "happy": SentimentLabel.POSITIVE,
    "excited": SentimentLabel.POSITIVE,
    "relaxed": SentimentLabel.POSITIVE,
    "joyful": SentimentLabel.POSITIVE,
    "neutral": SentimentLabel.NEUTRAL,
    "calm": SentimentLabel.NEUTRAL,
    "negative": SentimentLabel.NEGATIVE,
    "sad": SentimentLabel.NEGATIVE,
    "angry": SentimentLabel.NEGATIVE,
    "anxious": SentimentLabel.NEGATIVE,
    "stressed": SentimentLabel.NEGATIVE,
    "frustrated": SentimentLabel.NEGATIVE,
}

INTENSITY_SCORE: dict[str, int] = {"low": 1, "medium": 2, "high": 3}

PROMPT_TEMPLATE = """Analyze the emotional tone, mood and purpose of this text. Respond with ONLY a JSON object containing:
{{
  "mood": "positive|negative|neutral|anxious|excited|calm|frustrated|happy|sad|angry|stressed|relaxed",
  "sentiment": "positive|negative|neutral",
  "intensity": "low|medium|high",
  "emotions": ["emotion1", "emotion2"],
  "intent": "bug_report|feature_request|support_request|feedback|unknown",
  "categories": ["performance|usability|reliability|integration|billing"],
  "suggestions": ["3-6 actionable suggestions"],
  "confidence": 0.95
}}

Text to analyze: {text}"""


class GeminiProvider(BaseRemoteProvider):
    """
    Google Gemini generateContent provider.

    Reply shape (inside candidates[0].content.parts[0].text):
        {"mood": "stressed", "sentiment": "negative", "intensity": "high",
         "emotions": [...], "suggestions": [...], "confidence": 0.9}
    """

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
    DEFAULT_MODEL = "gemini-pro"
    MAX_TEXT_CHARS = 4000
    TEMPERATURE = 0.1
    MAX_OUTPUT_TOKENS = 400

    def __init__(self, timeout: Optional[float] = None) -> None:
        super().__init__(timeout)

    @property
    def metadata(self) -> ProviderMetadata:
        return ProviderMetadata(
            name="gemini",
            display_name="Google Gemini",
            version="1.0.0",
            max_text_chars=self.MAX_TEXT_CHARS,
            default_model=self.DEFAULT_MODEL,
            base_url=self.BASE_URL,
            documentation_url="https://ai.google.dev/api/generate-content",
            returns_suggestions=True,
            tags=["llm", "mood"],
        )

    def _build_request(
        self,
        text: str,
        config: RemoteProviderConfig,
    ) -> ProviderRequest:
        model = config.model_name or self.DEFAULT_MODEL
        url = (
            f"{self.BASE_URL}/{quote(model)}:generateContent"
            f"?key={quote(config.api_key or '')}"
        )
        return ProviderRequest(
            url=url,
            headers={"Content-Type": "application/json"},
            body={
                "contents": [{"parts": [{"text": PROMPT_TEMPLATE.format(text=text)}]}],
                "generationConfig": {
                    "temperature": self.TEMPERATURE,
                    "maxOutputTokens": self.MAX_OUTPUT_TOKENS,
                },
            },
        )

    def _extract_reply(self, data: dict[str, Any]) -> dict[str, Any]:
        try:
            content = data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            raise ParseError(
                "Invalid response from Gemini API",
                provider_name=self.metadata.name,
                raw_data=str(data),
            )

        if not isinstance(content, str):
            raise ParseError(
                "Candidate text is not a string",
                provider_name=self.metadata.name,
                raw_data=str(content),
            )

        return parse_json_object(content, provider_name=self.metadata.name)

    def _normalize(self, reply: dict[str, Any]) -> AnalysisResult:
        suggestions = self._require_suggestions(reply)

        return AnalysisResult(
            sentiment=self._mood_sentiment(reply),
            intent=self._coerce_intent(reply.get("intent")),
            categories=self._coerce_categories(reply.get("categories") or []),
            suggestions=suggestions,
            source=f"remote:{self.metadata.name}",
        )

    def _mood_sentiment(self, reply: dict[str, Any]) -> Optional[SentimentScore]:
        """Prefer the explicit sentiment label, fall back to the mood string."""
        label = self._coerce_label(reply.get("sentiment"))

        if label is None:
            mood = reply.get("mood")
            if isinstance(mood, str):
                label = MOOD_TO_SENTIMENT.get(mood.strip().lower())

        if label is None:
            return None

        # Intensity becomes a signed magnitude so the score agrees with the label
        intensity = reply.get("intensity")
        magnitude = INTENSITY_SCORE.get(intensity.lower(), 1) if isinstance(intensity, str) else 1
        if label == SentimentLabel.POSITIVE:
            score = magnitude
        elif label == SentimentLabel.NEGATIVE:
            score = -magnitude
        else:
            score = 0

        return SentimentScore(label=label, score=score)
