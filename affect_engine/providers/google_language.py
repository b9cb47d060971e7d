"""
Google Natural Language Provider - documents:analyzeSentiment.

A classic sentiment API: structured response, no model text to parse,
no intent, categories or suggestions. The normalized result carries an
empty suggestions list so the analyzer keeps the heuristic suggestions.
"""

import logging
import math
from typing import Any, Optional
from urllib.parse import quote

from ..base import BaseRemoteProvider, ProviderRequest
from ..exceptions import NormalizationError
from ..models import (
    AnalysisResult,
    ProviderMetadata,
    RemoteProviderConfig,
    SentimentLabel,
    SentimentScore,
)


logger = logging.getLogger(__name__)


class GoogleLanguageProvider(BaseRemoteProvider):
    """
    Google Cloud Natural Language sentiment provider.

    Response shape:
        {"documentSentiment": {"score": -0.6, "magnitude": 1.3},
         "sentences": [...]}

    score in [-1, 1]; |score| <= 0.2 is treated as neutral.
    """

    BASE_URL = "https://language.googleapis.com/v1/documents:analyzeSentiment"
    MAX_TEXT_CHARS = 20000
    NEUTRAL_BAND = 0.2

    def __init__(self, timeout: Optional[float] = None) -> None:
        super().__init__(timeout)

    @property
    def metadata(self) -> ProviderMetadata:
        return ProviderMetadata(
            name="google_language",
            display_name="Google Natural Language",
            version="1.0.0",
            max_text_chars=self.MAX_TEXT_CHARS,
            default_model=None,
            base_url=self.BASE_URL,
            documentation_url="https://cloud.google.com/natural-language/docs/analyzing-sentiment",
            returns_suggestions=False,
            tags=["sentiment", "structured"],
        )

    def _build_request(
        self,
        text: str,
        config: RemoteProviderConfig,
    ) -> ProviderRequest:
        return ProviderRequest(
            url=f"{self.BASE_URL}?key={quote(config.api_key or '')}",
            headers={"Content-Type": "application/json"},
            body={
                "document": {"type": "PLAIN_TEXT", "content": text},
                "encodingType": "UTF8",
            },
        )

    def _extract_reply(self, data: dict[str, Any]) -> dict[str, Any]:
        document = data.get("documentSentiment")
        if not isinstance(document, dict):
            raise NormalizationError(
                "Response has no documentSentiment",
                provider_name=self.metadata.name,
                raw_value=data,
                target_field="documentSentiment",
            )

        # Canonical reply: the API itself never produces suggestions
        return {
            "score": document.get("score"),
            "magnitude": document.get("magnitude"),
            "suggestions": [],
        }

    def _normalize(self, reply: dict[str, Any]) -> AnalysisResult:
        suggestions = self._require_suggestions(reply)

        raw_score = reply.get("score")
        if (
            isinstance(raw_score, bool)
            or not isinstance(raw_score, (int, float))
            or not math.isfinite(raw_score)
        ):
            raise NormalizationError(
                "documentSentiment.score is not a finite number",
                provider_name=self.metadata.name,
                raw_value=raw_score,
                target_field="score",
            )

        if raw_score > self.NEUTRAL_BAND:
            label = SentimentLabel.POSITIVE
        elif raw_score < -self.NEUTRAL_BAND:
            label = SentimentLabel.NEGATIVE
        else:
            label = SentimentLabel.NEUTRAL

        # Scale [-1, 1] into the lexicon's integer range
        score = int(round(raw_score * 5))

        return AnalysisResult(
            sentiment=SentimentScore(label=label, score=score),
            intent=None,
            categories=frozenset(),
            suggestions=suggestions,
            source=f"remote:{self.metadata.name}",
        )
