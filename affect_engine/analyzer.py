"""
Affect Analyzer - Heuristic analysis with optional remote augmentation.

The heuristic result is ALWAYS computed first. It is the guaranteed
fallback: the remote layer may improve a result but can never be the
reason there is no result.

Merge policy when a remote result is available (field-level,
remote-preferred-when-present):
- sentiment:   remote if it carries a recognizable label
- intent:      remote if present
- categories:  remote if non-empty
- suggestions: remote list wholesale if non-empty, else heuristic list
               wholesale (lists from different sources are never mixed)
"""

import logging
from typing import Optional

from .augmenter import RemoteAugmenter
from .lexicon import LexiconScorer
from .logging_utils import describe_text
from .models import (
    AnalysisOptions,
    AnalysisResult,
    Intent,
    SentimentScore,
)
from .patterns import PatternClassifier
from .suggestions import SuggestionEngine


logger = logging.getLogger(__name__)


class AffectAnalyzer:
    """
    Orchestrates lexicon scoring, pattern classification, suggestions
    and optional remote augmentation into one canonical result.
    """

    def __init__(
        self,
        scorer: Optional[LexiconScorer] = None,
        classifier: Optional[PatternClassifier] = None,
        suggestion_engine: Optional[SuggestionEngine] = None,
        augmenter: Optional[RemoteAugmenter] = None,
    ) -> None:
        self.scorer = scorer or LexiconScorer()
        self.classifier = classifier or PatternClassifier()
        self.suggestion_engine = suggestion_engine or SuggestionEngine()
        self.augmenter = augmenter or RemoteAugmenter()

    def empty_result(self) -> AnalysisResult:
        """Neutral default for empty input."""
        return AnalysisResult(
            sentiment=SentimentScore.from_score(0),
            intent=Intent.UNKNOWN,
            categories=frozenset(),
            suggestions=(self.suggestion_engine.fallback,),
            source="heuristic",
        )

    def analyze_heuristic(self, text: str) -> AnalysisResult:
        """Pure heuristic composition. No network access."""
        if not text or not text.strip():
            return self.empty_result()

        sentiment = self.scorer.score(text)
        intent = self.classifier.classify_intent(text)
        categories = self.classifier.classify_categories(text)
        suggestions = self.suggestion_engine.suggest(intent, categories, sentiment)

        return AnalysisResult(
            sentiment=sentiment,
            intent=intent,
            categories=categories,
            suggestions=tuple(suggestions),
            source="heuristic",
        )

    async def analyze(
        self,
        text: str,
        options: Optional[AnalysisOptions] = None,
    ) -> AnalysisResult:
        """
        Analyze text, optionally augmenting with a remote provider.

        NEVER raises because of the remote layer; a failed or skipped
        augmentation returns the heuristic result unchanged.
        """
        options = options or AnalysisOptions()

        if not text or not text.strip():
            return self.empty_result()

        heuristic = self.analyze_heuristic(text)

        if not options.use_remote:
            return heuristic

        remote = await self.augmenter.augment(text, options.config)
        if remote is None:
            logger.debug(f"Using heuristic result for {describe_text(text)}")
            return heuristic

        return self.merge(heuristic, remote)

    @staticmethod
    def merge(heuristic: AnalysisResult, remote: AnalysisResult) -> AnalysisResult:
        """Field-level merge, remote preferred when present."""
        sentiment = remote.sentiment if remote.sentiment is not None else heuristic.sentiment
        intent = remote.intent if remote.intent is not None else heuristic.intent
        categories = remote.categories if remote.categories else heuristic.categories
        suggestions = remote.suggestions if remote.suggestions else heuristic.suggestions

        all_remote = (
            sentiment is remote.sentiment
            and intent is remote.intent
            and categories is remote.categories
            and suggestions is remote.suggestions
        )
        provider = remote.source.split(":", 1)[-1]

        return AnalysisResult(
            sentiment=sentiment,
            intent=intent,
            categories=categories,
            suggestions=suggestions,
            source=remote.source if all_remote else f"merged:{provider}",
        )

    async def close(self) -> None:
        await self.augmenter.close()
