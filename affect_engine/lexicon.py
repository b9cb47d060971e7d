"""
Lexicon Scorer - Deterministic word-list sentiment.

Case-insensitive substring containment, not tokenization: "crashing"
matches "crash" and multi-word terms like "not working" are allowed.
Each matched term counts once no matter how often it occurs.
"""

import logging
from typing import Iterable, Optional

from .models import SentimentScore


logger = logging.getLogger(__name__)


POSITIVE_TERMS: tuple[str, ...] = (
    "good", "great", "excellent", "amazing", "love", "happy", "satisfied",
    "fast", "success", "helpful", "works", "resolved", "awesome",
)

NEGATIVE_TERMS: tuple[str, ...] = (
    "bad", "terrible", "awful", "hate", "angry", "sad", "slow", "broken",
    "crash", "issue", "problem", "bug", "error", "not working", "frustrated",
)


class LexiconScorer:
    """
    Fixed word-list sentiment scorer.

    +1 per matched positive term, -1 per matched negative term.
    Label is the sign of the total. Pure and total.
    """

    def __init__(
        self,
        positive_terms: Optional[Iterable[str]] = None,
        negative_terms: Optional[Iterable[str]] = None,
    ) -> None:
        self.positive_terms = tuple(
            t.lower() for t in (positive_terms if positive_terms is not None else POSITIVE_TERMS)
        )
        self.negative_terms = tuple(
            t.lower() for t in (negative_terms if negative_terms is not None else NEGATIVE_TERMS)
        )

    def score(self, text: str) -> SentimentScore:
        """Score text against the lexicon."""
        text_lower = (text or "").lower()

        positive_count = sum(1 for term in self.positive_terms if term in text_lower)
        negative_count = sum(1 for term in self.negative_terms if term in text_lower)

        return SentimentScore.from_score(positive_count - negative_count)

    def matched_terms(self, text: str) -> dict[str, list[str]]:
        """Return which terms matched, for debugging and explanations."""
        text_lower = (text or "").lower()
        return {
            "positive": [t for t in self.positive_terms if t in text_lower],
            "negative": [t for t in self.negative_terms if t in text_lower],
        }
