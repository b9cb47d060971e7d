"""
Suggestion Engine - Rule table from classifier output to next steps.

Rule evaluation order is fixed: intent rules, then category rules, then
sentiment rules. Every satisfied rule appends its strings. Nothing is
deduplicated; if two rules carry the same text it appears twice.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence

from .models import (
    AffectLabel,
    Category,
    Intent,
    MoodLabel,
    SentimentLabel,
    SentimentScore,
)


logger = logging.getLogger(__name__)


FALLBACK_SUGGESTION = "Clarify the goal and constraints; suggest next concrete action."


@dataclass(frozen=True)
class SuggestionRule:
    """A condition over (intent, categories, sentiment) and the text it emits."""
    name: str
    condition: Callable[[Intent, frozenset[Category], SentimentScore], bool]
    suggestions: tuple[str, ...]


def _intent_is(intent: Intent) -> Callable[..., bool]:
    return lambda i, c, s: i == intent


def _has_category(category: Category) -> Callable[..., bool]:
    return lambda i, c, s: category in c


def _sentiment_is(label: SentimentLabel) -> Callable[..., bool]:
    return lambda i, c, s: s.label == label


DEFAULT_RULES: tuple[SuggestionRule, ...] = (
    # Intent rules
    SuggestionRule(
        "bug_report",
        _intent_is(Intent.BUG_REPORT),
        (
            "Reproduce the issue with clear steps and environment details.",
            "Collect logs, screenshots, and error messages.",
            "Provide expected vs actual behavior.",
        ),
    ),
    SuggestionRule(
        "support_request",
        _intent_is(Intent.SUPPORT_REQUEST),
        (
            "Share a minimal example and what you've tried.",
            "Link to relevant docs or FAQs.",
        ),
    ),
    SuggestionRule(
        "feature_request",
        _intent_is(Intent.FEATURE_REQUEST),
        (
            "Describe the use case, impact, and priority.",
            "Propose acceptance criteria and alternatives considered.",
        ),
    ),
    # Category rules
    SuggestionRule(
        "performance",
        _has_category(Category.PERFORMANCE),
        ("Measure timings and identify slow operations using profiling tools.",),
    ),
    SuggestionRule(
        "integration",
        _has_category(Category.INTEGRATION),
        ("Validate API keys/scopes and inspect network requests.",),
    ),
    # Sentiment rules
    SuggestionRule(
        "negative_sentiment",
        _sentiment_is(SentimentLabel.NEGATIVE),
        ("Acknowledge frustration and set clear next steps.",),
    ),
)


class SuggestionEngine:
    """Deterministic rule-based suggestion list."""

    def __init__(
        self,
        rules: Optional[Sequence[SuggestionRule]] = None,
        fallback: str = FALLBACK_SUGGESTION,
    ) -> None:
        self.rules = tuple(rules) if rules is not None else DEFAULT_RULES
        self.fallback = fallback

    def suggest(
        self,
        intent: Intent,
        categories: Iterable[Category],
        sentiment: SentimentScore,
    ) -> list[str]:
        """Apply every rule in order and collect the emitted strings."""
        category_set = frozenset(categories)
        suggestions: list[str] = []

        for rule in self.rules:
            if rule.condition(intent, category_set, sentiment):
                suggestions.extend(rule.suggestions)

        if not suggestions:
            suggestions.append(self.fallback)

        return suggestions


# ─────────────────────────────────────────────────────────────
# Mood recommendations
# ─────────────────────────────────────────────────────────────

MOOD_RECOMMENDATIONS: dict[MoodLabel, tuple[str, ...]] = {
    MoodLabel.POSITIVE: (
        "Continue engaging with this positive content",
        "Share this positive experience with others",
        "Bookmark this page for future reference",
        "Take a moment to appreciate this positive feeling",
    ),
    MoodLabel.NEGATIVE: (
        "Take a deep breath and pause for a moment",
        "Consider a short break from this content",
        "Try a short breathing exercise",
        "Focus on something positive in your environment",
        "Remember that it's okay to step away",
    ),
    MoodLabel.ANXIOUS: (
        "Practice deep breathing exercises",
        "Focus on the present moment",
        "Try progressive muscle relaxation",
        "Take a short walk or stretch break",
    ),
    MoodLabel.EXCITED: (
        "Channel your energy productively",
        "Take a moment to ground yourself",
        "Share your enthusiasm with others",
        "Use this energy for focused work",
    ),
    MoodLabel.CALM: (
        "Enjoy this peaceful state",
        "Maintain your inner balance",
        "Use this calm for focused work",
        "Practice mindfulness to stay present",
    ),
    MoodLabel.FRUSTRATED: (
        "Take a step back and breathe deeply",
        "Consider what's causing this frustration",
        "Try a breathing exercise to calm down",
        "Remember that mistakes are part of learning",
    ),
    MoodLabel.NEUTRAL: (
        "A balanced state is perfect for focus",
        "Use this stability for productivity",
        "Maintain your equilibrium",
        "Consider what you'd like to achieve",
    ),
}


def recommend_for_mood(mood: AffectLabel) -> list[str]:
    """Wellbeing recommendations for a mood; unknown moods get the neutral set."""
    value = mood.value if isinstance(mood, (MoodLabel, SentimentLabel)) else str(mood).lower()
    try:
        label = MoodLabel(value)
    except ValueError:
        label = MoodLabel.NEUTRAL
    return list(MOOD_RECOMMENDATIONS[label])
