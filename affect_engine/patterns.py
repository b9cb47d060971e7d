"""
Pattern Classifier - Ordered intent rules and unordered category rules.

Patterns are regular expressions searched over the whole text,
case-insensitively. Intent rules are evaluated in order and the first
match wins; every category rule is evaluated independently.
"""

import logging
import re
from typing import Optional, Sequence, Union

from .models import Category, Intent


logger = logging.getLogger(__name__)


PatternSpec = Union[str, "re.Pattern[str]"]

# Order matters: a text mentioning both a crash and a feature is a bug report
INTENT_RULES: list[tuple[Intent, list[str]]] = [
    (Intent.BUG_REPORT, [r"bug|error|issue|crash|not working|fail"]),
    (Intent.FEATURE_REQUEST, [r"feature|add|could you|would like|enhancement"]),
    (Intent.SUPPORT_REQUEST, [r"how do i|help|support|guide|instruction"]),
    (Intent.FEEDBACK, [r"feedback|suggestion|thoughts|i think|improve"]),
]

CATEGORY_RULES: list[tuple[Category, list[str]]] = [
    (Category.PERFORMANCE, [r"slow|lag|latency|performance|optimi[sz]e"]),
    (Category.USABILITY, [r"confus|hard to|difficult|ux|ui|user[- ]?friendly"]),
    (Category.RELIABILITY, [r"crash|freeze|hang|unstable|reliab"]),
    (Category.INTEGRATION, [r"api|integrat|webhook|oauth|login|auth"]),
    (Category.BILLING, [r"bill|pay|invoice|subscription|charge"]),
]


def _compile(patterns: Sequence[PatternSpec]) -> list["re.Pattern[str]"]:
    compiled = []
    for pattern in patterns:
        if isinstance(pattern, str):
            compiled.append(re.compile(pattern, re.IGNORECASE))
        else:
            compiled.append(pattern)
    return compiled


class PatternClassifier:
    """Rule-based intent and category tagging."""

    def __init__(
        self,
        intent_rules: Optional[Sequence[tuple[Intent, Sequence[PatternSpec]]]] = None,
        category_rules: Optional[Sequence[tuple[Category, Sequence[PatternSpec]]]] = None,
    ) -> None:
        self._intent_rules = [
            (intent, _compile(patterns))
            for intent, patterns in (intent_rules if intent_rules is not None else INTENT_RULES)
        ]
        self._category_rules = [
            (category, _compile(patterns))
            for category, patterns in (category_rules if category_rules is not None else CATEGORY_RULES)
        ]

    def classify_intent(self, text: str) -> Intent:
        """Return the intent of the first rule with a matching pattern."""
        text = text or ""
        for intent, patterns in self._intent_rules:
            if any(p.search(text) for p in patterns):
                return intent
        return Intent.UNKNOWN

    def classify_categories(self, text: str) -> frozenset[Category]:
        """Return every category with at least one matching pattern."""
        text = text or ""
        return frozenset(
            category
            for category, patterns in self._category_rules
            if any(p.search(text) for p in patterns)
        )
