"""
Affect Data Models - Canonical analysis and typing structures.

Every component of the engine speaks these types. Provider-specific
response shapes are normalized into AnalysisResult at the provider
boundary and never travel further.
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union


class SentimentLabel(Enum):
    """Polarity of a piece of text."""
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class Intent(Enum):
    """What the author of a text is trying to do."""
    BUG_REPORT = "bug_report"
    FEATURE_REQUEST = "feature_request"
    SUPPORT_REQUEST = "support_request"
    FEEDBACK = "feedback"
    UNKNOWN = "unknown"


class Category(Enum):
    """Topic areas a text may touch."""
    PERFORMANCE = "performance"
    USABILITY = "usability"
    RELIABILITY = "reliability"
    INTEGRATION = "integration"
    BILLING = "billing"


class MoodLabel(Enum):
    """Coarse affective state. Superset of SentimentLabel values."""
    NEUTRAL = "neutral"
    POSITIVE = "positive"
    NEGATIVE = "negative"
    ANXIOUS = "anxious"
    EXCITED = "excited"
    CALM = "calm"
    FRUSTRATED = "frustrated"


class PresentationMode(Enum):
    """Adaptive theme identifier handed to the presentation layer."""
    CALM = "calm"
    UPLIFTING = "uplifting"
    DEFAULT = "default"


class ProviderKind(Enum):
    """Supported remote text-analysis providers."""
    OPENAI = "openai"
    GEMINI = "gemini"
    GOOGLE_LANGUAGE = "google_language"


AffectLabel = Union[MoodLabel, SentimentLabel, str]


@dataclass(frozen=True)
class SentimentScore:
    """
    Sentiment label plus integer lexicon score.

    On the heuristic path the label is always the sign of the score.
    Remote providers may assert a label independently.
    """
    label: SentimentLabel
    score: int = 0

    @classmethod
    def from_score(cls, score: int) -> "SentimentScore":
        """Derive the label from the sign of the score."""
        if score > 0:
            label = SentimentLabel.POSITIVE
        elif score < 0:
            label = SentimentLabel.NEGATIVE
        else:
            label = SentimentLabel.NEUTRAL
        return cls(label=label, score=score)

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label.value, "score": self.score}


@dataclass(frozen=True)
class AnalysisResult:
    """
    Canonical output of the affect analyzer.

    categories is a set: order-insensitive, no duplicates.
    suggestions keeps emission order and is never deduplicated.

    Results normalized from a remote provider may leave sentiment or
    intent as None when the provider did not assert a recognizable
    value. Results returned by AffectAnalyzer are always complete.
    """
    sentiment: Optional[SentimentScore]
    intent: Optional[Intent]
    categories: frozenset[Category] = frozenset()
    suggestions: tuple[str, ...] = ()
    source: str = "heuristic"

    def __post_init__(self) -> None:
        # Accept any iterable from callers but store immutable containers
        if not isinstance(self.categories, frozenset):
            object.__setattr__(self, "categories", frozenset(self.categories))
        if not isinstance(self.suggestions, tuple):
            object.__setattr__(self, "suggestions", tuple(self.suggestions))

    @property
    def is_complete(self) -> bool:
        return self.sentiment is not None and self.intent is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "sentiment": self.sentiment.to_dict() if self.sentiment else None,
            "intent": self.intent.value if self.intent else None,
            "categories": sorted(c.value for c in self.categories),
            "suggestions": list(self.suggestions),
            "source": self.source,
        }


@dataclass(frozen=True)
class TypingSample:
    """A single keystroke/input event. Carries no text content."""
    timestamp_ms: int
    is_deletion: bool = False
    raw_key: str = ""

    DELETION_KEYS = frozenset({"Backspace", "Delete"})

    @classmethod
    def from_key(cls, key: str, timestamp_ms: int) -> "TypingSample":
        """Build a sample from a key name, flagging deletion keys."""
        return cls(
            timestamp_ms=timestamp_ms,
            is_deletion=key in cls.DELETION_KEYS,
            raw_key=key,
        )


@dataclass
class TypingState:
    """
    Rolling state owned by one TypingBehaviorTracker.

    window_samples holds (sample, was_fast) pairs ordered by arrival,
    bounded to the retention window.
    """
    window_samples: deque = field(default_factory=deque)
    speed_estimate: float = 0.0
    error_count: int = 0
    mood: MoodLabel = MoodLabel.NEUTRAL
    last_timestamp_ms: Optional[int] = None
    total_keystrokes: int = 0
    total_deletions: int = 0

    @property
    def sample_count(self) -> int:
        return len(self.window_samples)

    @property
    def fast_count(self) -> int:
        return sum(1 for _, was_fast in self.window_samples if was_fast)

    @property
    def error_rate(self) -> float:
        return self.error_count / max(self.sample_count, 1)


@dataclass(frozen=True)
class TypingMetrics:
    """Read-only snapshot of tracker state for display."""
    keystrokes: int
    deletions: int
    window_size: int
    fast_count: int
    error_rate: float
    accuracy_pct: int
    speed_estimate: float
    mood: MoodLabel

    def to_dict(self) -> dict[str, Any]:
        return {
            "keystrokes": self.keystrokes,
            "deletions": self.deletions,
            "window_size": self.window_size,
            "fast_count": self.fast_count,
            "error_rate": round(self.error_rate, 3),
            "accuracy_pct": self.accuracy_pct,
            "speed_estimate": self.speed_estimate,
            "mood": self.mood.value,
        }


@dataclass
class RemoteProviderConfig:
    """
    Credentials and model choice for one remote provider.

    A missing api_key forces the heuristic-only path. It is not an error.
    """
    provider_kind: ProviderKind
    api_key: Optional[str] = None
    model_name: Optional[str] = None
    timeout_seconds: float = 15.0

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.api_key.strip())


@dataclass
class AnalysisOptions:
    """Per-call options for AffectAnalyzer.analyze()."""
    use_remote: bool = False
    config: Optional[RemoteProviderConfig] = None


class ProviderStatus(Enum):
    """Health status of a remote provider."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


@dataclass
class ProviderMetadata:
    """Metadata about a remote provider."""
    name: str
    display_name: str
    version: str
    max_text_chars: int
    default_model: Optional[str] = None
    base_url: str = ""
    documentation_url: str = ""
    returns_suggestions: bool = True
    tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "version": self.version,
            "max_text_chars": self.max_text_chars,
            "default_model": self.default_model,
            "base_url": self.base_url,
            "returns_suggestions": self.returns_suggestions,
            "tags": self.tags,
        }


@dataclass
class ProviderHealth:
    """Health status of a remote provider."""
    status: ProviderStatus
    last_check: datetime
    latency_ms: Optional[float] = None
    error_count: int = 0
    last_error: Optional[str] = None
    last_error_time: Optional[datetime] = None
    consecutive_failures: int = 0

    def is_healthy(self) -> bool:
        return self.status == ProviderStatus.HEALTHY

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "last_check": self.last_check.isoformat(),
            "latency_ms": self.latency_ms,
            "error_count": self.error_count,
            "last_error": self.last_error,
            "consecutive_failures": self.consecutive_failures,
        }


@dataclass
class AugmentationIncident:
    """Record of a failed augmentation attempt."""
    provider_name: str
    incident_type: str
    timestamp: datetime
    error_message: str
    details: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider_name": self.provider_name,
            "incident_type": self.incident_type,
            "timestamp": self.timestamp.isoformat(),
            "error_message": self.error_message,
            "details": self.details,
        }
