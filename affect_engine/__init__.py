"""
Affect Engine - Affective state inference from text and typing behavior.

The engine NEVER depends on a remote service: heuristics always produce
a result and remote providers can only refine it.

This package provides:
- Lexicon sentiment scoring and regex intent/category classification
- Rule-based actionable suggestions
- Optional remote augmentation (OpenAI, Gemini, Google Natural Language)
- A keystroke-timing mood tracker that never sees text content
- Mood/sentiment to presentation mode selection

Usage:
    from affect_engine import AffectAnalyzer, AnalysisOptions, EngineConfig

    analyzer = AffectAnalyzer()
    result = analyzer.analyze_heuristic("The app keeps crashing")

    config = EngineConfig.from_env()
    result = await analyzer.analyze(text, config.analysis_options(use_remote=True))

    print(result.sentiment.label.value, result.intent.value)
    print(select_mode(result.sentiment.label).value)

    tracker = TypingBehaviorTracker()
    mood = tracker.record_key("Backspace", timestamp_ms=1_000)

Output Schema:
- sentiment: label (positive | neutral | negative) and integer score
- intent: bug_report | feature_request | support_request | feedback | unknown
- categories: subset of performance, usability, reliability, integration, billing
- suggestions: ordered, never empty
- source: heuristic | remote:<provider> | merged:<provider>
"""

__version__ = "1.0.0"

from .analyzer import AffectAnalyzer
from .augmenter import RemoteAugmenter, list_providers, register_provider
from .base import BaseRemoteProvider
from .config import EngineConfig, SessionConfig, get_config, set_config
from .exceptions import (
    AugmentationError,
    ConfigurationAbsentError,
    FetchError,
    NormalizationError,
    ParseError,
    RateLimitError,
)
from .lexicon import LexiconScorer
from .models import (
    AnalysisOptions,
    AnalysisResult,
    Category,
    Intent,
    MoodLabel,
    PresentationMode,
    ProviderKind,
    RemoteProviderConfig,
    SentimentLabel,
    SentimentScore,
    TypingMetrics,
    TypingSample,
)
from .modes import ModeSelector, select_mode
from .patterns import PatternClassifier
from .providers import GeminiProvider, GoogleLanguageProvider, OpenAIChatProvider
from .session import AnalysisSession
from .suggestions import SuggestionEngine, recommend_for_mood
from .text_tools import check_readability, summarize_text
from .typing_tracker import TrackerConfig, TypingBehaviorTracker


__all__ = [
    # Analysis
    "AffectAnalyzer",
    "AnalysisSession",
    "LexiconScorer",
    "PatternClassifier",
    "SuggestionEngine",
    "recommend_for_mood",

    # Remote augmentation
    "BaseRemoteProvider",
    "GeminiProvider",
    "GoogleLanguageProvider",
    "OpenAIChatProvider",
    "RemoteAugmenter",
    "list_providers",
    "register_provider",

    # Typing behavior
    "TrackerConfig",
    "TypingBehaviorTracker",

    # Modes
    "ModeSelector",
    "select_mode",

    # Text tools
    "check_readability",
    "summarize_text",

    # Config
    "EngineConfig",
    "SessionConfig",
    "get_config",
    "set_config",

    # Models
    "AnalysisOptions",
    "AnalysisResult",
    "Category",
    "Intent",
    "MoodLabel",
    "PresentationMode",
    "ProviderKind",
    "RemoteProviderConfig",
    "SentimentLabel",
    "SentimentScore",
    "TypingMetrics",
    "TypingSample",

    # Exceptions
    "AugmentationError",
    "ConfigurationAbsentError",
    "FetchError",
    "NormalizationError",
    "ParseError",
    "RateLimitError",
]
