"""
Affect Engine - Configuration.

============================================================
CONFIGURABLE ANALYSIS
============================================================

- Remote provider choice, model and timeout
- Provider credentials (one key per provider)
- Typing tracker thresholds
- Session debounce interval

Configuration can be loaded from:
- Default values
- Environment variables (a .env file is honored)
- YAML config file

Read-only at analysis time: build an EngineConfig once, then derive
RemoteProviderConfig / AnalysisOptions from it, or let create_tracker()
and create_session() wire the tracker and session settings in.

============================================================
"""

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

from dotenv import load_dotenv

from .analyzer import AffectAnalyzer
from .logging_utils import mask_value
from .models import AnalysisOptions, ProviderKind, RemoteProviderConfig
from .session import AnalysisSession, ResultCallback
from .typing_tracker import TrackerConfig, TypingBehaviorTracker


logger = logging.getLogger(__name__)


# Environment variable holding each provider's key
API_KEY_ENV_VARS = {
    ProviderKind.OPENAI: "OPENAI_API_KEY",
    ProviderKind.GEMINI: "GEMINI_API_KEY",
    ProviderKind.GOOGLE_LANGUAGE: "GOOGLE_API_KEY",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}


# =============================================================
# SESSION SETTINGS
# =============================================================


@dataclass
class SessionConfig:
    """Debounce settings for AnalysisSession."""
    debounce_ms: int = 500

    def __post_init__(self) -> None:
        if self.debounce_ms < 0:
            raise ValueError("debounce_ms must be >= 0")

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    def to_dict(self) -> Dict[str, int]:
        return {"debounce_ms": self.debounce_ms}


# =============================================================
# MAIN CONFIGURATION
# =============================================================


@dataclass
class EngineConfig:
    """
    Main configuration for the affect engine.

    Combines provider settings with tracker and session sub-configurations.
    """
    # Remote augmentation
    use_remote: bool = False
    provider: ProviderKind = ProviderKind.OPENAI
    model_name: Optional[str] = None
    timeout_seconds: float = 15.0
    api_keys: Dict[ProviderKind, str] = field(default_factory=dict)

    # Sub-configurations
    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    session: SessionConfig = field(default_factory=SessionConfig)

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """
        Load configuration from environment variables.

        Environment variables:
        - AFFECT_USE_REMOTE
        - AFFECT_PROVIDER (openai | gemini | google_language)
        - AFFECT_MODEL
        - AFFECT_TIMEOUT_SECONDS
        - AFFECT_DEBOUNCE_MS
        - AFFECT_RETENTION_MS
        - OPENAI_API_KEY, GEMINI_API_KEY, GOOGLE_API_KEY
        """
        load_dotenv()
        config = cls()

        if os.getenv("AFFECT_USE_REMOTE"):
            config.use_remote = os.getenv("AFFECT_USE_REMOTE").strip().lower() in _TRUE_VALUES
        if os.getenv("AFFECT_PROVIDER"):
            config.provider = ProviderKind(os.getenv("AFFECT_PROVIDER").strip().lower())
        if os.getenv("AFFECT_MODEL"):
            config.model_name = os.getenv("AFFECT_MODEL")
        if os.getenv("AFFECT_TIMEOUT_SECONDS"):
            config.timeout_seconds = float(os.getenv("AFFECT_TIMEOUT_SECONDS"))

        if os.getenv("AFFECT_DEBOUNCE_MS"):
            config.session = SessionConfig(debounce_ms=int(os.getenv("AFFECT_DEBOUNCE_MS")))
        if os.getenv("AFFECT_RETENTION_MS"):
            config.tracker = replace(
                config.tracker, retention_ms=int(os.getenv("AFFECT_RETENTION_MS"))
            )

        for kind, env_var in API_KEY_ENV_VARS.items():
            value = os.getenv(env_var)
            if value:
                config.api_keys[kind] = value

        # Rebuild so overridden values pass __post_init__ validation
        return replace(config)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "EngineConfig":
        """
        Load configuration from YAML file.

        Example:
            use_remote: true
            provider: gemini
            model_name: gemini-pro
            timeout_seconds: 10
            api_keys:
              gemini: "..."
            tracker:
              fast_gap_ms: 1000
              retention_ms: 120000
            session:
              debounce_ms: 300
        """
        try:
            import yaml
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}

            config = cls()

            if "use_remote" in data:
                config.use_remote = bool(data["use_remote"])
            if "provider" in data:
                config.provider = ProviderKind(str(data["provider"]).lower())
            if "model_name" in data:
                config.model_name = data["model_name"]
            if "timeout_seconds" in data:
                config.timeout_seconds = float(data["timeout_seconds"])

            for name, key in (data.get("api_keys") or {}).items():
                if key:
                    config.api_keys[ProviderKind(str(name).lower())] = str(key)

            if "tracker" in data:
                config.tracker = TrackerConfig(**data["tracker"])
            if "session" in data:
                config.session = SessionConfig(**data["session"])

            return replace(config)

        except Exception as e:
            logger.warning(f"Failed to load YAML config from {path}: {e}")
            return cls()

    def api_key_for(self, kind: Optional[ProviderKind] = None) -> Optional[str]:
        return self.api_keys.get(kind or self.provider)

    def provider_config(self, kind: Optional[ProviderKind] = None) -> RemoteProviderConfig:
        """Build the RemoteProviderConfig for the selected (or given) provider."""
        kind = kind or self.provider
        return RemoteProviderConfig(
            provider_kind=kind,
            api_key=self.api_key_for(kind),
            model_name=self.model_name if kind == self.provider else None,
            timeout_seconds=self.timeout_seconds,
        )

    def analysis_options(self, use_remote: Optional[bool] = None) -> AnalysisOptions:
        remote = self.use_remote if use_remote is None else use_remote
        return AnalysisOptions(
            use_remote=remote,
            config=self.provider_config() if remote else None,
        )

    def create_tracker(self, enabled: bool = True) -> TypingBehaviorTracker:
        return TypingBehaviorTracker(config=self.tracker, enabled=enabled)

    def create_session(
        self,
        analyzer: Optional[AffectAnalyzer] = None,
        on_result: Optional[ResultCallback] = None,
    ) -> AnalysisSession:
        """Build an AnalysisSession using this config's debounce and remote settings."""
        return AnalysisSession(
            analyzer or AffectAnalyzer(),
            options=self.analysis_options(),
            debounce_seconds=self.session.debounce_seconds,
            on_result=on_result,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary. API keys are masked."""
        return {
            "use_remote": self.use_remote,
            "provider": self.provider.value,
            "model_name": self.model_name,
            "timeout_seconds": self.timeout_seconds,
            "api_keys": {kind.value: mask_value(key) for kind, key in self.api_keys.items()},
            "tracker": self.tracker.to_dict(),
            "session": self.session.to_dict(),
        }


# =============================================================
# GLOBAL CONFIG SINGLETON
# =============================================================


_default_config: Optional[EngineConfig] = None


def get_config() -> EngineConfig:
    """Get the global engine configuration."""
    global _default_config
    if _default_config is None:
        _default_config = EngineConfig.from_env()
    return _default_config


def set_config(config: Optional[EngineConfig]) -> None:
    """Set (or clear, with None) the global engine configuration."""
    global _default_config
    _default_config = config
