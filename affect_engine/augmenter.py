"""
Remote Augmenter - Fail-soft access to remote text-analysis providers.

The augmenter:
1. Maps a ProviderKind to a provider instance (one per kind, reused)
2. Makes exactly one remote call per invocation, never retries
3. Converts every failure into None (never raises)
4. Keeps statistics and an incident log for debugging
"""

import logging
from datetime import datetime
from typing import Any, Callable, Optional

from .base import BaseRemoteProvider
from .exceptions import AugmentationError, ConfigurationAbsentError
from .models import (
    AnalysisResult,
    AugmentationIncident,
    ProviderHealth,
    ProviderKind,
    RemoteProviderConfig,
)
from .providers import GeminiProvider, GoogleLanguageProvider, OpenAIChatProvider


logger = logging.getLogger(__name__)


ProviderFactory = Callable[[], BaseRemoteProvider]

_PROVIDER_REGISTRY: dict[ProviderKind, ProviderFactory] = {
    ProviderKind.OPENAI: OpenAIChatProvider,
    ProviderKind.GEMINI: GeminiProvider,
    ProviderKind.GOOGLE_LANGUAGE: GoogleLanguageProvider,
}


def register_provider(kind: ProviderKind, factory: ProviderFactory) -> None:
    """Register (or replace) the provider factory for a kind."""
    if kind in _PROVIDER_REGISTRY:
        logger.info(f"Replacing provider factory for {kind.value}")
    _PROVIDER_REGISTRY[kind] = factory


def list_providers() -> list[str]:
    """Names of all registered provider kinds."""
    return [kind.value for kind in _PROVIDER_REGISTRY]


class RemoteAugmenter:
    """
    Optional remote enrichment with a strict fallback contract.

    DESIGN PRINCIPLES:
    1. NEVER raise - any failure returns None
    2. ONE call - retries are the caller's business (and discouraged)
    3. ABSENT credentials are not an error - silently skipped
    4. NORMALIZED output - only AnalysisResult leaves this boundary

    Usage:
        augmenter = RemoteAugmenter()
        config = RemoteProviderConfig(ProviderKind.OPENAI, api_key="...")
        result = await augmenter.augment("The app keeps crashing", config)
        if result is None:
            ...  # use the heuristic result
    """

    MAX_INCIDENTS = 100

    def __init__(
        self,
        providers: Optional[dict[ProviderKind, BaseRemoteProvider]] = None,
    ) -> None:
        self._providers: dict[ProviderKind, BaseRemoteProvider] = dict(providers or {})
        self._incidents: list[AugmentationIncident] = []

        # Statistics
        self._stats = {
            "total_requests": 0,
            "successful": 0,
            "skipped_no_credentials": 0,
            "failed": 0,
        }

    def get_provider(self, kind: ProviderKind) -> BaseRemoteProvider:
        """Get the provider instance for a kind, creating it on first use."""
        provider = self._providers.get(kind)
        if provider is None:
            factory = _PROVIDER_REGISTRY.get(kind)
            if factory is None:
                raise ValueError(f"Unsupported provider: {kind.value}")
            provider = factory()
            self._providers[kind] = provider
        return provider

    async def augment(
        self,
        text: str,
        config: Optional[RemoteProviderConfig],
    ) -> Optional[AnalysisResult]:
        """
        Analyze text remotely.

        NEVER raises - returns None on missing credentials, network
        failure, non-2xx status, unparsable reply or a reply without
        a suggestions list.
        """
        self._stats["total_requests"] += 1

        if config is None or not config.has_credentials:
            self._stats["skipped_no_credentials"] += 1
            logger.debug("No remote provider credentials, skipping augmentation")
            return None

        # Settings collaborators may hand over the plain string value
        name = str(getattr(config.provider_kind, "value", config.provider_kind))
        try:
            provider = self.get_provider(ProviderKind(config.provider_kind))
            result = await provider.analyze(text, config)

        except ConfigurationAbsentError:
            self._stats["skipped_no_credentials"] += 1
            return None

        except AugmentationError as e:
            self._stats["failed"] += 1
            self._stats[e.incident_type] = self._stats.get(e.incident_type, 0) + 1
            logger.warning(f"[{name}] Augmentation failed ({e.incident_type}): {e}")
            self._record_incident(name, e.incident_type, str(e), e.to_dict())
            return None

        except Exception as e:
            self._stats["failed"] += 1
            logger.error(f"[{name}] Unexpected augmentation error: {e}", exc_info=True)
            self._record_incident(name, "unexpected_error", str(e))
            return None

        self._stats["successful"] += 1
        return result

    def _record_incident(
        self,
        provider_name: str,
        incident_type: str,
        error_message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        """Record an incident for debugging."""
        self._incidents.append(AugmentationIncident(
            provider_name=provider_name,
            incident_type=incident_type,
            timestamp=datetime.utcnow(),
            error_message=error_message,
            details=details,
        ))

        if len(self._incidents) > self.MAX_INCIDENTS:
            self._incidents = self._incidents[-self.MAX_INCIDENTS:]

    def get_incidents(
        self,
        limit: int = 20,
        provider_name: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """Get recent incidents."""
        incidents = self._incidents

        if provider_name:
            incidents = [i for i in incidents if i.provider_name == provider_name]

        return [i.to_dict() for i in incidents[-limit:]]

    def get_stats(self) -> dict[str, Any]:
        """Get augmentation statistics."""
        total = self._stats["total_requests"]
        success_rate = self._stats["successful"] / total * 100 if total > 0 else 0

        return {
            **self._stats,
            "success_rate_pct": round(success_rate, 2),
            "active_providers": [kind.value for kind in self._providers],
            "recent_incidents": len(self._incidents),
        }

    async def get_health(self) -> dict[str, ProviderHealth]:
        """Health of every provider that has been used."""
        return {
            kind.value: await provider.get_health()
            for kind, provider in self._providers.items()
        }

    async def close(self) -> None:
        """Close all provider sessions."""
        for provider in self._providers.values():
            await provider.close()
        self._providers.clear()
