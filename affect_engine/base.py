"""
Base Remote Provider - Abstract interface for text-analysis providers.

Each provider turns text into exactly one HTTP request, decodes the
reply and normalizes the provider-specific shape into AnalysisResult.
Provider field names never leave the provider module.

Providers RAISE AugmentationError subclasses. The RemoteAugmenter is
the boundary that converts every failure into a None result.
"""

import asyncio
import json
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional

import aiohttp

from .exceptions import (
    ConfigurationAbsentError,
    FetchError,
    NormalizationError,
    ParseError,
    RateLimitError,
)
from .logging_utils import describe_text, mask_headers, mask_url
from .models import (
    AnalysisResult,
    Category,
    Intent,
    ProviderHealth,
    ProviderMetadata,
    ProviderStatus,
    RemoteProviderConfig,
    SentimentLabel,
    SentimentScore,
)


logger = logging.getLogger(__name__)


@dataclass
class ProviderRequest:
    """A fully built HTTP request for one provider call."""
    url: str
    body: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)


class BaseRemoteProvider(ABC):
    """
    Abstract base class for remote text-analysis providers.

    DESIGN PRINCIPLES:
    1. ONE request per call - no retry, the feature is latency-sensitive
    2. BOUNDED payload - text truncated to metadata.max_text_chars
    3. NORMALIZE at the boundary - only AnalysisResult leaves
    4. NEVER log credentials or analyzed text

    All subclasses must implement:
    - metadata - Provider metadata property
    - _build_request() - Build the HTTP request for a text
    - _extract_reply() - Pull the analysis object out of the response body
    - _normalize() - Convert the analysis object to AnalysisResult
    """

    DEFAULT_TIMEOUT = 15  # seconds

    def __init__(self, timeout: Optional[float] = None) -> None:
        self.timeout = timeout or self.DEFAULT_TIMEOUT
        self._session: Optional[aiohttp.ClientSession] = None

        self._health = ProviderHealth(
            status=ProviderStatus.UNKNOWN,
            last_check=datetime.utcnow(),
        )

    @property
    @abstractmethod
    def metadata(self) -> ProviderMetadata:
        """Return provider metadata."""
        pass

    @abstractmethod
    def _build_request(
        self,
        text: str,
        config: RemoteProviderConfig,
    ) -> ProviderRequest:
        """Build the request for already-truncated text."""
        pass

    @abstractmethod
    def _extract_reply(self, data: dict[str, Any]) -> dict[str, Any]:
        """
        Extract the analysis object from a decoded response body.

        Raises ParseError when the body has no usable reply.
        """
        pass

    @abstractmethod
    def _normalize(self, reply: dict[str, Any]) -> AnalysisResult:
        """
        Normalize the analysis object to AnalysisResult.

        Raises NormalizationError on schema mismatch.
        """
        pass

    # ─────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────

    def truncate(self, text: str) -> str:
        """Bound outgoing payload size."""
        return (text or "")[:self.metadata.max_text_chars]

    async def analyze(
        self,
        text: str,
        config: RemoteProviderConfig,
    ) -> AnalysisResult:
        """
        Analyze text with exactly one remote call.

        Raises:
            ConfigurationAbsentError: no API key configured
            FetchError: network failure, timeout or non-2xx status
            ParseError: body or reply could not be decoded
            NormalizationError: reply does not match the expected schema
        """
        name = self.metadata.name

        if not config.has_credentials:
            raise ConfigurationAbsentError(
                f"No API key configured for {name}",
                provider_name=name,
            )

        request = self._build_request(self.truncate(text), config)
        logger.debug(
            f"[{name}] POST {mask_url(request.url)} "
            f"headers={mask_headers(request.headers)} text={describe_text(text)}"
        )

        start_time = datetime.utcnow()
        try:
            data = await self._post(request, config.timeout_seconds or self.timeout)
            reply = self._extract_reply(data)
            result = self._normalize(reply)
        except (FetchError, ParseError, NormalizationError) as e:
            self._record_failure(e)
            raise

        self._health.latency_ms = (datetime.utcnow() - start_time).total_seconds() * 1000
        self._health.status = ProviderStatus.HEALTHY
        self._health.consecutive_failures = 0
        return result

    async def get_health(self) -> ProviderHealth:
        """Get current health status."""
        self._health.last_check = datetime.utcnow()
        return self._health

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    # ─────────────────────────────────────────────────────────────
    # Internal methods
    # ─────────────────────────────────────────────────────────────

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def _post(
        self,
        request: ProviderRequest,
        timeout_seconds: float,
    ) -> dict[str, Any]:
        """Send the request and strictly decode the JSON body."""
        name = self.metadata.name
        session = await self._get_session()
        safe_url = mask_url(request.url)

        try:
            async with session.post(
                request.url,
                json=request.body,
                headers=request.headers,
                timeout=aiohttp.ClientTimeout(total=timeout_seconds),
            ) as response:
                if response.status == 429:
                    retry_after = response.headers.get("Retry-After")
                    raise RateLimitError(
                        f"{self.metadata.display_name} rate limit exceeded",
                        provider_name=name,
                        retry_after_seconds=int(retry_after) if retry_after and retry_after.isdigit() else None,
                        url=safe_url,
                    )

                body = await response.text()

                if not 200 <= response.status < 300:
                    raise FetchError(
                        f"{self.metadata.display_name} API error: {response.status}",
                        provider_name=name,
                        status_code=response.status,
                        url=safe_url,
                        details={"response": body[:500]},
                    )

        except aiohttp.ClientError as e:
            raise FetchError(f"Network error: {e}", provider_name=name, url=safe_url)
        except asyncio.TimeoutError:
            raise FetchError(
                f"Request timed out after {timeout_seconds}s",
                provider_name=name,
                url=safe_url,
            )

        try:
            data = json.loads(body)
        except ValueError as e:
            raise ParseError(f"Response body is not JSON: {e}", provider_name=name, raw_data=body)

        if not isinstance(data, dict):
            raise ParseError("Response body is not a JSON object", provider_name=name, raw_data=body)

        return data

    def _record_failure(self, error: Exception) -> None:
        self._health.consecutive_failures += 1
        self._health.error_count += 1
        self._health.last_error = str(error)
        self._health.last_error_time = datetime.utcnow()

        if isinstance(error, RateLimitError):
            self._health.status = ProviderStatus.RATE_LIMITED
        elif self._health.consecutive_failures >= 3:
            self._health.status = ProviderStatus.UNAVAILABLE
        else:
            self._health.status = ProviderStatus.DEGRADED

    # ─────────────────────────────────────────────────────────────
    # Normalization helpers shared by providers
    # ─────────────────────────────────────────────────────────────

    def _coerce_sentiment(self, value: Any) -> Optional[SentimentScore]:
        """
        Accept {"label": ..., "score": ...} or a bare label string.

        Returns None when no recognizable label is present.
        """
        score_value: Any = None
        if isinstance(value, dict):
            label_value = value.get("label")
            score_value = value.get("score")
        else:
            label_value = value

        label = self._coerce_label(label_value)
        if label is None:
            return None

        return SentimentScore(label=label, score=self._coerce_score(score_value))

    @staticmethod
    def _coerce_label(value: Any) -> Optional[SentimentLabel]:
        if not isinstance(value, str):
            return None
        try:
            return SentimentLabel(value.strip().lower())
        except ValueError:
            return None

    @staticmethod
    def _coerce_score(value: Any) -> int:
        if isinstance(value, bool):
            return 0
        if isinstance(value, str):
            try:
                value = float(value)
            except ValueError:
                return 0
        if isinstance(value, (int, float)):
            # inf and nan carry no usable magnitude
            if not math.isfinite(value):
                return 0
            return int(round(value))
        return 0

    @staticmethod
    def _coerce_intent(value: Any) -> Optional[Intent]:
        if not isinstance(value, str) or not value.strip():
            return None
        try:
            return Intent(value.strip().lower())
        except ValueError:
            return None

    @staticmethod
    def _coerce_categories(value: Any) -> frozenset[Category]:
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, Iterable):
            return frozenset()

        categories = set()
        for item in value:
            if not isinstance(item, str):
                continue
            try:
                categories.add(Category(item.strip().lower()))
            except ValueError:
                logger.debug(f"Ignoring unknown category: {item!r}")
        return frozenset(categories)

    def _require_suggestions(self, reply: dict[str, Any]) -> tuple[str, ...]:
        """The reply must carry a suggestions list; items are cleaned."""
        value = reply.get("suggestions")
        if not isinstance(value, list):
            raise NormalizationError(
                "Reply is missing the suggestions list",
                provider_name=self.metadata.name,
                raw_value=value,
                target_field="suggestions",
            )
        return tuple(
            item.strip() for item in value
            if isinstance(item, str) and item.strip()
        )
