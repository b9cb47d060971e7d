"""
Augmentation Exceptions - Custom error hierarchy.

These exceptions are for internal logging and incident records only.
RemoteAugmenter NEVER raises to its caller - it returns None and the
analyzer falls back to the heuristic result.
"""

from datetime import datetime
from typing import Any, Optional


class AugmentationError(Exception):
    """Base exception for all remote augmentation errors."""

    def __init__(
        self,
        message: str,
        provider_name: str = "",
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.provider_name = provider_name
        self.details = details or {}
        self.timestamp = datetime.utcnow()
        super().__init__(self.message)

    @property
    def incident_type(self) -> str:
        return "augmentation_error"

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "incident_type": self.incident_type,
            "message": self.message,
            "provider_name": self.provider_name,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class ConfigurationAbsentError(AugmentationError):
    """No credential configured for the selected provider."""

    @property
    def incident_type(self) -> str:
        return "configuration_absent"


class FetchError(AugmentationError):
    """Request failed or returned a non-success status."""

    def __init__(
        self,
        message: str,
        provider_name: str = "",
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, provider_name, details)
        self.status_code = status_code
        self.url = url

    @property
    def incident_type(self) -> str:
        return "transient_network_failure"

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update({
            "status_code": self.status_code,
            "url": self.url,
        })
        return data


class RateLimitError(FetchError):
    """Provider answered 429."""

    def __init__(
        self,
        message: str,
        provider_name: str = "",
        retry_after_seconds: Optional[int] = None,
        url: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, provider_name, 429, url, details)
        self.retry_after_seconds = retry_after_seconds

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["retry_after_seconds"] = self.retry_after_seconds
        return data


class ParseError(AugmentationError):
    """Reply could not be decoded into a JSON object."""

    def __init__(
        self,
        message: str,
        provider_name: str = "",
        raw_data: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, provider_name, details)
        self.raw_data = raw_data[:500] if raw_data else None  # Truncate for safety

    @property
    def incident_type(self) -> str:
        return "malformed_remote_payload"

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["raw_data_preview"] = self.raw_data[:100] if self.raw_data else None
        return data


class NormalizationError(AugmentationError):
    """Reply decoded but does not match the expected schema."""

    def __init__(
        self,
        message: str,
        provider_name: str = "",
        raw_value: Optional[Any] = None,
        target_field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, provider_name, details)
        self.raw_value = raw_value
        self.target_field = target_field

    @property
    def incident_type(self) -> str:
        return "malformed_remote_payload"

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update({
            "raw_value": str(self.raw_value)[:100] if self.raw_value else None,
            "target_field": self.target_field,
        })
        return data
