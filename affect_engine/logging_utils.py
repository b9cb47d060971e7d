"""
Affect Engine - Secure Logging Utilities.

============================================================
PURPOSE
============================================================
Provider requests carry credentials in headers (bearer tokens) or in
the query string (?key=...). Everything that reaches a log line or an
incident record goes through these helpers first.

1. NEVER log raw API keys
2. Mask sensitive headers (Authorization, x-goog-api-key, ...)
3. Mask key-like query parameters in URLs
4. Never log the analyzed text itself, only its length

============================================================
"""

import logging
import re
from typing import Any, Optional


logger = logging.getLogger(__name__)


# ============================================================
# SENSITIVE DATA PATTERNS
# ============================================================

SENSITIVE_HEADERS = {
    "authorization",
    "x-api-key",
    "x-goog-api-key",
    "api-key",
}

SENSITIVE_PARAMS = {
    "key",
    "apikey",
    "api_key",
    "token",
    "access_token",
    "auth_token",
}

_URL_PARAM_PATTERNS = [
    re.compile(rf"([?&]{param}=)([^&#]+)", re.IGNORECASE)
    for param in sorted(SENSITIVE_PARAMS)
]


# ============================================================
# MASKING FUNCTIONS
# ============================================================

def mask_value(value: Optional[str], show_chars: int = 4) -> str:
    """
    Mask a sensitive value, showing only first few chars.

    Args:
        value: Value to mask
        show_chars: Number of chars to show at start

    Returns:
        Masked value
    """
    if not value or len(value) <= show_chars:
        return "***"
    return f"{value[:show_chars]}...***"


def mask_headers(headers: Optional[dict[str, str]]) -> dict[str, str]:
    """Mask sensitive headers."""
    if not headers:
        return {}

    masked = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS:
            masked[key] = mask_value(str(value))
        else:
            masked[key] = value
    return masked


def mask_url(url: Optional[str]) -> Optional[str]:
    """Mask credential query parameters in a URL."""
    if not url:
        return url

    for pattern in _URL_PARAM_PATTERNS:
        url = pattern.sub(lambda m: f"{m.group(1)}***", url)
    return url


def describe_text(text: str) -> dict[str, Any]:
    """Loggable description of analyzed text without its content."""
    return {"chars": len(text or ""), "words": len((text or "").split())}
