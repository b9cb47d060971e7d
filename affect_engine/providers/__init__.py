"""Remote text-analysis providers."""

from .gemini import GeminiProvider
from .google_language import GoogleLanguageProvider
from .openai_chat import OpenAIChatProvider

__all__ = ["GeminiProvider", "GoogleLanguageProvider", "OpenAIChatProvider"]
