"""Translation engine and content tree orchestration."""

from .engine import (
    TranslationEngine,
    TranslationBackend,
    OllamaBackend,
    ChatCompletionsBackend,
    LibreTranslateBackend,
    CachingBackend,
)
from .orchestrator import (
    ContentTranslator,
    TranslationOutcome,
    summarize_errors,
    translate_object,
)

__all__ = [
    "TranslationEngine",
    "TranslationBackend",
    "OllamaBackend",
    "ChatCompletionsBackend",
    "LibreTranslateBackend",
    "CachingBackend",
    "ContentTranslator",
    "TranslationOutcome",
    "summarize_errors",
    "translate_object",
]
