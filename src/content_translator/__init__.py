"""Translate JSON content trees field by field."""

__version__ = "0.1.0"

from .config import TranslationConfig, DEFAULT_SKIP_FIELDS
from .translation import ContentTranslator, TranslationEngine, translate_object

__all__ = [
    "TranslationConfig",
    "DEFAULT_SKIP_FIELDS",
    "ContentTranslator",
    "TranslationEngine",
    "translate_object",
]
