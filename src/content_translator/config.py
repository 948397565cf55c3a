"""Configuration for the content translator."""

from dataclasses import dataclass, field, replace
from typing import Optional


# Locales the site content is published in
SUPPORTED_LOCALES = ("en", "fr", "es", "de", "ru")

LANGUAGE_NAMES = {
    "en": "English",
    "fr": "French",
    "es": "Spanish",
    "de": "German",
    "ru": "Russian",
    "it": "Italian",
    "pt": "Portuguese",
    "nl": "Dutch",
    "pl": "Polish",
    "ja": "Japanese",
    "ko": "Korean",
    "zh": "Chinese",
    "ar": "Arabic",
    "tr": "Turkish",
    "sw": "Swahili",
}

# Keys holding identifiers, enums, URLs and other machine-consumed values
DEFAULT_SKIP_FIELDS = frozenset({
    "level",
    "type",
    "slug",
    "url",
    "href",
    "id",
    "readTime",
    "createdAt",
    "updatedAt",
    "date",
    "icon",
    "image",
    "alt",
    "path",
    "link",
})

DEFAULT_LIBRETRANSLATE_URLS = (
    "https://libretranslate.de/translate",
    "https://libretranslate.com/translate",
    "https://translate.argosopentech.com/translate",
)

BACKENDS = ("ollama", "gateway", "libretranslate")


@dataclass
class TranslationConfig:
    """Configuration for a content translation run.

    Attributes:
        source_language: Source language code (default: "en").
        target_languages: List of target language codes.
        skip_fields: Key names whose values are never translated.
        request_delay: Seconds to wait between remote translation calls.
        request_timeout: Per-call timeout for the HTTP backends, in seconds.
        deadline_seconds: Overall budget for one run, None for unbounded.
        backend: Backend name, one of "ollama", "gateway", "libretranslate".
        ollama_url: URL for Ollama API.
        ollama_model: Model name for Ollama.
        gateway_url: Base URL of an OpenAI-compatible chat completions gateway.
        gateway_model: Model name sent to the gateway.
        gateway_api_key: Bearer token for the gateway.
        libretranslate_urls: LibreTranslate endpoints, tried in order.
        cache_ttl_seconds: Lifetime of cached translations, 0 disables caching.
        dry_run: If True, don't actually write output files.
        verbose: If True, print detailed output.
    """
    source_language: str = "en"
    target_languages: list[str] = field(default_factory=lambda: ["fr", "es", "de", "ru"])
    skip_fields: frozenset[str] = DEFAULT_SKIP_FIELDS
    request_delay: float = 0.1
    request_timeout: float = 60.0
    deadline_seconds: Optional[float] = None
    backend: str = "ollama"
    ollama_url: str = "http://localhost:11434"
    ollama_model: str = "translategemma:12b"
    gateway_url: str = "https://ai.gateway.lovable.dev"
    gateway_model: str = "google/gemini-2.5-flash"
    gateway_api_key: Optional[str] = None
    libretranslate_urls: tuple[str, ...] = DEFAULT_LIBRETRANSLATE_URLS
    cache_ttl_seconds: float = 60 * 60 * 24
    dry_run: bool = False
    verbose: bool = False

    def __post_init__(self):
        if self.backend not in BACKENDS:
            raise ValueError(
                f"Unknown backend {self.backend!r}, expected one of {', '.join(BACKENDS)}"
            )
        self.skip_fields = frozenset(self.skip_fields)

    def get_language_name(self, code: str) -> str:
        """Get the full language name for a language code.

        Args:
            code: Language code (e.g., "de").

        Returns:
            Full language name (e.g., "German").
        """
        return LANGUAGE_NAMES.get(code, code)

    def with_extra_skip_fields(self, names) -> "TranslationConfig":
        """Return a copy of this config with additional skip fields."""
        return replace(self, skip_fields=self.skip_fields | frozenset(names))
