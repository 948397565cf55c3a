"""Translation engine with multiple backend support."""

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence

import requests

from ..config import TranslationConfig, LANGUAGE_NAMES
from ..errors import (
    BackendError,
    EmptyTranslationError,
    PaymentRequiredError,
    RateLimitError,
)

logger = logging.getLogger(__name__)


def build_prompt(text: str, source_lang: str, target_lang: str) -> str:
    """Build the translation instruction sent to LLM backends.

    Args:
        text: Text to translate.
        source_lang: Source language code.
        target_lang: Target language code.

    Returns:
        Prompt asking for the bare translation with Markdown preserved.
    """
    source_name = LANGUAGE_NAMES.get(source_lang, source_lang)
    target_name = LANGUAGE_NAMES.get(target_lang, target_lang)

    return (
        f"Translate the following text from {source_name} to {target_name}.\n"
        f"Preserve all Markdown formatting (headings, links, lists, bold, "
        f"italic, code blocks, etc.).\n"
        f"Return ONLY the translated text without any additional commentary, "
        f"quotes, or decoration.\n\n"
        f"Text to translate:\n{text}"
    )


class TranslationBackend(ABC):
    """Abstract base class for translation backends."""

    @abstractmethod
    def translate(
        self,
        text: str,
        source_lang: str,
        target_lang: str
    ) -> str:
        """Translate text from source to target language.

        Args:
            text: Text to translate.
            source_lang: Source language code.
            target_lang: Target language code.

        Returns:
            Translated text.

        Raises:
            TranslationError: If the backend could not translate the text.
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the backend is available and ready."""
        pass


class OllamaBackend(TranslationBackend):
    """Ollama-based translation backend."""

    def __init__(
        self,
        url: str = "http://localhost:11434",
        model: str = "translategemma:12b",
        timeout: float = 60.0
    ):
        """Initialize the Ollama backend.

        Args:
            url: Ollama API URL.
            model: Model name to use.
            timeout: Per-request timeout in seconds.
        """
        self.url = url.rstrip('/')
        self.model = model
        self.timeout = timeout

    def translate(
        self,
        text: str,
        source_lang: str,
        target_lang: str
    ) -> str:
        """Translate text using Ollama's generate endpoint."""
        try:
            response = requests.post(
                f"{self.url}/api/generate",
                json={
                    "model": self.model,
                    "prompt": build_prompt(text, source_lang, target_lang),
                    "stream": False,
                    "options": {
                        "temperature": 0.1,  # Low temperature for consistent translations
                    }
                },
                timeout=self.timeout
            )
            response.raise_for_status()
            result = response.json()
        except (requests.RequestException, json.JSONDecodeError) as e:
            raise BackendError(f"Ollama request failed: {e}") from e

        translated = result.get("response", "").strip()
        if not translated:
            raise EmptyTranslationError("No translation returned")
        return translated

    def is_available(self) -> bool:
        """Check if Ollama is running and the model is available."""
        try:
            response = requests.get(f"{self.url}/api/tags", timeout=5)
            response.raise_for_status()

            models = response.json().get("models", [])
            model_names = [m.get("name", "") for m in models]

            # Check for exact match or base name match
            base_model = self.model.split(":")[0]
            return any(
                self.model in name or base_model in name
                for name in model_names
            )
        except (requests.RequestException, json.JSONDecodeError):
            return False


class ChatCompletionsBackend(TranslationBackend):
    """Backend for an OpenAI-compatible chat completions AI gateway."""

    def __init__(
        self,
        url: str,
        model: str,
        api_key: Optional[str] = None,
        timeout: float = 60.0
    ):
        """Initialize the gateway backend.

        Args:
            url: Gateway base URL (without ``/v1/chat/completions``).
            model: Model name to request.
            api_key: Bearer token for the gateway.
            timeout: Per-request timeout in seconds.
        """
        self.url = url.rstrip('/')
        self.model = model
        self.api_key = api_key
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def translate(
        self,
        text: str,
        source_lang: str,
        target_lang: str
    ) -> str:
        """Translate text with a single chat completion."""
        if not self.api_key:
            raise BackendError("Gateway API key not configured")

        try:
            response = requests.post(
                f"{self.url}/v1/chat/completions",
                headers=self._headers(),
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "user", "content": build_prompt(text, source_lang, target_lang)}
                    ],
                },
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise BackendError(f"Gateway request failed: {e}") from e

        if response.status_code == 429:
            raise RateLimitError("Rate limit exceeded. Please try again later.")
        if response.status_code == 402:
            raise PaymentRequiredError("AI credits exhausted.")
        if not response.ok:
            logger.error("AI gateway error: %s %s", response.status_code, response.text)
            raise BackendError(f"AI gateway error (HTTP {response.status_code})")

        try:
            data = response.json()
            translated = data["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise BackendError(f"Unexpected gateway response: {e}") from e

        translated = translated.strip()
        if not translated:
            raise EmptyTranslationError("No translation returned")
        return translated

    def is_available(self) -> bool:
        """Check that a key is configured and the gateway answers."""
        if not self.api_key:
            return False
        try:
            response = requests.get(
                f"{self.url}/v1/models",
                headers=self._headers(),
                timeout=5
            )
            return response.status_code < 500
        except requests.RequestException:
            return False


class LibreTranslateBackend(TranslationBackend):
    """LibreTranslate backend trying a list of public mirrors in order."""

    def __init__(self, urls: Sequence[str], timeout: float = 10.0):
        """Initialize the LibreTranslate backend.

        Args:
            urls: Full ``/translate`` endpoint URLs, tried in order.
            timeout: Per-request timeout in seconds.
        """
        if not urls:
            raise ValueError("At least one LibreTranslate URL is required")
        self.urls = list(urls)
        self.timeout = timeout

    def translate(
        self,
        text: str,
        source_lang: str,
        target_lang: str
    ) -> str:
        """Translate text with the first mirror that answers."""
        payload = {"q": text, "source": source_lang, "target": target_lang, "format": "text"}
        failures = []

        for url in self.urls:
            try:
                response = requests.post(url, json=payload, timeout=self.timeout)
                response.raise_for_status()
                data = response.json()
            except (requests.RequestException, json.JSONDecodeError) as e:
                logger.debug("LibreTranslate mirror %s failed: %s", url, e)
                failures.append(f"{url}: {e}")
                continue

            translated = data.get("translatedText") or data.get("translated") or ""
            if translated:
                return translated
            failures.append(f"{url}: empty response")

        raise BackendError(
            "All LibreTranslate endpoints failed (" + "; ".join(failures) + ")"
        )

    def is_available(self) -> bool:
        """Check whether any mirror answers its languages endpoint."""
        for url in self.urls:
            base = url.rsplit('/translate', 1)[0]
            try:
                response = requests.get(f"{base}/languages", timeout=5)
                if response.ok:
                    return True
            except requests.RequestException:
                continue
        return False


class CachingBackend(TranslationBackend):
    """Wraps a backend with an in-memory cache of recent translations."""

    def __init__(
        self,
        backend: TranslationBackend,
        ttl_seconds: float = 60 * 60 * 24,
        clock: Callable[[], float] = time.monotonic
    ):
        """Initialize the cache.

        Args:
            backend: Backend that performs cache misses.
            ttl_seconds: Lifetime of a cached translation.
            clock: Monotonic time source.
        """
        self.backend = backend
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: dict[tuple[str, str, str], tuple[float, str]] = {}

    def translate(
        self,
        text: str,
        source_lang: str,
        target_lang: str
    ) -> str:
        key = (source_lang, target_lang, text)
        now = self.clock()

        entry = self._entries.get(key)
        if entry is not None:
            expires_at, translated = entry
            if now < expires_at:
                return translated
            del self._entries[key]

        # Failures propagate and are not cached
        translated = self.backend.translate(text, source_lang, target_lang)
        self._evict_expired(now)
        self._entries[key] = (now + self.ttl_seconds, translated)
        return translated

    def _evict_expired(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def is_available(self) -> bool:
        return self.backend.is_available()


class TranslationEngine:
    """Main translation engine that manages backends."""

    def __init__(self, config: Optional[TranslationConfig] = None):
        """Initialize the translation engine.

        Args:
            config: Translation configuration. Uses defaults if not provided.
        """
        self.config = config or TranslationConfig()
        self._backend: Optional[TranslationBackend] = None

    def _create_backend(self) -> TranslationBackend:
        config = self.config
        if config.backend == "gateway":
            return ChatCompletionsBackend(
                config.gateway_url,
                config.gateway_model,
                api_key=config.gateway_api_key,
                timeout=config.request_timeout
            )
        if config.backend == "libretranslate":
            return LibreTranslateBackend(
                config.libretranslate_urls,
                timeout=config.request_timeout
            )
        return OllamaBackend(
            config.ollama_url,
            config.ollama_model,
            timeout=config.request_timeout
        )

    @property
    def backend(self) -> TranslationBackend:
        """Get or create the translation backend."""
        if self._backend is None:
            backend = self._create_backend()
            if self.config.cache_ttl_seconds > 0:
                backend = CachingBackend(backend, self.config.cache_ttl_seconds)
            self._backend = backend
        return self._backend

    def translate(
        self,
        text: str,
        target_lang: str,
        source_lang: Optional[str] = None
    ) -> str:
        """Translate text to the target language.

        The argument order matches what ContentTranslator passes to its
        translate callback, so ``engine.translate`` can be handed over as is.

        Args:
            text: Text to translate.
            target_lang: Target language code.
            source_lang: Source language code. Uses config default if not provided.

        Returns:
            Translated text.
        """
        source = source_lang or self.config.source_language
        if source == target_lang:
            return text
        return self.backend.translate(text, source, target_lang)

    def is_available(self) -> bool:
        """Check if the translation backend is available."""
        return self.backend.is_available()
