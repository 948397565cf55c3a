"""Sequential translation of whole content trees with progress tracking."""

import copy
import logging
import threading
import time
from dataclasses import dataclass
from functools import partial
from typing import Callable, Iterable, Optional

from ..config import TranslationConfig
from ..content.collector import collect_text_fields
from ..content.models import (
    ContentNode,
    FieldError,
    TextField,
    TranslationProgress,
)
from ..content.writer import set_nested_value

logger = logging.getLogger(__name__)

# (text, target_lang, source_lang) -> translated text
TranslateCallback = Callable[[str, str, str], str]
ProgressCallback = Callable[[TranslationProgress], None]

STOPPED_CANCELLED = "cancelled"
STOPPED_DEADLINE = "deadline"


@dataclass
class TranslationOutcome:
    """Result of translating one content tree to one language.

    Attributes:
        tree: Translated tree, same shape as the source.
        progress: Final progress record of the run.
        target_language: Language the tree was translated to.
    """
    tree: ContentNode
    progress: TranslationProgress
    target_language: str

    @property
    def failed(self) -> int:
        """Number of fields that fell back to the source text."""
        return len(self.progress.errors)

    @property
    def translated_count(self) -> int:
        """Number of fields that received a translation."""
        return self.progress.completed - self.failed - self.progress.skipped_blank

    @property
    def all_failed(self) -> bool:
        """Whether every field that needed a translation failed."""
        attempted = self.progress.total - self.progress.skipped_blank
        return attempted > 0 and self.failed == attempted


def summarize_errors(progress: TranslationProgress) -> Optional[str]:
    """Build the user-facing warning for a partially translated run.

    Returns:
        Warning text, or None if every field was translated.
    """
    if not progress.errors:
        return None
    return (
        f"{len(progress.errors)} of {progress.total} fields failed to translate "
        f"and were left in the original language"
    )


class ContentTranslator:
    """Translates every text leaf of a content tree, one field at a time.

    Fields are sent to the translate callback strictly in sequence with a
    fixed pause between remote calls. A failing field is recorded in the
    progress errors and keeps its source text.
    """

    def __init__(
        self,
        translate: TranslateCallback,
        config: Optional[TranslationConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic
    ):
        """Initialize the translator.

        Args:
            translate: Callback ``(text, target_lang, source_lang) -> str``.
            config: Translation configuration. Uses defaults if not provided.
            sleep: Function used for pacing between remote calls.
            clock: Monotonic time source used for the deadline.
        """
        self.translate = translate
        self.config = config or TranslationConfig()
        self.sleep = sleep
        self.clock = clock

    def translate_object(
        self,
        source_tree: ContentNode,
        target_language: str,
        source_language: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> TranslationOutcome:
        """Translate a content tree to ``target_language``.

        Args:
            source_tree: Root dict or list of the content to translate.
            target_language: Target language code.
            source_language: Source language code. Uses config default if not provided.
            on_progress: Called with a progress snapshot before each field
                and once more after the last one. Exceptions it raises
                propagate to the caller.
            cancel_event: When set, remaining fields keep their source text
                and the run returns early.

        Returns:
            TranslationOutcome with the translated tree and final progress.

        Raises:
            ValueError: If source and target language are the same.
            TypeError: If the root is not a dict or list, or the tree holds
                non JSON-like values.
        """
        source_language = source_language or self.config.source_language
        if source_language == target_language:
            raise ValueError(
                f"Source and target language must differ (both {target_language!r})"
            )
        if not isinstance(source_tree, (dict, list)):
            raise TypeError(
                f"Content root must be a dict or list, not {type(source_tree).__name__}"
            )

        fields = collect_text_fields(source_tree, self.config.skip_fields)
        # Start from a copy so skipped and non-string leaves carry over
        result = copy.deepcopy(source_tree)
        progress = TranslationProgress(total=len(fields))

        deadline = None
        if self.config.deadline_seconds is not None:
            deadline = self.clock() + self.config.deadline_seconds

        logger.info(
            "Translating %d fields from %s to %s",
            progress.total, source_language, target_language
        )

        made_remote_call = False
        for field in fields:
            stop_reason = self._stop_reason(cancel_event, deadline)
            if stop_reason:
                progress.stopped_reason = stop_reason
                logger.warning(
                    "Translation to %s stopped (%s) after %d of %d fields",
                    target_language, stop_reason, progress.completed, progress.total
                )
                break

            progress.current_path = str(field.path)
            progress.current_text = field.preview()
            if on_progress:
                on_progress(progress.snapshot())

            if field.is_blank:
                # Nothing to translate
                set_nested_value(result, field.path, field.value)
                progress.skipped_blank += 1
                progress.completed += 1
                continue

            if made_remote_call and self.config.request_delay > 0:
                self.sleep(self.config.request_delay)

            translated = self._translate_field(field, target_language, source_language, progress)
            made_remote_call = True
            set_nested_value(result, field.path, translated)
            progress.completed += 1

        if on_progress:
            on_progress(progress.snapshot())

        logger.info(
            "Finished %s: %d/%d fields, %d errors",
            target_language, progress.completed, progress.total, len(progress.errors)
        )

        return TranslationOutcome(
            tree=result,
            progress=progress,
            target_language=target_language
        )

    def _stop_reason(
        self,
        cancel_event: Optional[threading.Event],
        deadline: Optional[float]
    ) -> Optional[str]:
        if cancel_event is not None and cancel_event.is_set():
            return STOPPED_CANCELLED
        if deadline is not None and self.clock() >= deadline:
            return STOPPED_DEADLINE
        return None

    def _translate_field(
        self,
        field: TextField,
        target_language: str,
        source_language: str,
        progress: TranslationProgress
    ) -> str:
        """Translate one field, falling back to its source text on failure."""
        path = str(field.path)
        try:
            translated = self.translate(field.value, target_language, source_language)
            if not isinstance(translated, str) or not translated:
                raise ValueError("No translation returned")
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.warning("Failed to translate %s: %s", path, message)
            progress.errors.append(FieldError(path=path, error=message))
            return field.value

        logger.debug("Translated %s", path)
        return translated

    def translate_to_languages(
        self,
        source_tree: ContentNode,
        target_languages: Optional[Iterable[str]] = None,
        source_language: Optional[str] = None,
        on_progress: Optional[Callable[[str, TranslationProgress], None]] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> dict[str, TranslationOutcome]:
        """Translate a tree into several languages, one run per language.

        Each language gets its own run and its own progress record.

        Args:
            source_tree: Root dict or list of the content to translate.
            target_languages: Language codes. Uses config targets if not provided.
            source_language: Source language code.
            on_progress: Called with ``(language, snapshot)``.
            cancel_event: Shared cancellation signal; once set, later
                languages are not started.

        Returns:
            Dictionary mapping language codes to outcomes.
        """
        languages = list(target_languages or self.config.target_languages)
        source = source_language or self.config.source_language
        outcomes = {}

        for language in languages:
            if language == source:
                logger.info("Skipping %s: same as source language", language)
                continue
            if cancel_event is not None and cancel_event.is_set():
                break

            callback = partial(on_progress, language) if on_progress else None

            outcomes[language] = self.translate_object(
                source_tree,
                language,
                source_language=source,
                on_progress=callback,
                cancel_event=cancel_event
            )

        return outcomes


def translate_object(
    source_tree: ContentNode,
    target_language: str,
    translate: TranslateCallback,
    source_language: str = "en",
    on_progress: Optional[ProgressCallback] = None,
    config: Optional[TranslationConfig] = None,
    cancel_event: Optional[threading.Event] = None
) -> tuple[ContentNode, TranslationProgress]:
    """Translate a content tree with a one-off ContentTranslator.

    Returns:
        Tuple of (translated tree, final progress).
    """
    translator = ContentTranslator(translate, config=config)
    outcome = translator.translate_object(
        source_tree,
        target_language,
        source_language=source_language,
        on_progress=on_progress,
        cancel_event=cancel_event
    )
    return outcome.tree, outcome.progress
