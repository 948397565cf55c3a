"""Exceptions raised by the content translator."""


class ContentTranslatorError(Exception):
    """Base class for all content translator errors."""


class MalformedPathError(ContentTranslatorError, ValueError):
    """A field path is empty or does not fit the tree it addresses."""


class ContentFileError(ContentTranslatorError):
    """A content file could not be read or parsed."""


class TranslationError(ContentTranslatorError):
    """Translation of a single text failed."""


class BackendError(TranslationError):
    """The translation backend returned an error response."""


class RateLimitError(BackendError):
    """The translation backend is rate limiting this caller."""


class PaymentRequiredError(BackendError):
    """The translation backend has no credits left."""


class EmptyTranslationError(TranslationError):
    """The translation backend returned no text."""
