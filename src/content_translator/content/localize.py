"""Localized column lookup for content rows.

Rows stored in the database carry one column per locale next to the base
column, e.g. ``title``, ``title_fr``, ``title_es``. These helpers pick the
best available value for a reader's language.
"""

from typing import Any, Iterable, Optional

DEFAULT_LOCALIZED_FIELDS = ("title", "description", "excerpt", "content")

# translation_status values that count as a usable translation
TRANSLATED_STATUSES = frozenset({"complete", "auto"})


def localized_field_name(field: str, language: str) -> str:
    """Name of the locale column for a field (e.g. ``title_fr``)."""
    return f"{field}_{language}"


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (list, dict)):
        return len(value) > 0
    return True


def candidate_columns(
    field: str,
    language: str,
    default_language: str = "en",
    fallbacks: Iterable[str] = ()
) -> list[str]:
    """List the columns to try, best first.

    Args:
        field: Base column name.
        language: Reader's language.
        default_language: Language stored in the base column.
        fallbacks: Further languages to try before the base column.

    Returns:
        Column names in lookup order, without duplicates.
    """
    columns = []
    for lang in (language, *fallbacks):
        if lang == default_language:
            continue
        name = localized_field_name(field, lang)
        if name not in columns:
            columns.append(name)
    columns.append(field)
    return columns


def get_localized_field(
    item: Optional[dict],
    field: str,
    language: str,
    default_language: str = "en",
    fallbacks: Iterable[str] = ()
) -> Any:
    """Return the best value of ``field`` for ``language``.

    Tries the locale column, then each fallback locale, then the base
    column. Missing, None and empty values fall through to the next
    candidate.

    Args:
        item: Row as a dict. None yields an empty string.
        field: Base column name.
        language: Reader's language.
        default_language: Language stored in the base column.
        fallbacks: Further languages to try before the base column.

    Returns:
        The first non-empty candidate value, or "" if there is none.
    """
    if not item:
        return ""

    for column in candidate_columns(field, language, default_language, fallbacks):
        value = item.get(column)
        if _has_value(value):
            return value
    return ""


def localize_item(
    item: Optional[dict],
    language: str,
    fields: Iterable[str] = DEFAULT_LOCALIZED_FIELDS,
    default_language: str = "en"
) -> Optional[dict]:
    """Return a shallow copy of ``item`` with fields replaced by locale values.

    Fields without a usable locale value keep their base value.
    """
    if item is None:
        return None
    if language == default_language:
        return item

    localized = dict(item)
    for field in fields:
        value = item.get(localized_field_name(field, language))
        if _has_value(value):
            localized[field] = value
    return localized


def has_translation(item: Optional[dict], language: str, default_language: str = "en") -> bool:
    """Check whether a row is marked as translated for ``language``."""
    if not item or language == default_language:
        return True

    status = item.get("translation_status")
    if isinstance(status, dict):
        return status.get(language) in TRANSLATED_STATUSES
    return False


def filter_by_language(
    items: Iterable[dict],
    language: str,
    default_language: str = "en"
) -> list[dict]:
    """Keep only rows translated for ``language``."""
    items = list(items)
    if language == default_language:
        return items
    return [item for item in items if has_translation(item, language, default_language)]
