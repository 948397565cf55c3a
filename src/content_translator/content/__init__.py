"""Content trees: models, traversal, path writes and storage."""

from .models import (
    ContentNode,
    FieldError,
    FieldPath,
    PathSegment,
    TextField,
    TranslationProgress,
)
from .collector import collect_text_fields
from .writer import get_nested_value, set_nested_value
from .store import ContentStore

__all__ = [
    "ContentNode",
    "FieldError",
    "FieldPath",
    "PathSegment",
    "TextField",
    "TranslationProgress",
    "collect_text_fields",
    "get_nested_value",
    "set_nested_value",
    "ContentStore",
]
