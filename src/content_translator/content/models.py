"""Data models for content trees and the paths into them."""

import re
from dataclasses import dataclass, field
from typing import Optional, Union

from ..errors import MalformedPathError

# A content tree: scalars at the leaves, lists and string-keyed dicts above
ContentNode = Union[str, int, float, bool, None, list, dict]

# One dot-separated key, optionally followed by [N] index tokens
_SEGMENT_PATTERN = re.compile(r'([^.\[\]]*)((?:\[\d+\])*)')
_INDEX_PATTERN = re.compile(r'\[(\d+)\]')


@dataclass(frozen=True)
class PathSegment:
    """One step of a route into a content tree.

    Attributes:
        value: Map key (str) or list index (int).
    """
    value: Union[str, int]

    @property
    def is_index(self) -> bool:
        """Whether this segment addresses a list element."""
        return isinstance(self.value, int)

    def render(self, first: bool = False) -> str:
        if self.is_index:
            return f"[{self.value}]"
        return self.value if first else f".{self.value}"


@dataclass(frozen=True)
class FieldPath:
    """Route from the root of a content tree to one leaf.

    Renders as ``hero.title``, ``items[2].description`` or ``tags[1]``.

    Attributes:
        segments: Ordered path segments from the root.
    """
    segments: tuple[PathSegment, ...] = ()

    def child(self, key: str) -> "FieldPath":
        """Path to a map entry below this path."""
        return FieldPath(self.segments + (PathSegment(key),))

    def index(self, position: int) -> "FieldPath":
        """Path to a list element below this path."""
        return FieldPath(self.segments + (PathSegment(position),))

    @property
    def key(self) -> Optional[str]:
        """The last map key on the path, ignoring trailing list indexes."""
        for segment in reversed(self.segments):
            if not segment.is_index:
                return segment.value
        return None

    def __bool__(self) -> bool:
        return bool(self.segments)

    def __len__(self) -> int:
        return len(self.segments)

    def __str__(self) -> str:
        return "".join(
            segment.render(first=(i == 0))
            for i, segment in enumerate(self.segments)
        )

    @classmethod
    def parse(cls, text: str) -> "FieldPath":
        """Parse a rendered path such as ``items[2].description``.

        Args:
            text: Dot/bracket notation path.

        Returns:
            The parsed FieldPath.

        Raises:
            MalformedPathError: If the path is empty or not well formed.
        """
        if not text:
            raise MalformedPathError("Field path is empty")

        segments = []
        for position, part in enumerate(text.split('.')):
            match = _SEGMENT_PATTERN.fullmatch(part)
            if match is None:
                raise MalformedPathError(f"Malformed field path: {text!r}")

            key, indexes = match.groups()
            # Only the root may start directly with an index, e.g. "[0].title"
            if not key and not (position == 0 and indexes):
                raise MalformedPathError(f"Malformed field path: {text!r}")

            if key:
                segments.append(PathSegment(key))
            segments.extend(
                PathSegment(int(i)) for i in _INDEX_PATTERN.findall(indexes)
            )

        return cls(tuple(segments))


@dataclass
class TextField:
    """A translatable string leaf collected from a content tree.

    Attributes:
        path: Location of the leaf.
        value: The source text.
    """
    path: FieldPath
    value: str

    @property
    def is_blank(self) -> bool:
        """Whether the text is empty or whitespace only."""
        return not self.value.strip()

    def preview(self, limit: int = 50) -> str:
        """Short form of the value for progress displays."""
        if len(self.value) > limit:
            return self.value[:limit] + "..."
        return self.value


@dataclass
class FieldError:
    """A field whose translation failed.

    Attributes:
        path: Rendered path of the field.
        error: Error message.
    """
    path: str
    error: str


@dataclass
class TranslationProgress:
    """Progress of one translation run.

    Attributes:
        total: Number of collected text fields.
        completed: Number of fields processed so far.
        current_path: Path of the field being processed.
        current_text: Preview of the text being processed.
        errors: Fields whose translation failed.
        skipped_blank: Number of blank fields passed through.
        stopped_reason: "cancelled" or "deadline" if the run stopped early.
    """
    total: int = 0
    completed: int = 0
    current_path: str = ""
    current_text: str = ""
    errors: list[FieldError] = field(default_factory=list)
    skipped_blank: int = 0
    stopped_reason: Optional[str] = None

    @property
    def percent_complete(self) -> float:
        """Calculate percentage complete."""
        if self.total == 0:
            return 100.0
        return (self.completed / self.total) * 100

    @property
    def is_finished(self) -> bool:
        return self.completed >= self.total

    def snapshot(self) -> "TranslationProgress":
        """Return an independent copy for progress callbacks."""
        return TranslationProgress(
            total=self.total,
            completed=self.completed,
            current_path=self.current_path,
            current_text=self.current_text,
            errors=list(self.errors),
            skipped_blank=self.skipped_blank,
            stopped_reason=self.stopped_reason,
        )
