"""Path-addressed reads and writes into content trees."""

from typing import Any, Union

from ..errors import MalformedPathError
from .models import ContentNode, FieldPath, PathSegment

PathLike = Union[FieldPath, str]


def _as_path(path: PathLike) -> FieldPath:
    if isinstance(path, FieldPath):
        if not path:
            raise MalformedPathError("Field path is empty")
        return path
    return FieldPath.parse(path)


def _empty_container(segment: PathSegment) -> Union[list, dict]:
    return [] if segment.is_index else {}


def _check_container(container: Any, segment: PathSegment, path: FieldPath) -> None:
    if segment.is_index and not isinstance(container, list):
        raise MalformedPathError(
            f"Index segment [{segment.value}] of {path} addresses a "
            f"{type(container).__name__}, not a list"
        )
    if not segment.is_index and not isinstance(container, dict):
        raise MalformedPathError(
            f"Key segment {segment.value!r} of {path} addresses a "
            f"{type(container).__name__}, not a dict"
        )


def _slot_empty(container: Union[list, dict], segment: PathSegment) -> bool:
    if segment.is_index:
        return segment.value >= len(container) or container[segment.value] is None
    return container.get(segment.value) is None


def _assign(container: Union[list, dict], segment: PathSegment, value: Any) -> None:
    if segment.is_index:
        # Pad with placeholders so the index exists
        while len(container) <= segment.value:
            container.append(None)
    container[segment.value] = value


def set_nested_value(target: Union[list, dict], path: PathLike, value: Any) -> None:
    """Set a leaf in ``target``, creating missing containers along the way.

    Each missing intermediate container is a list when the following
    segment is an index and a dict otherwise. Paths may arrive in any
    order across branches.

    Args:
        target: Root container to write into.
        path: FieldPath or rendered path string.
        value: Value to store at the leaf.

    Raises:
        MalformedPathError: If the path is empty or conflicts with the
            containers already present in ``target``.
    """
    path = _as_path(path)
    segments = path.segments
    current = target

    for segment, next_segment in zip(segments, segments[1:]):
        _check_container(current, segment, path)
        if _slot_empty(current, segment):
            _assign(current, segment, _empty_container(next_segment))
        current = current[segment.value]

    last = segments[-1]
    _check_container(current, last, path)
    _assign(current, last, value)


def get_nested_value(tree: ContentNode, path: PathLike) -> Any:
    """Read the value at ``path``.

    Raises:
        MalformedPathError: If the path is empty.
        KeyError: If the path does not exist in ``tree``.
    """
    path = _as_path(path)
    current = tree
    for segment in path.segments:
        try:
            _check_container(current, segment, path)
            current = current[segment.value]
        except (MalformedPathError, IndexError, KeyError):
            raise KeyError(str(path)) from None
    return current
