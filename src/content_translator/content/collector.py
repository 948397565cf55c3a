"""Collect translatable text leaves from a content tree."""

from typing import Optional

from .models import ContentNode, FieldPath, TextField

SCALAR_TYPES = (int, float, bool, type(None))


def collect_text_fields(
    node: ContentNode,
    skip_fields: frozenset = frozenset(),
    prefix: Optional[FieldPath] = None
) -> list[TextField]:
    """Flatten a content tree into its translatable string leaves.

    Traversal is depth-first in insertion order, so the same tree always
    yields the same list. Map entries whose key is in ``skip_fields`` are
    not descended into at all.

    Args:
        node: Root of the (sub)tree to walk.
        skip_fields: Key names whose values are never translated.
        prefix: Path of ``node`` within the full tree.

    Returns:
        List of TextField objects, one per translatable string leaf.

    Raises:
        TypeError: If the tree contains a value or map key that is not
            JSON-like.
    """
    fields: list[TextField] = []
    _collect(node, skip_fields, prefix or FieldPath(), fields)
    return fields


def _collect(
    node: ContentNode,
    skip_fields: frozenset,
    path: FieldPath,
    fields: list[TextField]
) -> None:
    if isinstance(node, str):
        if path.key is not None and path.key in skip_fields:
            return
        fields.append(TextField(path=path, value=node))
    elif isinstance(node, list):
        for index, item in enumerate(node):
            _collect(item, skip_fields, path.index(index), fields)
    elif isinstance(node, dict):
        for key, value in node.items():
            if not isinstance(key, str):
                raise TypeError(
                    f"Unsupported key at {str(path) or '<root>'}: "
                    f"{key!r} ({type(key).__name__})"
                )
            if key in skip_fields:
                continue
            _collect(value, skip_fields, path.child(key), fields)
    elif not isinstance(node, SCALAR_TYPES):
        raise TypeError(
            f"Unsupported content value at {str(path) or '<root>'}: "
            f"{type(node).__name__}"
        )
