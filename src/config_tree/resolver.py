"""Resolution of logical keys to stored (possibly prefixed) keys."""

from collections.abc import Sequence
from typing import Any

from .models import BRANCH_PREFIXES
from .models import GET_PREFIXES
from .paths import split_path

# Returned when a segment cannot be resolved; distinct from a stored None.
ABSENT = object()


def is_index(segment: str) -> bool:
    """Whether a path segment is a non-negative integer literal."""
    return segment.isascii() and segment.isdigit()


def resolve_key(container: Any, segment: str, prefixes: Sequence[str] = GET_PREFIXES) -> tuple[Any, Any]:
    """Find the stored key and value a logical path segment refers to.

    Mappings are probed with each candidate prefix in order, the first
    stored key present wins. Sequences accept an in-range integer segment.

    Args:
        container: Mapping or sequence to look in
        segment: Logical (unprefixed) key
        prefixes: Ordered candidate prefixes for mapping keys

    Returns:
        ``(stored_key, value)``, or ``(None, ABSENT)`` when nothing matches
    """
    if isinstance(container, dict):
        for prefix in prefixes:
            key = f"{prefix}{segment}"
            if key in container:
                return key, container[key]
    elif isinstance(container, list) and is_index(segment):
        index = int(segment)
        if index < len(container):
            return segment, container[index]
    return None, ABSENT


def resolve_branch(container: Any, segment: str, prefixes: Sequence[str] = GET_PREFIXES) -> Any:
    """Value a logical segment refers to inside ``container``, or ABSENT."""
    return resolve_key(container, segment, prefixes)[1]


def get_branch(tree: Any, path: str, prefixes: Sequence[str] = BRANCH_PREFIXES) -> Any:
    """Descend from ``tree`` along a relative path.

    Used to locate a mount path inside a coarser tree returned by a source.

    Returns:
        The branch, or None when any segment cannot be resolved
    """
    for segment in split_path(path):
        tree = resolve_branch(tree, segment, prefixes)
        if tree is ABSENT:
            return None
    return tree
