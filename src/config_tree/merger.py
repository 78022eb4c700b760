"""Recursive merging of configuration trees under merge modes and key prefixes."""

import copy
from numbers import Number
from typing import Any

from .exceptions import MergeConflictError
from .models import MergeDirective
from .models import MergeMode
from .models import split_key

# Internal marker for "this key is removed from the result".
_DELETED = object()


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def _child_path(path: str, key: Any) -> str:
    return f"{path.rstrip('/')}/{key}"


def strip_deleted(tree: Any) -> Any:
    """Deep copy of ``tree`` without ``!``-prefixed keys, at any depth."""
    if isinstance(tree, dict):
        return {
            key: strip_deleted(value)
            for key, value in tree.items()
            if split_key(key)[0] is not MergeDirective.DELETE
        }
    if isinstance(tree, list):
        return [strip_deleted(item) for item in tree]
    return copy.deepcopy(tree)


def index_keys(mapping: dict[Any, Any]) -> dict[Any, tuple[MergeDirective, Any]]:
    """Map each logical key of ``mapping`` to its directive and stored key.

    Each stored key is parsed once. When a mapping (against the loader's
    contract) holds several variants of one logical key, the first wins.
    """
    index: dict[Any, tuple[MergeDirective, Any]] = {}
    for stored_key in mapping:
        directive, logical = split_key(stored_key)
        index.setdefault(logical, (directive, stored_key))
    return index


class TreeMerger:
    """Merges two configuration trees.

    Merging is right-biased: under NORMAL mode mappings are merged key by key,
    sequences position by position, and any other pair is won by the right
    side. A prefix on a right-side key (``*``, ``+``, ``-``, ``.``, ``^``,
    ``!``) overrides the mode for that key only. A ``*`` prefix on a left-side
    key protects it from being overridden.

    Inputs are never modified; the result is a fresh tree. Keys prefixed
    with ``!`` never appear in it, however deep they are nested.

    Args:
        preserve_keep_prefix: Keep the ``*`` prefix on protected keys in the
            result, so they stay protected when the result is merged again

    Example:
        ```python
        merger = TreeMerger()
        merger.merge({"quota": 2000}, {"+quota": 500})  # {"quota": 2500}
        merger.merge({"a": 1}, {"a": 2}, MergeMode.KEEP)  # {"a": 1}
        ```
    """

    def __init__(self, preserve_keep_prefix: bool = False):
        self.preserve_keep_prefix = preserve_keep_prefix

    def merge(self, left: Any, right: Any, mode: MergeMode | str | None = MergeMode.NORMAL) -> Any:
        """Merge ``right`` into ``left``.

        Args:
            left: Earlier tree
            right: Later tree
            mode: Ambient merge mode (default: NORMAL)

        Returns:
            Merged tree, or None when the merge deletes everything

        Raises:
            MergeConflictError: If ADD/SUBTRACT meets operands it cannot combine
        """
        result = self._merge(left, right, MergeMode.coerce(mode), "/")
        return None if result is _DELETED else result

    # ===== Private Helpers =====

    def _merge(self, left: Any, right: Any, mode: MergeMode, path: str) -> Any:
        if mode is MergeMode.KEEP:
            return strip_deleted(left)

        if mode is MergeMode.DELETE:
            if isinstance(left, dict) and isinstance(right, dict):
                return self._without_keys(left, right)
            return _DELETED

        if mode in (MergeMode.ADD, MergeMode.SUBTRACT):
            return self._combine(left, right, mode, path)

        # NORMAL
        if isinstance(left, dict) and isinstance(right, dict):
            return self._merge_mappings(left, right, mode, path)
        if isinstance(left, list) and isinstance(right, list):
            return self._merge_sequences(left, right, path)
        return strip_deleted(right)

    def _merge_mappings(self, left: dict, right: dict, mode: MergeMode, path: str) -> dict:
        left_index = index_keys(left)
        right_index = index_keys(right)
        result: dict[Any, Any] = {}

        for logical, (left_directive, left_key) in left_index.items():
            if logical not in right_index:
                if left_directive is not MergeDirective.DELETE:
                    result[left_key] = strip_deleted(left[left_key])
                continue

            right_directive, right_key = right_index[logical]
            left_value = left[left_key]

            if left_directive is MergeDirective.KEEP or right_directive is MergeDirective.KEEP:
                result[self._kept_key(logical)] = strip_deleted(left_value)
                continue
            if right_directive is MergeDirective.DELETE:
                continue

            key_mode = right_directive.mode or mode
            merged = self._merge(left_value, right[right_key], key_mode, _child_path(path, logical))
            if merged is not _DELETED:
                result[logical] = merged

        for logical, (right_directive, right_key) in right_index.items():
            if logical in left_index or right_directive is MergeDirective.DELETE:
                continue
            result[right_key] = strip_deleted(right[right_key])

        return result

    def _merge_sequences(self, left: list, right: list, path: str) -> list:
        common = min(len(left), len(right))
        result = [self._merge(left[i], right[i], MergeMode.NORMAL, _child_path(path, i)) for i in range(common)]
        longer = left if len(left) > len(right) else right
        result.extend(strip_deleted(longer[common:]))
        return result

    def _combine(self, left: Any, right: Any, mode: MergeMode, path: str) -> Any:
        adding = mode is MergeMode.ADD

        if _is_number(left) and _is_number(right):
            return left + right if adding else left - right
        if isinstance(left, list) and isinstance(right, list):
            if adding:
                return strip_deleted(left) + strip_deleted(right)
            return [strip_deleted(item) for item in left if item not in right]
        if isinstance(left, dict) and isinstance(right, dict):
            if adding:
                return self._merge_mappings(left, right, mode, path)
            return self._without_keys(left, right)

        verb = "add" if adding else "subtract"
        raise MergeConflictError(
            f"Cannot {verb} {type(right).__name__} and {type(left).__name__}",
            path=path,
        )

    def _without_keys(self, left: dict, right: dict) -> dict:
        """Copy of ``left`` minus every logical key present in ``right``."""
        removed = set(index_keys(right))
        return {key: value for key, value in strip_deleted(left).items() if split_key(key)[1] not in removed}

    def _kept_key(self, logical: Any) -> Any:
        if self.preserve_keep_prefix and isinstance(logical, str):
            return f"{MergeDirective.KEEP.value}{logical}"
        return logical
