"""Configuration tree backed by an in-memory data structure."""

import time
from typing import Any

from ..base import ConfigTree


class VarTree(ConfigTree):
    """Configuration tree read from (and written to) a Python mapping.

    set() and unset() modify the mapping in place; save() has nothing to
    persist.

    Args:
        tree: Root mapping
        **kwargs: See ConfigTree
    """

    default_read_only = False

    def __init__(self, tree: dict[str, Any], **kwargs: Any):
        if not isinstance(tree, dict):
            raise TypeError(f"tree must be a mapping, got {type(tree).__name__}")
        kwargs.setdefault("name", "var")
        super().__init__(**kwargs)
        self.tree = tree
        self._mtime = time.time()

    def _get_tree(self) -> tuple[Any, float]:
        return self.tree, self._mtime

    def _set_or_unset(self, path: str, is_set: bool, value: Any = None) -> Any:
        old_value = super()._set_or_unset(path, is_set, value)
        self._mtime = max(time.time(), self._mtime + 1e-6)
        return old_value
