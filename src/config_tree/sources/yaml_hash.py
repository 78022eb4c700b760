"""YAML file of named mappings that can be based on one another."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from ..exceptions import UnsupportedOperationError
from ..merger import TreeMerger
from .file import FileTree

logger = logging.getLogger(__name__)


class YAMLHashFile(FileTree):
    """Configuration tree from a YAML file of mappings with inheritance.

    Each top-level value is either a mapping or a list whose items are
    names of other top-level entries or inline mappings. A list is resolved
    by merging its items left to right, so later items override earlier
    ones (key prefixes apply as in any merge).

    Example:
        ```yaml
        server: {services: {http: No, dns_server: No, mysql: No}}
        dns_server: [server, {services: {dns_server: Yes}}]
        powerdns_server: [dns_server, {services: {mysql: Yes}}]
        dns1: [powerdns_server, {ip: 1.2.3.4}]
        ```

        ``get("/dns1/services/mysql")`` is True.

    Args:
        path: Path to the YAML file
        merger: Merger used to resolve lists (default: a new TreeMerger)
        **kwargs: See FileTree
    """

    default_read_only = True

    def __init__(self, path: str | Path, merger: TreeMerger | None = None, **kwargs: Any):
        super().__init__(path, **kwargs)
        self.merger = merger or TreeMerger()

    def set(self, path: str, value: Any) -> Any:
        raise UnsupportedOperationError("set() is not supported for YAMLHashFile")

    def unset(self, path: str) -> Any:
        raise UnsupportedOperationError("unset() is not supported for YAMLHashFile")

    def save(self) -> None:
        raise UnsupportedOperationError("save() is not supported for YAMLHashFile")

    def _load_file(self) -> dict[str, Any]:
        hashes = super()._load_file()
        resolving: set[str] = set()
        for key in list(hashes):
            self._resolve_key(hashes, key, resolving)
        return hashes

    def _resolve_key(self, hashes: dict[str, Any], key: str, resolving: set[str]) -> None:
        """Replace the list at ``hashes[key]`` by the merge of its items."""
        if key not in hashes:
            logger.warning(f"{self.path}: unknown key `{key}`")
            return

        value = hashes[key]
        if value is None or isinstance(value, dict):
            return
        if not isinstance(value, list):
            logger.warning(f"{self.path}: `{key}` is not a mapping or list, ignoring")
            del hashes[key]
            return

        resolving.add(key)
        to_merge = []
        for i, item in enumerate(value, start=1):
            if isinstance(item, dict):
                to_merge.append(item)
            elif isinstance(item, str):
                if item in resolving:
                    logger.warning(f"{self.path}: `{key}` has recursive reference to `{item}`, skipped")
                    continue
                self._resolve_key(hashes, item, resolving)
                if hashes.get(item) is not None:
                    to_merge.append(hashes[item])
            else:
                logger.warning(f"{self.path}: `{key}` item {i} is not a mapping or name, skipped")

        merged = to_merge[0] if to_merge else None
        for other in to_merge[1:]:
            merged = self.merger.merge(merged, other)
        hashes[key] = merged
        resolving.discard(key)
