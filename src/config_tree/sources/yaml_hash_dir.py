"""Directory of YAML files holding mappings derived from one another."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from ..merger import TreeMerger
from ..models import TreeSlice
from ..paths import normalize_path
from .dir import DirTree

logger = logging.getLogger(__name__)


class YAMLHashDir(DirTree):
    """Configuration tree from a directory of YAML mappings with inheritance.

    Every file is a YAML document. A mapping is used as is; a list is
    resolved by merging its items left to right, where an item is either an
    inline mapping or the config path of another file. Relative paths are
    taken from the referring file's directory, so ``templates/dns_server``
    can refer to its sibling as ``server``.

    Example:
        ```yaml
        # templates/server
        services: {http: No, dns_server: No, mysql: No}

        # templates/dns_server
        - server
        - services: {dns_server: Yes}

        # dns2
        - templates/dns_server
        - ip: 1.2.3.5
        ```

        ``get("/dns2/services/dns_server")`` is True.

    Args:
        path: Config directory
        merger: Merger used to resolve lists (default: a new TreeMerger)
        **kwargs: See DirTree (``content_as_yaml`` is always on)
    """

    def __init__(self, path: str | Path, merger: TreeMerger | None = None, **kwargs: Any):
        kwargs["content_as_yaml"] = True
        super().__init__(path, **kwargs)
        self.merger = merger or TreeMerger()
        self._files_cache: dict[str, dict[str, Any] | None] = {}
        self._resolving: set[str] = set()

    def reload(self) -> None:
        super().reload()
        self._files_cache = {}

    def get_tree_for(self, wanted_path: str) -> TreeSlice:
        # Files are resolved afresh for every request.
        self._files_cache = {}
        return super().get_tree_for(wanted_path)

    def _read_file(self, fspath: Path) -> Any:
        return self._read_hash("/" + fspath.relative_to(self.path).as_posix())

    def _read_hash(self, config_path: str) -> dict[str, Any] | None:
        """Load the file at ``config_path``, resolving a list document.

        Returns:
            The mapping, or None if the file is missing, invalid or not a
            mapping (a warning is logged)
        """
        if config_path in self._files_cache:
            return self._files_cache[config_path]

        fspath = self.path / config_path.lstrip("/")
        if not fspath.is_file():
            logger.warning(f"{config_path}: {fspath} does not exist or is not a file, ignoring")
            return None
        try:
            document = yaml.safe_load(fspath.read_bytes())
        except yaml.YAMLError:
            logger.warning(f"{config_path}: {fspath} is not a valid YAML document, ignoring")
            return None

        if isinstance(document, list):
            document = self._resolve_list(config_path, document)
        elif not isinstance(document, dict):
            logger.warning(f"{config_path}: {fspath} is not a YAML mapping, ignoring")
            return None

        self._files_cache[config_path] = document
        return document

    def _resolve_list(self, config_path: str, items: list[Any]) -> dict[str, Any] | None:
        self._resolving.add(config_path)
        try:
            to_merge = []
            for i, item in enumerate(items, start=1):
                if isinstance(item, dict):
                    to_merge.append(item)
                    continue
                if not isinstance(item, str):
                    logger.warning(f"{config_path}: item {i} is not a mapping or path, skipped")
                    continue

                ref = normalize_path(config_path, item if item.startswith("/") else f"../{item}")
                if ref in self._resolving:
                    logger.warning(f"{config_path}: item {i} is a recursive reference to {ref}, skipped")
                    continue
                parent = self._read_hash(ref)
                if parent is None:
                    logger.warning(f"{config_path}: item {i} refers to {ref}, which is not a mapping, skipped")
                    continue
                to_merge.append(parent)
        finally:
            self._resolving.discard(config_path)

        if not to_merge:
            return None
        merged = to_merge[0]
        for other in to_merge[1:]:
            merged = self.merger.merge(merged, other)
        return merged
