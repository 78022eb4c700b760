"""Access multiple configuration trees as a single tree."""

import logging
from collections.abc import Callable
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from .base import ConfigTree
from .cache import LRUCache
from .exceptions import UnsupportedOperationError
from .merger import TreeMerger
from .merger import strip_deleted
from .models import BRANCH_PREFIXES
from .models import MergeMode
from .models import MountedSource
from .models import TreeSlice
from .paths import normalize_path
from .paths import relative_segments
from .resolver import get_branch
from .sources import DirTree
from .sources import FileTree
from .sources import VarTree
from .validation import validate_tree

logger = logging.getLogger(__name__)

MountSpec = MountedSource | tuple | list | None
TreesFunc = Callable[[str], Iterable[MountSpec]]


class MultiTree(ConfigTree):
    """Composes several mounted configuration trees into one.

    Each mount takes the branch at its mount path from its source. For every
    request the contributing branches are merged left to right with
    TreeMerger, the merge mode of each step being the one declared on the
    earlier mount of the pair. The composed tree is validated against the
    last contributing mount's schema (or this tree's own schema) and cached,
    keyed by the mounts and their modification times.

    Mounts are either added statically (add_file(), add_var(), ...) or
    produced per request by ``trees_func``, which receives the wanted path
    and returns mount specs ``(mount_path, source[, merge_mode[, schema]])``;
    None entries are ignored.

    The composed view is read-only: set(), unset() and save() must target
    an individual source.

    Args:
        trees: Initial static mounts
        trees_func: Per-request mount resolver (takes precedence over trees)
        merger: Merger to use (default: one preserving ``*`` prefixes)
        cache_size: Number of composed trees kept
        branch_prefixes: Candidate prefixes used to descend to a mount path
        **kwargs: See ConfigTree

    Example:
        ```python
        conf = MultiTree()
        conf.add_file("/etc/myapp.yaml")
        conf.add_file(Path.home() / ".myapp.yaml")
        conf.get("/foo/bar")
        ```
    """

    def __init__(
        self,
        trees: Iterable[MountSpec] | None = None,
        trees_func: TreesFunc | None = None,
        merger: TreeMerger | None = None,
        cache_size: int = 10,
        branch_prefixes: Iterable[str] = BRANCH_PREFIXES,
        **kwargs: Any,
    ):
        if trees_func is not None and not callable(trees_func):
            raise TypeError("trees_func must be callable")
        kwargs.setdefault("name", "multi")
        super().__init__(**kwargs)
        self.trees: list[MountedSource] = [MountedSource.from_spec(spec) for spec in trees or () if spec is not None]
        self.trees_func = trees_func
        self.merger = merger or TreeMerger(preserve_keep_prefix=True)
        self.branch_prefixes = tuple(branch_prefixes)
        self._merge_cache = LRUCache(cache_size)

    # ===== Mounting =====

    def add_tree(
        self,
        source: ConfigTree,
        mount_path: str = "/",
        merge_mode: MergeMode | str | None = None,
        schema: dict[str, Any] | None = None,
    ) -> ConfigTree:
        """Mount a configuration tree.

        Args:
            source: Tree to mount
            mount_path: Branch of the source to use
            merge_mode: Mode for merging this mount with the next one
            schema: Schema for the composed tree when this mount is last

        Returns:
            The mounted source
        """
        self.trees.append(MountedSource(normalize_path("/", mount_path), source, MergeMode.coerce(merge_mode), schema))
        return source

    def add_file(self, path: str | Path, **kwargs: Any) -> FileTree:
        """Mount a YAML file at ``/``. Options are passed to FileTree."""
        return self.add_tree(FileTree(path, **kwargs))

    def add_dir(self, path: str | Path, **kwargs: Any) -> DirTree:
        """Mount a config directory at ``/``. Options are passed to DirTree."""
        return self.add_tree(DirTree(path, **kwargs))

    def add_var(self, tree: dict[str, Any], **kwargs: Any) -> VarTree:
        """Mount an in-memory mapping at ``/``. Options are passed to VarTree."""
        return self.add_tree(VarTree(tree, **kwargs))

    def clear_cache(self) -> None:
        """Drop all cached composed trees."""
        self._merge_cache.clear()

    # ===== Composition =====

    def mounts_for(self, path: str) -> list[MountedSource]:
        """Mounts contributing to a request for ``path``."""
        if self.trees_func is not None:
            return [MountedSource.from_spec(spec) for spec in self.trees_func(path) if spec is not None]
        return list(self.trees)

    def get_tree_for(self, wanted_path: str) -> TreeSlice:
        """Compose the mounted trees for ``wanted_path``.

        Returns:
            TreeSlice rooted at ``/``; the tree is None when no mount
            contributes, the mtime is the newest contributing mtime

        Raises:
            MergeConflictError: If two contributing trees cannot be merged
            ConfigValidationError: If the result is invalid and policy is DIE
        """
        contributions: list[tuple[MountedSource, Any, float]] = []
        for mount in self.mounts_for(wanted_path):
            mount_path = normalize_path("/", mount.mount_path)
            tree_path, tree, mtime = mount.source.get_tree_for(mount_path)
            if tree is not None and tree_path != mount_path:
                tree = get_branch(tree, "/".join(relative_segments(tree_path, mount_path)), self.branch_prefixes)
            if tree is None:
                continue
            contributions.append((mount, tree, mtime))

        if not contributions:
            return TreeSlice("/", None, 0)

        # Sources are held by the key so their identity cannot be reused.
        cache_key = tuple(
            (mount.mount_path, mount.source, mount.merge_mode, mtime) for mount, _tree, mtime in contributions
        )
        mtime = max(mtime for _mount, _tree, mtime in contributions)
        if cache_key in self._merge_cache:
            logger.debug(f"Composed tree cache hit for {wanted_path}")
            return TreeSlice("/", self._merge_cache.get(cache_key), mtime)

        tree = strip_deleted(contributions[0][1])
        for (previous, _tree, _mtime), (mount, right, _rmtime) in zip(contributions, contributions[1:]):
            logger.debug(f"Merging {mount.source.name} into composed tree ({previous.merge_mode.value})")
            tree = self.merger.merge(tree, right, previous.merge_mode)

        schema = contributions[-1][0].schema or self.schema
        validate_tree(tree, schema, self.when_invalid, describe=self._describe(), validator=self.validator)

        self._merge_cache.put(cache_key, tree)
        return TreeSlice("/", tree, mtime)

    # ===== Unsupported Mutation =====

    def set(self, path: str, value: Any) -> Any:
        raise UnsupportedOperationError("set() is not allowed on a composed tree, use set() on an individual tree")

    def unset(self, path: str) -> Any:
        raise UnsupportedOperationError("unset() is not allowed on a composed tree, use unset() on an individual tree")

    def save(self) -> None:
        raise UnsupportedOperationError("save() is not allowed on a composed tree, use save() on an individual tree")
