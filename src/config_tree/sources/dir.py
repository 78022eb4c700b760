"""Configuration tree backed by a directory of files."""

import logging
import re
import time
from pathlib import Path
from typing import Any

import yaml

from ..base import ConfigTree
from ..exceptions import ConfigFileError
from ..exceptions import UnsupportedOperationError
from ..models import TreeSlice
from ..paths import split_path

logger = logging.getLogger(__name__)

# Backup and editor files.
DEFAULT_EXCLUDE_FILE_RE = re.compile(r"\A#|~\Z")

_BINARY_RE = re.compile(rb"[^\x09\x0a\x0d\x20-\x7f]")


class DirTree(ConfigTree):
    """Configuration tree read from a directory.

    Subdirectories become mappings and files become values. Unless
    ``content_as_yaml`` is set, file contents are taken as text with
    trailing newlines stripped (binary files are returned as bytes) and an
    empty file reads as 1, so flag files work as booleans.

    Only the part of the directory needed for a wanted path is read: for
    ``/a/b/c`` the deepest existing directory among ``a``, ``a/b`` and
    ``a/b/c`` is loaded and returned rooted at its own path.

    Args:
        path: Config directory
        content_as_yaml: Parse every file as a YAML document
        include_file_re: Only file names matching this pattern are read
        exclude_file_re: File names matching this pattern are skipped
        must_exist: Raise ConfigFileError when the directory is missing
        **kwargs: See ConfigTree
    """

    def __init__(
        self,
        path: str | Path,
        content_as_yaml: bool = False,
        include_file_re: str | re.Pattern | None = None,
        exclude_file_re: str | re.Pattern | None = DEFAULT_EXCLUDE_FILE_RE,
        must_exist: bool = False,
        **kwargs: Any,
    ):
        self.path = Path(path)
        kwargs.setdefault("name", f"dir {self.path}")
        super().__init__(**kwargs)
        self.content_as_yaml = content_as_yaml
        self.include_file_re = re.compile(include_file_re) if isinstance(include_file_re, str) else include_file_re
        self.exclude_file_re = re.compile(exclude_file_re) if isinstance(exclude_file_re, str) else exclude_file_re
        self.must_exist = must_exist
        self._cache_dir: Path | None = None
        self._cache_tree: dict[str, Any] | None = None
        self._mtime: float = -1

    def file_is_excluded(self, filename: str) -> bool:
        """Whether a file name is filtered out by the include/exclude patterns."""
        if self.include_file_re is not None and not self.include_file_re.search(filename):
            return True
        if self.exclude_file_re is not None and self.exclude_file_re.search(filename):
            return True
        return False

    def reload(self) -> None:
        """Forget the cached directory contents."""
        self._cache_dir = None
        self._cache_tree = None

    def get_tree_for(self, wanted_path: str) -> TreeSlice:
        if not self.path.is_dir():
            if self.must_exist:
                raise ConfigFileError(f"Configuration directory {self.path} does not exist")
            return TreeSlice("/", None, -1)

        consumed: list[str] = []
        fspath = self.path
        for segment in split_path(self.normalize_path(wanted_path)):
            if self.file_is_excluded(segment):
                break
            candidate = fspath / segment
            if candidate.is_dir():
                consumed.append(segment)
                fspath = candidate
                continue
            if self.content_as_yaml and candidate.is_file():
                content = self._read_file(candidate)
                if isinstance(content, dict):
                    tree_path = "/" + "/".join(consumed + [segment])
                    self._validate_tree(content, tree_path)
                    return TreeSlice(tree_path, content, candidate.stat().st_mtime)
            break

        tree_path = "/" + "/".join(consumed)
        tree = self._read_config(fspath)
        self._validate_tree(tree, tree_path)
        return TreeSlice(tree_path, tree, self._mtime)

    def _get_tree(self) -> tuple[Any, float]:
        return self.get_tree_for("/")[1:]

    def set(self, path: str, value: Any) -> Any:
        raise UnsupportedOperationError(f"set() is not supported for {type(self).__name__}")

    def unset(self, path: str) -> Any:
        raise UnsupportedOperationError(f"unset() is not supported for {type(self).__name__}")

    def _describe(self) -> str:
        return f"config dir {self.path}"

    # ===== Private Helpers =====

    def _read_config(self, fspath: Path) -> dict[str, Any]:
        if self._cache_dir == fspath and self._cache_tree is not None:
            return self._cache_tree
        tree = self._read_dir(fspath)
        self._cache_dir = fspath
        self._cache_tree = tree
        self._mtime = time.time()
        return tree

    def _read_dir(self, fspath: Path) -> dict[str, Any]:
        tree: dict[str, Any] = {}
        try:
            entries = sorted(fspath.iterdir())
        except OSError as e:
            logger.warning(f"Cannot read configuration directory {fspath}: {e}")
            return tree

        for entry in entries:
            if self.file_is_excluded(entry.name):
                continue
            try:
                if entry.is_dir():
                    tree[entry.name] = self._read_dir(entry)
                else:
                    tree[entry.name] = self._read_file(entry)
            except OSError as e:
                logger.warning(f"Cannot read {entry}, skipped: {e}")
        return tree

    def _read_file(self, fspath: Path) -> Any:
        content = fspath.read_bytes()
        if self.content_as_yaml:
            try:
                return yaml.safe_load(content)
            except yaml.YAMLError:
                logger.warning(f"File {fspath} is not a valid YAML document, assuming empty file")
                return None
        if not content:
            return 1
        if _BINARY_RE.search(content):
            return content
        return content.decode("ascii").rstrip("\r\n")
