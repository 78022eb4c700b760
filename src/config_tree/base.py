"""Base class for configuration trees."""

import logging
import re
from collections.abc import Sequence
from typing import Any

from .exceptions import InvalidPathError
from .exceptions import ReadOnlyError
from .exceptions import StackUnderflowError
from .exceptions import TreeBugError
from .exceptions import UnsupportedOperationError
from .models import GET_PREFIXES
from .models import InvalidPolicy
from .models import MergeDirective
from .models import TreeSlice
from .models import split_key
from .paths import is_ancestor
from .paths import normalize_path
from .paths import relative_segments
from .paths import split_path
from .resolver import ABSENT
from .resolver import is_index
from .resolver import resolve_key
from .validation import SchemaValidator
from .validation import validate_tree

logger = logging.getLogger(__name__)

PathPattern = str | re.Pattern | None


class ConfigTree:
    """A configuration tree addressed with filesystem-like paths.

    Keeps a current position (``cwd``) so relative paths, ``cd``, ``pushd``
    and ``popd`` work as in a shell. Subclasses provide the data by
    implementing ``_get_tree()`` (whole tree at once) or by overriding
    ``get_tree_for()`` (partial trees).

    Args:
        name: Human-readable name used in messages
        read_only: Disallow set(), unset() and save()
        schema: JSON Schema the loaded tree is validated against
        when_invalid: Validation failure policy (die, warn or quiet)
        include_path_re: Only paths matching this pattern are visible
        exclude_path_re: Paths matching this pattern are hidden
        prefixes: Candidate key prefixes tried, in order, by get()
    """

    default_read_only = True

    def __init__(
        self,
        name: str | None = None,
        read_only: bool | None = None,
        schema: dict[str, Any] | None = None,
        when_invalid: InvalidPolicy | str = InvalidPolicy.DIE,
        include_path_re: PathPattern = None,
        exclude_path_re: PathPattern = None,
        prefixes: Sequence[str] = GET_PREFIXES,
        validator: SchemaValidator | None = None,
    ):
        self.name = name or type(self).__name__
        self.read_only = self.default_read_only if read_only is None else read_only
        self.schema = schema
        self.when_invalid = InvalidPolicy.coerce(when_invalid)
        self.include_path_re = re.compile(include_path_re) if isinstance(include_path_re, str) else include_path_re
        self.exclude_path_re = re.compile(exclude_path_re) if isinstance(exclude_path_re, str) else exclude_path_re
        self.prefixes = tuple(prefixes)
        self.validator = validator or SchemaValidator()
        self.modified = False
        self.cwd = "/"
        self.dirstack: list[str] = []

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"

    # ===== Tree Retrieval =====

    def get_tree_for(self, wanted_path: str) -> TreeSlice:
        """Return a tree rooted at ``wanted_path`` or one of its ancestors.

        The default implementation loads the whole tree via ``_get_tree()``,
        validates it and returns it rooted at ``/``.

        Args:
            wanted_path: Normalized absolute path the caller is interested in

        Returns:
            TreeSlice of (tree_path, tree, mtime)
        """
        tree, mtime = self._get_tree()
        self._validate_tree(tree, "/")
        return TreeSlice("/", tree, mtime)

    def _get_tree(self) -> tuple[Any, float]:
        """Return the whole tree and its modification time."""
        raise NotImplementedError

    def _validate_tree(self, tree: Any, path: str) -> bool:
        return validate_tree(
            tree,
            self.schema,
            self.when_invalid,
            describe=self._describe(),
            path=path,
            validator=self.validator,
        )

    def _describe(self) -> str:
        return f"{'modified ' if self.modified else ''}config {self.name}"

    # ===== Navigation =====

    def normalize_path(self, path: str) -> str:
        """Resolve ``path`` (absolute or relative to cwd) to canonical form."""
        if not isinstance(path, str):
            raise InvalidPathError(f"Path must be a string, got {type(path).__name__}")
        return normalize_path(self.cwd, path)

    def getcwd(self) -> str:
        """Current absolute position."""
        return self.cwd

    def cd(self, path: str) -> None:
        """Change position to ``path`` (absolute or relative).

        Raises:
            InvalidPathError: If path is empty
        """
        if not path:
            raise InvalidPathError("cd: path must be specified")
        self.cwd = self.normalize_path(path)

    def pushd(self, path: str | None = None) -> None:
        """Save the current position on the stack, optionally cd to ``path``."""
        self.dirstack.append(self.cwd)
        if path is not None:
            self.cd(path)

    def popd(self) -> None:
        """Return to the last position saved by pushd().

        Raises:
            StackUnderflowError: If the stack is empty
        """
        if not self.dirstack:
            raise StackUnderflowError("popd: directory stack empty")
        self.cwd = self.dirstack.pop()

    def path_is_excluded(self, path: str) -> bool:
        """Whether a normalized path is hidden by the include/exclude patterns."""
        if self.include_path_re is not None and not self.include_path_re.search(path):
            return True
        if self.exclude_path_re is not None and self.exclude_path_re.search(path):
            return True
        return False

    # ===== Reading =====

    def get(self, path: str, default: Any = None) -> Any:
        """Get the config value at ``path``.

        Missing and excluded paths are not errors.

        Args:
            path: Absolute or relative path
            default: Returned when nothing is found at ``path``

        Returns:
            The value (the stored tree itself, not a copy), or ``default``
        """
        found = self._resolve(path)
        return default if found is None else found[1]

    def exists(self, path: str) -> bool:
        """Whether a value (even None) is found at ``path``."""
        return self._resolve(path) is not None

    def stored_path(self, path: str) -> str | None:
        """Path of the stored keys ``path`` resolves to, prefixes included.

        ``/limits/quota`` resolves to ``/limits/+quota`` when the tree only
        holds the prefixed key, which is the path to pass to unset().

        Returns:
            Absolute path of stored keys, or None if nothing is found
        """
        found = self._resolve(path)
        return None if found is None else found[0]

    def _resolve(self, path: str) -> tuple[str, Any] | None:
        """Resolve ``path`` to ``(stored_path, value)``."""
        path = self.normalize_path(path)
        if self.path_is_excluded(path):
            return None

        tree_path, tree, _mtime = self.get_tree_for(path)
        if tree is None:
            return None
        if not is_ancestor(tree_path, path):
            raise TreeBugError(f"get: cannot get config tree for `{path}`, got `{tree_path}`")

        current = "" if tree_path == "/" else tree_path
        stored = current
        for segment in relative_segments(tree_path, path):
            current = f"{current}/{segment}"
            if self.path_is_excluded(current):
                return None
            key, tree = resolve_key(tree, segment, self.prefixes)
            if tree is ABSENT or split_key(key)[0] is MergeDirective.DELETE:
                return None
            stored = f"{stored}/{key}"
        return stored or "/", tree

    # ===== Writing =====

    def set(self, path: str, value: Any) -> Any:
        """Set the config value at ``path``, creating intermediate mappings.

        Returns:
            The previous value, or None

        Raises:
            ReadOnlyError: If the tree is read-only
        """
        return self._set_or_unset(path, True, value)

    def unset(self, path: str) -> Any:
        """Remove the config value at ``path``.

        Returns:
            The removed value, or None

        Raises:
            ReadOnlyError: If the tree is read-only
        """
        return self._set_or_unset(path, False)

    def save(self) -> None:
        """Persist changes made by set()/unset().

        Does nothing if the tree was not modified.

        Raises:
            ReadOnlyError: If the tree is read-only
        """
        if self.read_only:
            raise ReadOnlyError(f"save: config {self.name} is read-only")
        if not self.modified:
            return
        self._save()
        self.modified = False

    def _save(self) -> None:
        pass

    def _set_or_unset(self, path: str, is_set: bool, value: Any = None) -> Any:
        if self.read_only:
            raise ReadOnlyError(f"config {self.name} is read-only")

        tree, _mtime = self._get_tree()
        if tree is None:
            tree = self._new_tree()
        old_value = self._set_or_unset_in_tree(tree, path, is_set, value)
        self.modified = True
        logger.debug(f"{'Set' if is_set else 'Unset'} {self.normalize_path(path)} in {self.name}")
        return old_value

    def _new_tree(self) -> dict[str, Any]:
        """Create an empty root for a source that has no tree yet."""
        raise UnsupportedOperationError(f"config {self.name} has no tree to modify")

    def _set_or_unset_in_tree(self, tree: Any, path: str, is_set: bool, value: Any = None) -> Any:
        """Set or delete the leaf at ``path`` inside ``tree``.

        Intermediate nodes that are missing or of the wrong kind are replaced
        by fresh empty mappings, discarding what was there.
        """
        segments = split_path(self.normalize_path(path))
        if not segments:
            raise InvalidPathError("cannot set value for /")

        parent: Any = None
        parent_segment = ""
        for i, segment in enumerate(segments):
            if not _can_hold(tree, segment):
                if parent is None:
                    raise InvalidPathError(f"cannot set `{segment}` inside a sequence root")
                tree = {}
                _assign(parent, parent_segment, tree)
            if i == len(segments) - 1:
                break
            child = _child(tree, segment)
            if not isinstance(child, (dict, list)):
                child = {}
                _assign(tree, segment, child)
            parent, parent_segment, tree = tree, segment, child

        leaf = segments[-1]
        old_value = _child(tree, leaf)
        if is_set:
            _assign(tree, leaf, value)
        elif isinstance(tree, dict):
            tree.pop(leaf, None)
        elif int(leaf) < len(tree):
            del tree[int(leaf)]
        return old_value


def _can_hold(container: Any, segment: str) -> bool:
    return isinstance(container, dict) or (isinstance(container, list) and is_index(segment))


def _child(container: Any, segment: str) -> Any:
    if isinstance(container, dict):
        return container.get(segment)
    if isinstance(container, list) and is_index(segment) and int(segment) < len(container):
        return container[int(segment)]
    return None


def _assign(container: Any, segment: str, value: Any) -> None:
    if isinstance(container, list) and is_index(segment):
        index = int(segment)
        if index < len(container):
            container[index] = value
        else:
            container.extend([None] * (index - len(container)) + [value])
    else:
        container[segment] = value
