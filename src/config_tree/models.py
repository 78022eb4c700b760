"""Data models for config-tree."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING
from typing import Any
from typing import NamedTuple

if TYPE_CHECKING:
    from .base import ConfigTree

# Candidate prefixes tried, in order, when resolving a logical key in get().
GET_PREFIXES: tuple[str, ...] = ("", "*", "-", "+", ".", "^", "!")

# Candidate prefixes tried when descending to a mount path inside a coarser tree.
BRANCH_PREFIXES: tuple[str, ...] = ("", "*", "-", "+", ".", "!")


class MergeMode(Enum):
    """Default disposition applied when two trees are merged."""

    NORMAL = "NORMAL"
    KEEP = "KEEP"
    ADD = "ADD"
    SUBTRACT = "SUBTRACT"
    DELETE = "DELETE"

    @classmethod
    def coerce(cls, value: MergeMode | str | None) -> MergeMode:
        """Accept a member, a case-insensitive name, or None (NORMAL)."""
        if value is None:
            return cls.NORMAL
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError as e:
            raise ValueError(f"Unknown merge mode: {value!r}") from e


class MergeDirective(Enum):
    """Merge-control prefix a stored mapping key may carry.

    The directive overrides the ambient merge mode for that one key.
    """

    NONE = ""
    KEEP = "*"
    SUBTRACT = "-"
    ADD = "+"
    REPLACE = "."
    ALT_REPLACE = "^"
    DELETE = "!"

    @property
    def mode(self) -> MergeMode | None:
        """Merge mode imposed by this directive, None for an unprefixed key."""
        return _DIRECTIVE_MODES[self]


_DIRECTIVE_MODES = {
    MergeDirective.NONE: None,
    MergeDirective.KEEP: MergeMode.KEEP,
    MergeDirective.SUBTRACT: MergeMode.SUBTRACT,
    MergeDirective.ADD: MergeMode.ADD,
    MergeDirective.REPLACE: MergeMode.NORMAL,
    MergeDirective.ALT_REPLACE: MergeMode.NORMAL,
    MergeDirective.DELETE: MergeMode.DELETE,
}

_PREFIX_CHARS = frozenset(d.value for d in MergeDirective if d.value)


def split_key(stored_key: Any) -> tuple[MergeDirective, Any]:
    """Split a stored mapping key into its directive and logical key.

    Non-string keys and keys consisting of a lone prefix character are
    treated as unprefixed.

    Examples:
        >>> split_key("+quota")
        (<MergeDirective.ADD: '+'>, 'quota')
        >>> split_key("quota")
        (<MergeDirective.NONE: ''>, 'quota')
    """
    if isinstance(stored_key, str) and len(stored_key) > 1 and stored_key[0] in _PREFIX_CHARS:
        return MergeDirective(stored_key[0]), stored_key[1:]
    return MergeDirective.NONE, stored_key


class InvalidPolicy(Enum):
    """What to do when a tree fails schema validation."""

    DIE = "die"
    WARN = "warn"
    QUIET = "quiet"

    @classmethod
    def coerce(cls, value: InvalidPolicy | str) -> InvalidPolicy:
        if isinstance(value, cls):
            return value
        return cls(str(value).lower())


class TreeSlice(NamedTuple):
    """A tree as returned by get_tree_for().

    Attributes:
        tree_path: Absolute path the tree is rooted at (the wanted path or an ancestor)
        tree: The configuration value, or None when absent
        mtime: Modification time of the data the tree came from
    """

    tree_path: str
    tree: Any
    mtime: float


@dataclass(frozen=True)
class MountedSource:
    """A source mounted into a composition.

    Attributes:
        mount_path: Path of the branch taken from the source
        source: The tree providing the data
        merge_mode: Mode used when merging this mount's result with the next one
        schema: Optional schema the composed tree is validated against when
            this mount is the last contributing one
    """

    mount_path: str
    source: ConfigTree
    merge_mode: MergeMode = MergeMode.NORMAL
    schema: dict[str, Any] | None = None

    def __post_init__(self):
        object.__setattr__(self, "merge_mode", MergeMode.coerce(self.merge_mode))

    @classmethod
    def from_spec(cls, spec: MountedSource | tuple | list) -> MountedSource:
        """Build a mount from ``(path, source[, mode[, schema]])``."""
        if isinstance(spec, cls):
            return spec
        if not 2 <= len(spec) <= 4:
            raise ValueError(f"Mount spec must have 2 to 4 elements, got {len(spec)}")
        mount_path, source, *rest = spec
        merge_mode = rest[0] if len(rest) > 0 else None
        schema = rest[1] if len(rest) > 1 else None
        return cls(mount_path, source, MergeMode.coerce(merge_mode), schema)


class Scope(Enum):
    """Configuration scope enumeration.

    Determines which settings file to target for write operations.
    """

    USER = "user"
    PROJECT = "project"
    LOCAL = "local"


@dataclass(frozen=True)
class ConfigPaths:
    """Paths to the three configuration scopes.

    Immutable configuration for where settings files are located.
    Applications inject these paths to define their configuration policy.

    Attributes:
        user: Path to user-global settings file (required)
        project: Path to project settings file (optional)
        local: Path to local (machine-specific) settings file (optional)
    """

    user: Path
    project: Path | None = None
    local: Path | None = None

    @classmethod
    def for_app(cls, appname: str, home: Path | None = None, project_dir: Path | None = None) -> ConfigPaths:
        """Conventional locations for an application named ``appname``.

        Args:
            appname: Application name, used as the ``.<appname>`` directory
            home: Home directory (default: ``Path.home()``)
            project_dir: Project directory; project and local scopes are
                disabled when omitted

        Returns:
            ConfigPaths for ``~/.<appname>/settings.yaml`` and, when a project
            directory is given, its ``.<appname>/settings.yaml`` and
            ``.<appname>/settings.local.yaml``
        """
        home = home if home is not None else Path.home()
        user = home / f".{appname}" / "settings.yaml"
        if project_dir is None:
            return cls(user=user)
        return cls(
            user=user,
            project=project_dir / f".{appname}" / "settings.yaml",
            local=project_dir / f".{appname}" / "settings.local.yaml",
        )
