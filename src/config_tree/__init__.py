"""config-tree: Access configuration from many sources as a single tree.

Configuration from in-memory data, YAML files and config directories is
mounted into one composed tree and addressed with filesystem-like paths.
Trees are merged in order; key prefixes control merging per key:

- ``*key``: keep the earlier value (protect it)
- ``+key``: add numbers, concatenate lists
- ``-key``: subtract numbers, remove list elements
- ``.key`` / ``^key``: replace normally
- ``!key``: delete the key

Public API:
    MultiTree: Composed view over mounted trees
    ConfigTree: Base class with get/set/cd/pushd/popd
    VarTree, FileTree, YAMLHashFile, DirTree, YAMLHashDir: Sources
    TreeMerger: The merge engine
    ConfigManager, ConfigPaths, Scope: Three-scope YAML settings context
    MergeMode, MergeDirective, MountedSource, InvalidPolicy: Models
    ConfigError and subclasses: Exception types

Example:
    ```python
    from config_tree import MultiTree

    conf = MultiTree()
    conf.add_file("/etc/myapp.yaml")
    conf.add_file(Path.home() / ".myapp.yaml")

    conf.get("/foo/bar")
    conf.cd("/foo")
    conf.get("../quux")
    ```
"""

from .base import ConfigTree
from .exceptions import ConfigError
from .exceptions import ConfigFileError
from .exceptions import ConfigValidationError
from .exceptions import InvalidPathError
from .exceptions import MergeConflictError
from .exceptions import ReadOnlyError
from .exceptions import StackUnderflowError
from .exceptions import TreeBugError
from .exceptions import UnsupportedOperationError
from .manager import ConfigManager
from .merger import TreeMerger
from .merger import strip_deleted
from .models import BRANCH_PREFIXES
from .models import GET_PREFIXES
from .models import ConfigPaths
from .models import InvalidPolicy
from .models import MergeDirective
from .models import MergeMode
from .models import MountedSource
from .models import Scope
from .models import TreeSlice
from .models import split_key
from .multi import MultiTree
from .paths import normalize_path
from .sources import DirTree
from .sources import FileTree
from .sources import VarTree
from .sources import YAMLHashDir
from .sources import YAMLHashFile

__version__ = "0.1.0"

__all__ = [
    "MultiTree",
    "ConfigTree",
    "VarTree",
    "FileTree",
    "YAMLHashFile",
    "YAMLHashDir",
    "DirTree",
    "TreeMerger",
    "strip_deleted",
    "ConfigManager",
    "ConfigPaths",
    "Scope",
    "MergeMode",
    "MergeDirective",
    "MountedSource",
    "InvalidPolicy",
    "TreeSlice",
    "GET_PREFIXES",
    "BRANCH_PREFIXES",
    "split_key",
    "normalize_path",
    "ConfigError",
    "ConfigFileError",
    "ConfigValidationError",
    "InvalidPathError",
    "MergeConflictError",
    "ReadOnlyError",
    "StackUnderflowError",
    "TreeBugError",
    "UnsupportedOperationError",
]
