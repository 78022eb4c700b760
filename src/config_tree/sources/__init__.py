"""Configuration tree sources."""

from .dir import DirTree
from .file import FileTree
from .var import VarTree
from .yaml_hash import YAMLHashFile
from .yaml_hash_dir import YAMLHashDir

__all__ = [
    "DirTree",
    "FileTree",
    "VarTree",
    "YAMLHashFile",
    "YAMLHashDir",
]
