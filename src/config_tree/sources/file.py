"""Configuration tree backed by a YAML file."""

import logging
import time
from pathlib import Path
from typing import Any

import yaml

from ..base import ConfigTree
from ..exceptions import ConfigFileError

logger = logging.getLogger(__name__)


class FileTree(ConfigTree):
    """Configuration tree read from a YAML file.

    The file is loaded on first access and kept until reload(). A missing
    file is an absent tree, not an error. Changes made with set()/unset()
    are written back by save().

    Args:
        path: Path to the YAML file
        must_exist: Raise ConfigFileError when the file is missing
        **kwargs: See ConfigTree
    """

    default_read_only = False

    def __init__(self, path: str | Path, must_exist: bool = False, **kwargs: Any):
        self.path = Path(path)
        kwargs.setdefault("name", f"file {self.path}")
        super().__init__(**kwargs)
        self.must_exist = must_exist
        self._tree: dict[str, Any] | None = None
        self._mtime: float = -1
        self._loaded = False

    def reload(self) -> None:
        """Forget the loaded tree; the file is read again on next access."""
        self._tree = None
        self._mtime = -1
        self._loaded = False
        self.modified = False

    def _get_tree(self) -> tuple[Any, float]:
        if not self._loaded:
            if self.path.exists():
                self._tree = self._load_file()
                self._mtime = self.path.stat().st_mtime
            elif self.must_exist:
                raise ConfigFileError(f"Configuration file {self.path} does not exist")
            else:
                self._tree = None
                self._mtime = -1
            self._loaded = True
        return self._tree, self._mtime

    def _read_yaml(self) -> Any:
        """Parse the file.

        Raises:
            ConfigFileError: If the file cannot be read or is not valid YAML
        """
        try:
            with open(self.path) as f:
                return yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigFileError(f"Failed to read configuration from {self.path}: {e}") from e

    def _load_file(self) -> dict[str, Any]:
        data = self._read_yaml()
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigFileError(f"Configuration in {self.path} must be a mapping, got {type(data).__name__}")
        return data

    def _new_tree(self) -> dict[str, Any]:
        self._tree = {}
        return self._tree

    def _set_or_unset(self, path: str, is_set: bool, value: Any = None) -> Any:
        old_value = super()._set_or_unset(path, is_set, value)
        self._mtime = max(time.time(), self._mtime + 1e-6)
        return old_value

    def _save(self) -> None:
        """Write the tree back to the file.

        The tree is validated first; an invalid tree is not written unless
        the policy lets it through.

        Raises:
            ConfigFileError: If write fails
        """
        if not self._validate_tree(self._tree, "/"):
            logger.warning(f"Not saving invalid configuration to {self.path}")
            return

        # Ensure directory exists
        self.path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(self.path, "w") as f:
                f.write(f"# Saved by config-tree on {time.ctime()}\n")
                yaml.safe_dump(self._tree or {}, f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            raise ConfigFileError(f"Failed to write configuration to {self.path}: {e}") from e

        # Coarse file timestamps must not move the mtime backwards.
        self._mtime = max(self.path.stat().st_mtime, self._mtime)
        logger.info(f"Saved configuration to {self.path}")
