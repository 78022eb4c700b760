"""Configuration manager for three-scope settings."""

import logging
from pathlib import Path
from typing import Any

from .models import ConfigPaths
from .models import InvalidPolicy
from .models import Scope
from .multi import MultiTree
from .sources import FileTree

logger = logging.getLogger(__name__)


class ConfigManager:
    """Composed view over user/project/local YAML settings.

    The manager is the application's configuration context: construct it
    once at startup with injected paths and hand it to whatever needs
    configuration. Reads go through a MultiTree merging the scopes; writes
    go to exactly one scope's file.

    Resolution order (highest to lowest priority):
    1. Local settings (machine-specific)
    2. Project settings (repository)
    3. User settings (global)

    Key prefixes work across scopes, e.g. a project file holding
    ``{"limits": {"+quota": 500}}`` adds to the user's quota.

    Args:
        paths: Configuration file paths for all three scopes
        schema: JSON Schema the merged settings are validated against
        when_invalid: Validation failure policy (default: die)

    Example:
        ```python
        paths = ConfigPaths.for_app("myapp", project_dir=Path.cwd())
        config = ConfigManager(paths)
        config.get("/profile/active")
        config.set("/profile/active", "dev", scope=Scope.LOCAL)
        ```
    """

    def __init__(
        self,
        paths: ConfigPaths,
        schema: dict[str, Any] | None = None,
        when_invalid: InvalidPolicy | str = InvalidPolicy.DIE,
    ):
        self.paths = paths
        self.sources: dict[Scope, FileTree] = {}
        self.config = MultiTree(name="settings", schema=schema, when_invalid=when_invalid)

        # Lowest priority first
        for scope in (Scope.USER, Scope.PROJECT, Scope.LOCAL):
            path = self._scope_to_path(scope)
            if path is None:
                continue
            self.sources[scope] = self.config.add_file(path, name=f"{scope.value} settings")

    # ===== Reading =====

    def get(self, path: str, default: Any = None) -> Any:
        """Get a merged setting.

        Args:
            path: Absolute path, or relative to the current position

        Returns:
            The merged value, or ``default`` if not set in any scope
        """
        return self.config.get(path, default)

    def get_merged_settings(self) -> dict[str, Any]:
        """Get merged settings from all scopes.

        Returns:
            Merged settings dictionary (empty when no scope has settings)
        """
        merged = self.config.get("/")
        return merged if isinstance(merged, dict) else {}

    def cd(self, path: str) -> None:
        """Change the current position used for relative paths."""
        self.config.cd(path)

    def pushd(self, path: str | None = None) -> None:
        self.config.pushd(path)

    def popd(self) -> None:
        self.config.popd()

    def getcwd(self) -> str:
        return self.config.getcwd()

    # ===== Writing =====

    def set(self, path: str, value: Any, scope: Scope = Scope.LOCAL) -> Any:
        """Set a setting in one scope and save that scope's file.

        Args:
            path: Absolute path, or relative to the current position
            value: New value
            scope: Target scope (default: LOCAL)

        Returns:
            The previous value in that scope, or None
        """
        source = self.source(scope)
        old_value = source.set(self.config.normalize_path(path), value)
        self._save(source)
        logger.info(f"Set {self.config.normalize_path(path)} in {scope.value} scope")
        return old_value

    def unset(self, path: str, scope: Scope = Scope.LOCAL) -> Any:
        """Remove a setting from one scope and save that scope's file.

        The stored key is removed even when it carries a prefix, so
        ``unset("/limits/quota")`` removes a stored ``+quota``.

        Args:
            path: Absolute path, or relative to the current position
            scope: Target scope (default: LOCAL)

        Returns:
            The removed value, or None if it was not set in that scope
        """
        source = self.source(scope)
        stored_path = source.stored_path(self.config.normalize_path(path))
        if stored_path is None:
            return None
        old_value = source.unset(stored_path)
        self._save(source)
        logger.info(f"Removed {stored_path} from {scope.value} scope")
        return old_value

    def source(self, scope: Scope) -> FileTree:
        """Get the file-backed tree for a scope.

        Raises:
            ValueError: If the scope is disabled (no path configured)
        """
        if scope not in self.sources:
            raise ValueError(f"{scope.value} scope is not configured")
        return self.sources[scope]

    def scope_to_path(self, scope: Scope) -> Path | None:
        """Get path for a given scope.

        Public accessor for scope-to-path mapping.

        Args:
            scope: Scope enum value

        Returns:
            Path for the given scope, None if the scope is disabled
        """
        return self._scope_to_path(scope)

    # ===== Private Helpers =====

    def _scope_to_path(self, scope: Scope) -> Path | None:
        scope_map = {
            Scope.USER: self.paths.user,
            Scope.PROJECT: self.paths.project,
            Scope.LOCAL: self.paths.local,
        }
        return scope_map[scope]

    def _save(self, source: FileTree) -> None:
        source.save()
        self.config.clear_cache()
