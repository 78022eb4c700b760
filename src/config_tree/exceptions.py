"""Exceptions for config-tree."""


class ConfigError(Exception):
    """Base exception for configuration errors."""

    pass


class InvalidPathError(ConfigError):
    """Malformed or forbidden configuration path."""

    pass


class MergeConflictError(ConfigError):
    """Operands of an ADD/SUBTRACT merge step cannot be combined."""

    def __init__(self, message: str, path: str = "/"):
        super().__init__(f"{message} (at {path})")
        self.path = path


class ReadOnlyError(ConfigError):
    """Mutation attempted on a read-only configuration tree."""

    pass


class UnsupportedOperationError(ReadOnlyError):
    """Operation is not meaningful for this kind of tree (e.g. set() on a composed view)."""

    pass


class StackUnderflowError(ConfigError):
    """popd() called with an empty directory stack."""

    pass


class ConfigValidationError(ConfigError):
    """Error validating configuration data against a schema."""

    def __init__(self, message: str, path: str = "/", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


class ConfigFileError(ConfigError):
    """Error reading or writing configuration file."""

    pass


class TreeBugError(ConfigError):
    """A tree provider broke its contract (e.g. returned a non-ancestor tree path)."""

    pass
