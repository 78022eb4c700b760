"""Schema validation of configuration trees."""

import logging
from typing import Any

import jsonschema

from .exceptions import ConfigValidationError
from .models import InvalidPolicy

logger = logging.getLogger(__name__)


class SchemaValidator:
    """Validates trees against JSON Schema documents.

    The validator class is picked from the schema's ``$schema`` keyword,
    falling back to Draft 7.
    """

    def __init__(self, format_checker: bool = True):
        self.format_checker = jsonschema.FormatChecker() if format_checker else None

    def validate(self, tree: Any, schema: dict[str, Any]) -> list[str]:
        """Validate ``tree``.

        Args:
            tree: Configuration tree
            schema: JSON Schema document

        Returns:
            Error messages, empty when the tree is valid
        """
        cls = jsonschema.validators.validator_for(schema, default=jsonschema.Draft7Validator)
        validator = cls(schema, format_checker=self.format_checker)
        errors = sorted(validator.iter_errors(tree), key=lambda e: list(e.absolute_path))
        return [f"/{'/'.join(str(p) for p in error.absolute_path)}: {error.message}" for error in errors]


def validate_tree(
    tree: Any,
    schema: dict[str, Any] | None,
    policy: InvalidPolicy,
    describe: str = "config tree",
    path: str = "/",
    validator: SchemaValidator | None = None,
) -> bool:
    """Validate ``tree`` and apply the ``when_invalid`` policy.

    Args:
        tree: Configuration tree (absent trees are never validated)
        schema: JSON Schema, or None to skip validation
        policy: DIE raises, WARN logs, QUIET ignores
        describe: Description of the tree used in messages
        path: Path the tree is rooted at
        validator: Validator to use (default: a new SchemaValidator)

    Returns:
        True if the tree is valid (or was not validated), False otherwise

    Raises:
        ConfigValidationError: If the tree is invalid and policy is DIE
    """
    if schema is None or tree is None:
        return True

    errors = (validator or SchemaValidator()).validate(tree, schema)
    if not errors:
        return True

    if policy is InvalidPolicy.QUIET:
        return False

    message = f"{describe} at `{path}` has {len(errors)} error(s): {', '.join(errors)}"
    if policy is InvalidPolicy.WARN:
        logger.warning(message)
        return False
    raise ConfigValidationError(message, path=path, errors=errors)
