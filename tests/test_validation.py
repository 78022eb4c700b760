"""Tests for schema validation."""

import logging

import pytest
from config_tree import ConfigValidationError
from config_tree import InvalidPolicy
from config_tree.validation import SchemaValidator
from config_tree.validation import validate_tree

SCHEMA = {
    "type": "object",
    "properties": {
        "port": {"type": "integer"},
        "hosts": {"type": "array", "items": {"type": "string"}},
    },
}


class TestSchemaValidator:
    """Test SchemaValidator class."""

    def test_valid_tree(self):
        """Test a valid tree has no errors."""
        assert SchemaValidator().validate({"port": 80, "hosts": ["a"]}, SCHEMA) == []

    def test_error_paths(self):
        """Test errors name the offending path."""
        errors = SchemaValidator().validate({"port": "x", "hosts": ["a", 2]}, SCHEMA)
        assert len(errors) == 2
        assert errors[0].startswith("/hosts/1: ")
        assert errors[1].startswith("/port: ")

    def test_root_error(self):
        """Test an error on the root itself."""
        assert SchemaValidator().validate([], SCHEMA) == ["/: [] is not of type 'object'"]

    def test_declared_draft(self):
        """Test the schema's declared draft is honored."""
        schema = {"$schema": "https://json-schema.org/draft/2020-12/schema", **SCHEMA}
        assert SchemaValidator().validate({"port": 80}, schema) == []


class TestValidateTree:
    """Test validate_tree policies."""

    def test_no_schema(self):
        """Test validation is skipped without a schema."""
        assert validate_tree({"port": "x"}, None, InvalidPolicy.DIE)

    def test_absent_tree(self):
        """Test absent trees are never validated."""
        assert validate_tree(None, SCHEMA, InvalidPolicy.DIE)

    def test_die(self):
        """Test DIE raises with location and errors."""
        with pytest.raises(ConfigValidationError) as exc_info:
            validate_tree({"port": "x"}, SCHEMA, InvalidPolicy.DIE, describe="config app", path="/srv")
        assert "config app at `/srv` has 1 error(s)" in str(exc_info.value)
        assert exc_info.value.path == "/srv"
        assert len(exc_info.value.errors) == 1

    def test_warn(self, caplog):
        """Test WARN logs and continues."""
        with caplog.at_level(logging.WARNING):
            assert not validate_tree({"port": "x"}, SCHEMA, InvalidPolicy.WARN)
        assert "has 1 error(s)" in caplog.text

    def test_quiet(self, caplog):
        """Test QUIET continues silently."""
        with caplog.at_level(logging.WARNING):
            assert not validate_tree({"port": "x"}, SCHEMA, InvalidPolicy.QUIET)
        assert caplog.text == ""
