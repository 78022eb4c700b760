"""Tests for path normalization."""

import pytest
from config_tree.paths import is_ancestor
from config_tree.paths import normalize_path
from config_tree.paths import relative_segments
from config_tree.paths import split_path


class TestNormalizePath:
    """Test normalize_path function."""

    def test_absolute_path_ignores_cwd(self):
        """Test absolute paths are not joined to cwd."""
        assert normalize_path("/a/b", "/x/y") == "/x/y"

    def test_relative_path_joins_cwd(self):
        """Test relative paths are appended to cwd."""
        assert normalize_path("/a", "b/c") == "/a/b/c"

    def test_parent(self):
        """Test .. pops the last segment."""
        assert normalize_path("/a/b", "..") == "/a"

    def test_excess_parent_absorbed_at_root(self):
        """Test .. above the root is not an error."""
        assert normalize_path("/a", "../../../x") == "/x"
        assert normalize_path("/", "..") == "/"

    def test_dot_dropped(self):
        """Test . segments are dropped."""
        assert normalize_path("/", "./a/./b/.") == "/a/b"

    def test_repeated_slashes(self):
        """Test runs of slashes count as one separator."""
        assert normalize_path("/", "//a///b//") == "/a/b"

    def test_empty_path_is_cwd(self):
        """Test empty input resolves to cwd."""
        assert normalize_path("/a/b", "") == "/a/b"

    @pytest.mark.parametrize(
        "cwd,path",
        [
            ("/", "a/../../b/./c"),
            ("/x/y", "../.././../z/."),
            ("/x", "./..//./q/../r"),
            ("/", "..."),
        ],
    )
    def test_result_is_canonical(self, cwd, path):
        """Test results are absolute with no . or .. segments."""
        result = normalize_path(cwd, path)
        assert result.startswith("/")
        assert "." not in split_path(result)
        assert ".." not in split_path(result)

    def test_dot_prefixed_names_kept(self):
        """Test names merely starting with a dot are ordinary segments."""
        assert normalize_path("/", ".hidden/...") == "/.hidden/..."


class TestPathHelpers:
    """Test ancestor helpers."""

    def test_is_ancestor(self):
        """Test ancestor relation on segment boundaries."""
        assert is_ancestor("/", "/a/b")
        assert is_ancestor("/a", "/a/b")
        assert is_ancestor("/a/b", "/a/b")
        assert not is_ancestor("/a/b", "/a")
        assert not is_ancestor("/a", "/ab")

    def test_relative_segments(self):
        """Test segments below an ancestor."""
        assert relative_segments("/", "/a/b") == ["a", "b"]
        assert relative_segments("/a", "/a/b/c") == ["b", "c"]
        assert relative_segments("/a", "/a") == []
