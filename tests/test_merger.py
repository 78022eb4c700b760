"""Tests for the merge engine."""

import pytest
from config_tree import MergeConflictError
from config_tree import MergeMode
from config_tree import TreeMerger


@pytest.fixture
def merger():
    return TreeMerger()


class TestNormalMerge:
    """Test merging under NORMAL mode."""

    def test_empty_dicts(self, merger):
        """Test merging empty dictionaries."""
        assert merger.merge({}, {}) == {}

    def test_empty_left(self, merger):
        """Test merging with empty left side."""
        assert merger.merge({}, {"a": 1, "b": 2}) == {"a": 1, "b": 2}

    def test_empty_right_is_identity(self, merger):
        """Test merging with an empty mapping returns the original tree."""
        tree = {"a": 1, "b": {"c": [1, {"d": None}]}, "+e": 2}
        assert merger.merge(tree, {}) == tree

    def test_right_wins(self, merger):
        """Test right side takes precedence for simple values."""
        assert merger.merge({"a": 1, "b": 2}, {"b": 20, "c": 3}) == {"a": 1, "b": 20, "c": 3}

    def test_nested_merge(self, merger):
        """Test merging nested dictionaries."""
        left = {"a": 1, "b": {"c": 2, "d": 3}}
        right = {"b": {"c": 20}, "e": 5}
        assert merger.merge(left, right) == {"a": 1, "b": {"c": 20, "d": 3}, "e": 5}

    def test_kind_mismatch_replaces(self, merger):
        """Test a scalar on the right blots out a mapping on the left and vice versa."""
        assert merger.merge({"a": {"b": 1}}, {"a": 5}) == {"a": 5}
        assert merger.merge({"a": 5}, {"a": {"b": 1}}) == {"a": {"b": 1}}
        assert merger.merge({"a": [1]}, {"a": {"b": 1}}) == {"a": {"b": 1}}

    def test_sequences_merge_by_position(self, merger):
        """Test sequences are merged element by element."""
        assert merger.merge([1, {"a": 1}], [9, {"b": 2}, 3]) == [9, {"a": 1, "b": 2}, 3]
        assert merger.merge({"a": [1, 2, 3]}, {"a": [4]}) == {"a": [4, 2, 3]}

    def test_inputs_not_modified(self, merger):
        """Test that original trees are not modified."""
        left = {"a": {"b": 1}, "l": [1]}
        right = {"a": {"c": 2}, "+l": [2]}
        result = merger.merge(left, right)

        assert result == {"a": {"b": 1, "c": 2}, "l": [1, 2]}
        assert left == {"a": {"b": 1}, "l": [1]}
        assert right == {"a": {"c": 2}, "+l": [2]}

        result["a"]["b"] = 99
        assert left["a"]["b"] == 1

    def test_mode_from_string(self, merger):
        """Test modes may be given by name."""
        assert merger.merge({"a": 1}, {"a": 2}, "keep") == {"a": 1}
        assert merger.merge({"a": 1}, {"a": 2}, None) == {"a": 2}


class TestKeyPrefixes:
    """Test per-key prefix directives."""

    def test_add(self, merger):
        """Test + adds numbers."""
        assert merger.merge({"quota": 2000}, {"+quota": 500}) == {"quota": 2500}
        assert merger.merge({"x": 1.5}, {"+x": 1}) == {"x": 2.5}

    def test_add_sequences(self, merger):
        """Test + concatenates sequences."""
        assert merger.merge({"a": [1, 2]}, {"+a": [3]}) == {"a": [1, 2, 3]}

    def test_subtract(self, merger):
        """Test - subtracts numbers and removes sequence elements."""
        assert merger.merge({"quota": 2000}, {"-quota": 500}) == {"quota": 1500}
        assert merger.merge({"a": [1, 2, 3, 2]}, {"-a": [2]}) == {"a": [1, 3]}

    def test_subtract_mapping_removes_keys(self, merger):
        """Test - on mappings removes the right side's keys."""
        assert merger.merge({"a": {"x": 1, "y": 2}}, {"-a": {"x": None}}) == {"a": {"y": 2}}

    def test_delete(self, merger):
        """Test ! removes the key."""
        assert merger.merge({"a": 1, "b": 2}, {"!a": None}) == {"b": 2}
        assert merger.merge({"a": {"deep": 1}}, {"!a": 0}) == {}

    def test_delete_ghost_is_absent(self, merger):
        """Test a ! key with no counterpart never appears in the result."""
        assert merger.merge({"b": 2}, {"!a": None}) == {"b": 2}
        assert merger.merge({"!a": 1}, {}) == {}

    def test_nested_delete_ghost_is_absent(self, merger):
        """Test ! keys nested in one-sided values are dropped."""
        assert merger.merge({"a": {"!x": 1, "y": 2}}, {"b": 3}) == {"a": {"y": 2}, "b": 3}
        assert merger.merge({}, {"b": [{"!x": 1, "y": 2}]}) == {"b": [{"y": 2}]}
        assert merger.merge({"a": {"!x": 1}}, {"a": 2}, MergeMode.KEEP) == {"a": {}}

    def test_keep_on_right(self, merger):
        """Test * on the right keeps the left value."""
        assert merger.merge({"a": 1}, {"*a": 2}) == {"a": 1}

    def test_keep_on_left_protects(self, merger):
        """Test * on the left protects the value from overriding."""
        assert merger.merge({"*a": 1}, {"a": 2}) == {"a": 1}
        assert merger.merge({"*a": 1}, {"+a": 2}) == {"a": 1}

    def test_keep_prefix_preserved(self):
        """Test the * prefix can be carried into the result."""
        merger = TreeMerger(preserve_keep_prefix=True)
        once = merger.merge({"a": 1}, {"*a": 2})
        assert once == {"*a": 1}
        assert merger.merge(once, {"a": 3}) == {"*a": 1}

    def test_replace_prefixes_force_normal(self, merger):
        """Test . and ^ merge normally regardless of the ambient mode."""
        assert merger.merge({"a": 1}, {".a": 5}, MergeMode.ADD) == {"a": 5}
        assert merger.merge({"a": {"x": 1}}, {"^a": {"y": 2}}, MergeMode.KEEP) == {"a": {"x": 1}}
        assert merger.merge({"a": {"x": 1}}, {"^a": {"y": 2}}, MergeMode.ADD) == {"a": {"x": 1, "y": 2}}

    def test_one_sided_prefixed_key_passes_through(self, merger):
        """Test a prefixed key only on one side is copied unchanged."""
        assert merger.merge({}, {"+quota": 500}) == {"+quota": 500}
        assert merger.merge({"-x": 1}, {"y": 2}) == {"-x": 1, "y": 2}

    def test_left_prefix_dropped_when_merged(self, merger):
        """Test the merged key is stored under its logical name."""
        assert merger.merge({"+a": 1}, {"a": 2}) == {"a": 2}

    def test_nested_prefix(self, merger):
        """Test prefixes apply at any depth."""
        left = {"limits": {"quota": 2000, "cgi": True}}
        right = {"limits": {"+quota": 500}}
        assert merger.merge(left, right) == {"limits": {"quota": 2500, "cgi": True}}


class TestMergeModes:
    """Test ambient merge modes."""

    def test_keep_ignores_right(self, merger):
        """Test KEEP returns the left tree unchanged."""
        assert merger.merge({"a": 1}, {"a": 2}, MergeMode.KEEP) == {"a": 1}
        assert merger.merge({"a": 1}, {"a": 2, "b": 3}, MergeMode.KEEP) == {"a": 1}

    def test_add(self, merger):
        """Test ADD combines every common key."""
        result = merger.merge({"a": 1, "b": [1], "c": {"d": 1}}, {"a": 2, "b": [2], "c": {"d": 2}}, MergeMode.ADD)
        assert result == {"a": 3, "b": [1, 2], "c": {"d": 3}}

    def test_subtract(self, merger):
        """Test SUBTRACT on scalars and mappings."""
        assert merger.merge(10, 3, MergeMode.SUBTRACT) == 7
        assert merger.merge({"a": 1, "b": 2}, {"a": 5}, MergeMode.SUBTRACT) == {"b": 2}

    def test_delete(self, merger):
        """Test DELETE removes the right side's keys."""
        assert merger.merge({"a": 1, "b": 2}, {"a": None}, MergeMode.DELETE) == {"b": 2}
        assert merger.merge(1, 2, MergeMode.DELETE) is None

    def test_add_conflict(self, merger):
        """Test ADD on strings is a merge conflict."""
        with pytest.raises(MergeConflictError) as exc_info:
            merger.merge({"a": {"b": "x"}}, {"a": {"+b": "y"}})
        assert exc_info.value.path == "/a/b"

    def test_booleans_are_not_numbers(self, merger):
        """Test booleans cannot be added."""
        with pytest.raises(MergeConflictError):
            merger.merge({"a": True}, {"+a": 1})

    def test_mixed_kinds_conflict(self, merger):
        """Test ADD on a sequence and a number is a merge conflict."""
        with pytest.raises(MergeConflictError):
            merger.merge([1], 2, MergeMode.ADD)

    def test_unknown_mode(self, merger):
        """Test an unknown mode name is rejected."""
        with pytest.raises(ValueError):
            merger.merge({}, {}, "sideways")


class TestFoldOrder:
    """Test left-to-right folding."""

    def test_fold_is_left_to_right(self, merger):
        """Test folding differs from right-associative merging."""
        a, b, c = {"x": 1}, {"+x": 2}, {"+x": 3}
        left_fold = merger.merge(merger.merge(a, b), c)
        right_fold = merger.merge(a, merger.merge(b, c))
        assert left_fold == {"x": 6}
        assert right_fold == {"x": 5}

    def test_not_commutative(self, merger):
        """Test NORMAL merge is right-biased."""
        assert merger.merge({"a": 1}, {"a": 2}) != merger.merge({"a": 2}, {"a": 1})
