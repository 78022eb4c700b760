"""Tests for prefixed key resolution."""

from config_tree.models import BRANCH_PREFIXES
from config_tree.models import GET_PREFIXES
from config_tree.models import MergeDirective
from config_tree.models import MergeMode
from config_tree.models import split_key
from config_tree.resolver import ABSENT
from config_tree.resolver import get_branch
from config_tree.resolver import resolve_branch
from config_tree.resolver import resolve_key


class TestSplitKey:
    """Test split_key function."""

    def test_prefixed_keys(self):
        """Test each prefix maps to its directive."""
        assert split_key("*a") == (MergeDirective.KEEP, "a")
        assert split_key("-a") == (MergeDirective.SUBTRACT, "a")
        assert split_key("+a") == (MergeDirective.ADD, "a")
        assert split_key(".a") == (MergeDirective.REPLACE, "a")
        assert split_key("^a") == (MergeDirective.ALT_REPLACE, "a")
        assert split_key("!a") == (MergeDirective.DELETE, "a")

    def test_plain_keys(self):
        """Test unprefixed, lone-prefix and non-string keys."""
        assert split_key("a") == (MergeDirective.NONE, "a")
        assert split_key("+") == (MergeDirective.NONE, "+")
        assert split_key(3) == (MergeDirective.NONE, 3)

    def test_directive_modes(self):
        """Test the merge mode each directive imposes."""
        assert MergeDirective.NONE.mode is None
        assert MergeDirective.KEEP.mode is MergeMode.KEEP
        assert MergeDirective.REPLACE.mode is MergeMode.NORMAL
        assert MergeDirective.ALT_REPLACE.mode is MergeMode.NORMAL
        assert MergeDirective.DELETE.mode is MergeMode.DELETE


class TestResolveBranch:
    """Test resolve_branch and get_branch."""

    def test_unprefixed_wins(self):
        """Test an unprefixed key takes precedence over a * variant."""
        assert resolve_branch({"b": 1, "*b": 2}, "b") == 1

    def test_prefixed_variant_found(self):
        """Test a prefixed variant is found when no plain key exists."""
        assert resolve_key({"+quota": 500}, "quota") == ("+quota", 500)

    def test_stored_none_is_present(self):
        """Test a stored None value is distinct from absence."""
        assert resolve_branch({"a": None}, "a") is None
        assert resolve_branch({}, "a") is ABSENT

    def test_get_ordering(self):
        """Test the get() candidate order tries ^ before !."""
        assert resolve_key({"^b": 1, "!b": 2}, "b", GET_PREFIXES) == ("^b", 1)

    def test_branch_ordering(self):
        """Test the branch candidate order does not know ^."""
        assert resolve_key({"^b": 1, "!b": 2}, "b", BRANCH_PREFIXES) == ("!b", 2)
        assert resolve_branch({"^b": 1}, "b", BRANCH_PREFIXES) is ABSENT

    def test_custom_ordering(self):
        """Test any candidate list can be used."""
        assert resolve_branch({"b": 1, "*b": 2}, "b", ("*", "")) == 2

    def test_sequence_index(self):
        """Test integer segments index into sequences."""
        assert resolve_branch([10, 20], "1") == 20
        assert resolve_branch([10, 20], "2") is ABSENT
        assert resolve_branch([10, 20], "x") is ABSENT
        assert resolve_branch([10, 20], "-1") is ABSENT

    def test_scalar_container(self):
        """Test scalars have no branches."""
        assert resolve_branch(5, "a") is ABSENT

    def test_get_branch(self):
        """Test descending a relative path."""
        tree = {"user": {"*steven": {"limits": [{"quota": 1}]}}}
        assert get_branch(tree, "/") is tree
        assert get_branch(tree, "user/steven/limits/0/quota") == 1
        assert get_branch(tree, "user/tommy") is None
        assert get_branch(tree, "user/steven/limits/0/quota/x") is None
