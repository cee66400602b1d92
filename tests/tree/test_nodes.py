"""Tests for node conversion between plain data and branches."""

import pickle as _pickle

import dotstore.tree._nodes as nodes


class TestBranch:
    """Branch basics."""

    def test_empty_branch(self) -> None:
        """A new branch has no children and no primary."""
        branch = nodes.Branch()
        assert branch.is_empty()
        assert not branch.has_primary

    def test_primary_counts_as_content(self) -> None:
        """A branch holding only a primary is not empty."""
        branch = nodes.Branch(primary=None)
        assert branch.has_primary
        assert not branch.is_empty()

    def test_equality(self) -> None:
        """Branches compare by children and primary."""
        assert nodes.Branch({"a": 1}, primary=0) == nodes.Branch({"a": 1}, primary=0)
        assert nodes.Branch({"a": 1}) != nodes.Branch({"a": 1}, primary=0)


class TestConversion:
    """from_plain() / to_plain()."""

    def test_marker_becomes_primary(self) -> None:
        """The "[=]" entry is lifted out of the children."""
        branch = nodes.from_plain({"[=]": "x", "b": {"c": 1}})
        assert branch.primary == "x"
        assert list(branch.children) == ["b"]
        assert isinstance(branch.children["b"], nodes.Branch)

    def test_raw_round_trip(self) -> None:
        """Raw plain data survives a round trip, marker first."""
        plain = {"a": {"b": 1, "[=]": 0}, "l": [1, {"x": 2}]}
        assert nodes.to_plain(nodes.from_plain(plain)) == plain
        assert list(nodes.to_plain(nodes.from_plain(plain))["a"]) == ["[=]", "b"]

    def test_clean_drops_markers(self) -> None:
        """raw=False drops primaries at every depth."""
        branch = nodes.from_plain({"[=]": 1, "a": {"[=]": 2, "b": 3}})
        assert nodes.to_plain(branch, raw=False) == {"a": {"b": 3}}

    def test_lists_stay_leaves(self) -> None:
        """Mappings inside lists are not converted."""
        branch = nodes.from_plain({"l": [{"a": 1}]})
        assert branch.children["l"] == [{"a": 1}]

    def test_keys_are_stringified(self) -> None:
        """Non-string mapping keys become strings."""
        assert list(nodes.from_plain({1: "a"}).children) == ["1"]

    def test_copy_node_is_deep(self) -> None:
        """copy_node() shares no containers."""
        branch = nodes.from_plain({"a": {"b": [1]}})
        copy = nodes.copy_node(branch)
        copy.children["a"].children["b"].append(2)
        assert branch.children["a"].children["b"] == [1]


class TestUnset:
    """The UNSET sentinel."""

    def test_pickle_keeps_singleton(self) -> None:
        """Unpickling returns the same sentinel."""
        assert _pickle.loads(_pickle.dumps(nodes.UNSET)) is nodes.UNSET

    def test_repr(self) -> None:
        assert repr(nodes.UNSET) == "<UNSET>"
