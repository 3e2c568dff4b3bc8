"""Unit tests for sorted-set operations."""

import pytest
from dnfctl.core.sets import (
    UnsortedInputError,
    difference,
    intersection,
    require_sorted,
    to_package_set,
)


class TestToPackageSet:
    """Tests for to_package_set()."""

    def test_sorts_and_deduplicates(self) -> None:
        """Names come back sorted with duplicates removed."""
        assert to_package_set(["vim", "bash", "vim", "gcc"]) == ("bash", "gcc", "vim")

    def test_strips_and_drops_blank_lines(self) -> None:
        """Whitespace is stripped and empty entries dropped."""
        assert to_package_set(["  htop\n", "\n", "", "git\n"]) == ("git", "htop")

    def test_byte_order(self) -> None:
        """Uppercase sorts before lowercase, like LC_ALL=C sort."""
        assert to_package_set(["abc", "ABC", "_x", "0a"]) == ("0a", "ABC", "_x", "abc")

    def test_empty(self) -> None:
        """Empty input gives an empty set."""
        assert to_package_set([]) == ()


class TestRequireSorted:
    """Tests for the sortedness precondition."""

    def test_accepts_sorted(self) -> None:
        """Strictly ascending input passes."""
        require_sorted(("a", "b", "c"))

    def test_rejects_out_of_order(self) -> None:
        """Descending neighbours raise."""
        with pytest.raises(UnsortedInputError, match="out of order"):
            require_sorted(("b", "a"))

    def test_rejects_duplicates(self) -> None:
        """Equal neighbours raise."""
        with pytest.raises(UnsortedInputError, match="duplicate"):
            require_sorted(("a", "a"))

    def test_error_is_value_error(self) -> None:
        """UnsortedInputError is a ValueError."""
        assert issubclass(UnsortedInputError, ValueError)


class TestDifference:
    """Tests for difference()."""

    def test_basic(self) -> None:
        """Elements of a that are not in b."""
        assert difference(("a", "b", "c", "d"), ("b", "d")) == ("a", "c")

    def test_disjoint(self) -> None:
        """Disjoint inputs return a unchanged."""
        assert difference(("a", "c"), ("b", "d")) == ("a", "c")

    def test_tail_of_a_is_kept(self) -> None:
        """Elements of a after the end of b are included."""
        assert difference(("a", "x", "y", "z"), ("a", "b")) == ("x", "y", "z")

    def test_empty_inputs(self) -> None:
        """Empty operands behave as the empty set."""
        assert difference((), ("a",)) == ()
        assert difference(("a",), ()) == ("a",)
        assert difference((), ()) == ()

    def test_identical(self) -> None:
        """a minus a is empty."""
        assert difference(("a", "b"), ("a", "b")) == ()

    def test_unsorted_left_raises(self) -> None:
        """Unsorted input is rejected instead of silently misbehaving."""
        with pytest.raises(UnsortedInputError, match="left operand"):
            difference(("b", "a"), ())

    def test_unsorted_right_raises(self) -> None:
        """Unsorted right operand is rejected."""
        with pytest.raises(UnsortedInputError, match="right operand"):
            difference(("a",), ("c", "b"))


class TestIntersection:
    """Tests for intersection()."""

    def test_basic(self) -> None:
        """Elements in both inputs."""
        assert intersection(("a", "b", "c"), ("b", "c", "d")) == ("b", "c")

    def test_empty(self) -> None:
        """Intersection with the empty set is empty."""
        assert intersection((), ("a",)) == ()
        assert intersection(("a",), ()) == ()

    def test_matches_python_sets(self) -> None:
        """Results agree with set semantics on a larger input."""
        a = to_package_set(f"pkg{i}" for i in range(0, 300, 2))
        b = to_package_set(f"pkg{i}" for i in range(0, 300, 3))
        assert intersection(a, b) == tuple(sorted(set(a) & set(b)))
        assert difference(a, b) == tuple(sorted(set(a) - set(b)))
