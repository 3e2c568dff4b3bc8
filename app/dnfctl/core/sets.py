"""Set operations over sorted package name sequences.

A package set is a tuple of unique names in ascending order. Python
compares strings by code point, which matches the byte order of their
UTF-8 encoding, so ``sorted()`` produces the required ordering.

All operations walk both inputs once with two cursors, like ``comm(1)``
does on sorted files, so they stay linear for tens of thousands of
packages and never build hash sets.
"""

from collections.abc import Iterable, Sequence

PackageSet = tuple[str, ...]


class UnsortedInputError(ValueError):
    """Raised when a set operation receives unsorted or duplicated input."""


def to_package_set(names: Iterable[str]) -> PackageSet:
    """Normalise raw names into a package set.

    Strips whitespace, drops blank entries and duplicates, and sorts.
    This is the single place where ordering is established; the set
    operations below only check it.

    Args:
        names: Raw package names in any order.

    Returns:
        Sorted, duplicate-free tuple of names.
    """
    return tuple(sorted({name.strip() for name in names if name.strip()}))


def require_sorted(names: Sequence[str], label: str = "input") -> None:
    """Check that a sequence is strictly ascending.

    Args:
        names: Sequence to check.
        label: Name of the argument, used in the error message.

    Raises:
        UnsortedInputError: If an element is not greater than its predecessor.
    """
    for index in range(1, len(names)):
        previous, current = names[index - 1], names[index]
        if not previous < current:
            reason = "duplicate" if previous == current else "out of order"
            msg = (
                f"{label} must be sorted and duplicate-free: "
                f"{previous!r} before {current!r} at position {index} ({reason})"
            )
            raise UnsortedInputError(msg)


def difference(a: Sequence[str], b: Sequence[str]) -> PackageSet:
    """Return the elements of ``a`` that are not in ``b``.

    Equivalent to ``comm -23 a b``.

    Args:
        a: Sorted, duplicate-free names.
        b: Sorted, duplicate-free names.

    Returns:
        Sorted tuple of names present only in ``a``.

    Raises:
        UnsortedInputError: If either input is not sorted or has duplicates.
    """
    require_sorted(a, "left operand")
    require_sorted(b, "right operand")

    result: list[str] = []
    i = j = 0
    while i < len(a) and j < len(b):
        if a[i] < b[j]:
            result.append(a[i])
            i += 1
        elif a[i] > b[j]:
            j += 1
        else:
            i += 1
            j += 1
    result.extend(a[i:])
    return tuple(result)


def intersection(a: Sequence[str], b: Sequence[str]) -> PackageSet:
    """Return the elements present in both ``a`` and ``b``.

    Equivalent to ``comm -12 a b``.

    Args:
        a: Sorted, duplicate-free names.
        b: Sorted, duplicate-free names.

    Returns:
        Sorted tuple of names present in both inputs.

    Raises:
        UnsortedInputError: If either input is not sorted or has duplicates.
    """
    require_sorted(a, "left operand")
    require_sorted(b, "right operand")

    result: list[str] = []
    i = j = 0
    while i < len(a) and j < len(b):
        if a[i] < b[j]:
            i += 1
        elif a[i] > b[j]:
            j += 1
        else:
            result.append(a[i])
            i += 1
            j += 1
    return tuple(result)
