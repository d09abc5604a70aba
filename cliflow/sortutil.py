"""Ordering helpers for flag and command names."""

from __future__ import annotations


def lexicographic_less(i: str, j: str) -> bool:
    """Return True when ``i`` sorts before ``j``, case-insensitively first.

    Characters are compared by their lower-case form; when those agree the
    original characters decide, so upper case sorts before lower case.
    """
    for left, right in zip(i, j):
        lower_left, lower_right = left.lower(), right.lower()
        if lower_left != lower_right:
            return lower_left < lower_right
        if left != right:
            return left < right
    return i < j