"""Comparison, range and membership predicate factories.

Ordering factories (gt, lt, ge, le, between, between_exclusive) use the
operand's native ordering: numbers, strings, dates, Decimals and so on.
Comparing unordered types raises Python's own TypeError, which is
propagated to the caller.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from decimal import Decimal
from numbers import Number
from typing import Any

from switchpy._predicate import Predicate
from switchpy._types import T

_SCALARS = (str, bytes, Number, type(None))


def strict_equals(actual: Any, expected: Any) -> bool:
    """
    Value equality for scalars, identity for everything else.

    Strings, bytes, numbers and None compare with ``==``, except that a
    boolean only ever equals another boolean (Python treats ``True == 1``).
    So ``2`` never equals ``"2"`` and NaN never equals itself. Lists, dicts,
    dataclasses and other objects only equal themselves: two separately
    built ``[1, 2]`` lists do not match.
    """
    if isinstance(actual, bool) is not isinstance(expected, bool):
        return False
    if isinstance(actual, _SCALARS) and isinstance(expected, _SCALARS):
        return bool(actual == expected)
    return actual is expected


def _same_value(actual: Any, member: Any) -> bool:
    """strict_equals, except that NaN is a member of a collection holding NaN."""
    if _is_nan(actual) and _is_nan(member):
        return True
    return strict_equals(actual, member)


def _is_nan(value: Any) -> bool:
    if isinstance(value, Decimal):
        return value.is_nan()
    return isinstance(value, float) and math.isnan(value)


# =============================================================================
# Equality
# =============================================================================


def eq(expected: T) -> Predicate[T]:
    """
    Match values equal to `expected`.

    Example:
        when(x).is_(eq(1), then("one"))
    """
    return Predicate(lambda actual: strict_equals(actual, expected), f"eq({expected!r})")


def ne(expected: T) -> Predicate[T]:
    """Match values not equal to `expected`."""
    return Predicate(
        lambda actual: not strict_equals(actual, expected), f"ne({expected!r})"
    )


# =============================================================================
# Ordering
# =============================================================================


def gt(threshold: T) -> Predicate[T]:
    """
    Match values greater than `threshold`.

    Example:
        when(x).is_(gt(0), then("positive"))
    """
    return Predicate(lambda value: value > threshold, f"gt({threshold!r})")


def lt(threshold: T) -> Predicate[T]:
    """Match values less than `threshold`."""
    return Predicate(lambda value: value < threshold, f"lt({threshold!r})")


def ge(threshold: T) -> Predicate[T]:
    """Match values greater than or equal to `threshold`."""
    return Predicate(lambda value: value >= threshold, f"ge({threshold!r})")


def le(threshold: T) -> Predicate[T]:
    """Match values less than or equal to `threshold`."""
    return Predicate(lambda value: value <= threshold, f"le({threshold!r})")


# =============================================================================
# Ranges
# =============================================================================


def between(low: T, high: T) -> Predicate[T]:
    """
    Match values inside a closed range: low <= value <= high.

    Example:
        when(score)
            .is_(between(0, 100), then("valid score"))
            .otherwise(then("invalid score"))
    """
    return Predicate(
        lambda value: low <= value <= high, f"between({low!r}, {high!r})"
    )


def between_exclusive(low: T, high: T) -> Predicate[T]:
    """
    Match values inside an open range: low < value < high.

    Example:
        when(age)
            .is_(between_exclusive(18, 65), then("working age"))
            .otherwise(then("not working age"))
    """
    return Predicate(
        lambda value: low < value < high, f"between_exclusive({low!r}, {high!r})"
    )


# =============================================================================
# Membership
# =============================================================================


def one_of(values: Iterable[T]) -> Predicate[T]:
    """
    Match values equal to any member of `values`.

    Members compare like eq(), except that NaN is found in a collection
    that holds NaN.

    Example:
        when(status)
            .is_(one_of(["active", "pending", "approved"]), then("valid status"))
            .otherwise(then("invalid status"))
    """
    members = tuple(values)
    return Predicate(
        lambda value: any(_same_value(value, m) for m in members),
        f"one_of({list(members)!r})",
    )


def none_of(values: Iterable[T]) -> Predicate[T]:
    """Match values equal to no member of `values`."""
    members = tuple(values)
    return Predicate(
        lambda value: not any(_same_value(value, m) for m in members),
        f"none_of({list(members)!r})",
    )
