"""Match chain: the two-state cursor behind ``when``.

A chain starts as ``Unmatched(value)``. Each condition check on an
unmatched cursor evaluates immediately: on success it returns
``Matched(result)``, otherwise a fresh ``Unmatched(value)``. A matched
cursor is absorbing: further checks evaluate nothing and return the same
cursor, so the first match wins and later producers are never called.
``otherwise`` closes the chain.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Generic, NoReturn

from switchpy._comparison import strict_equals
from switchpy._predicate import describe, describe_all
from switchpy._tracing import traced_step
from switchpy._types import PredicateFn, Producer, R, T, U


class SwitchpyError(Exception):
    """Base class for errors raised by switchpy."""


class UnhandledCaseError(SwitchpyError, AssertionError):
    """Raised by exhaustive() when a supposedly impossible value shows up."""

    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Unhandled case: {_render(value)}")


# =============================================================================
# Cursor
# =============================================================================


class Cursor(ABC, Generic[T, R]):
    """
    State of a match chain: either Unmatched or Matched.

    Every condition check returns a cursor, so checks can be chained.
    Close the chain with otherwise() (or its alias default()).
    """

    @property
    @abstractmethod
    def matched(self) -> bool:
        """True once some condition in the chain has succeeded."""

    @abstractmethod
    def is_(self, predicate: Callable[[T], Any], producer: Producer[R]) -> Cursor[T, R]:
        """Match when predicate(value) holds; the result is producer()."""

    @abstractmethod
    def is_value(self, expected: Any, result: R) -> Cursor[T, R]:
        """Match when value strictly equals expected; the result is `result` as is."""

    @abstractmethod
    def is_type(
        self, guard: Callable[[T], Any], producer: Callable[[U], R]
    ) -> Cursor[T, R]:
        """Match when guard(value) holds; the result is producer(value)."""

    @abstractmethod
    def is_any(
        self, predicates: Iterable[PredicateFn], producer: Producer[R]
    ) -> Cursor[T, R]:
        """Match when at least one predicate holds (never for an empty sequence)."""

    @abstractmethod
    def is_all(
        self, predicates: Iterable[PredicateFn], producer: Producer[R]
    ) -> Cursor[T, R]:
        """Match when every predicate holds (always for an empty sequence)."""

    @abstractmethod
    def otherwise(self, producer: Producer[R]) -> R:
        """Close the chain, calling producer() only if nothing matched."""

    def default(self, producer: Producer[R]) -> R:
        """Alias for otherwise()."""
        return self.otherwise(producer)


@dataclass(frozen=True)
class Unmatched(Cursor[T, R]):
    """No condition has succeeded yet; holds the subject value unchanged."""

    value: T
    # Shared by every cursor of one chain; lets hooks tell chains apart.
    chain: object = field(default_factory=object, compare=False, repr=False)

    @property
    def matched(self) -> bool:
        return False

    def is_(self, predicate: Callable[[T], Any], producer: Producer[R]) -> Cursor[T, R]:
        return self._check(
            lambda: f"is_({describe(predicate)})",
            lambda: predicate(self.value),
            producer,
        )

    def is_value(self, expected: Any, result: R) -> Cursor[T, R]:
        return self._check(
            lambda: f"is_value({expected!r})",
            lambda: strict_equals(self.value, expected),
            lambda: result,
        )

    def is_type(
        self, guard: Callable[[T], Any], producer: Callable[[U], R]
    ) -> Cursor[T, R]:
        return self._check(
            lambda: f"is_type({describe(guard)})",
            lambda: guard(self.value),
            lambda: producer(self.value),  # type: ignore[arg-type]
        )

    def is_any(
        self, predicates: Iterable[PredicateFn], producer: Producer[R]
    ) -> Cursor[T, R]:
        preds = tuple(predicates)
        return self._check(
            lambda: f"is_any({describe_all(preds)})",
            lambda: any(p(self.value) for p in preds),
            producer,
        )

    def is_all(
        self, predicates: Iterable[PredicateFn], producer: Producer[R]
    ) -> Cursor[T, R]:
        preds = tuple(predicates)
        return self._check(
            lambda: f"is_all({describe_all(preds)})",
            lambda: all(p(self.value) for p in preds),
            producer,
        )

    def otherwise(self, producer: Producer[R]) -> R:
        return traced_step(
            lambda: "otherwise",
            self.value,
            lambda: (True, producer()),
            fallback=True,
            chain=self.chain,
        )

    def _check(
        self,
        name: Callable[[], str],
        condition: Callable[[], Any],
        produce: Producer[R],
    ) -> Cursor[T, R]:
        def step() -> tuple[bool, Cursor[T, R]]:
            if condition():
                return True, Matched(produce())
            return False, Unmatched(self.value, self.chain)

        return traced_step(name, self.value, step, chain=self.chain)


@dataclass(frozen=True)
class Matched(Cursor[T, R]):
    """Some condition has succeeded; holds its result for the rest of the chain."""

    result: R

    @property
    def matched(self) -> bool:
        return True

    def is_(self, predicate: Callable[[T], Any], producer: Producer[R]) -> Cursor[T, R]:
        return self

    def is_value(self, expected: Any, result: R) -> Cursor[T, R]:
        return self

    def is_type(
        self, guard: Callable[[T], Any], producer: Callable[[U], R]
    ) -> Cursor[T, R]:
        return self

    def is_any(
        self, predicates: Iterable[PredicateFn], producer: Producer[R]
    ) -> Cursor[T, R]:
        return self

    def is_all(
        self, predicates: Iterable[PredicateFn], producer: Producer[R]
    ) -> Cursor[T, R]:
        return self

    def otherwise(self, producer: Producer[R]) -> R:
        return self.result


# =============================================================================
# Core API
# =============================================================================


def when(value: T) -> Unmatched[T, Any]:
    """
    Start a match chain on `value`.

    Example:
        result = (
            when(2)
            .is_(lambda v: v == 1, lambda: "one")
            .is_(lambda v: v == 2, lambda: "two")
            .otherwise(lambda: "other")
        )
        # result == "two"

        # Direct value matching
        when(status).is_value(200, "ok").is_value(404, "missing").otherwise(then("?"))

        # Type-guarded matching: the producer receives the value
        when(value).is_type(is_string, str.upper).otherwise(then("not a string"))
    """
    return Unmatched(value)


def then(value: R) -> Producer[R]:
    """
    Wrap a constant as a producer.

    Example:
        when(x).is_(eq(1), then("one")).otherwise(then("other"))
    """

    def producer() -> R:
        return value

    return producer


def exhaustive(value: NoReturn) -> NoReturn:
    """
    Mark a branch that every preceding case should have made unreachable.

    Annotated with NoReturn so a static type checker (mypy, pyright) reports
    the call when the cases before it do not cover the whole union; rely on
    that check rather than on this function. If it is ever actually reached,
    it raises UnhandledCaseError.

    Example:
        Status = Literal["pending", "approved", "rejected"]

        def message(status: Status) -> str:
            if status == "pending":
                return "Waiting"
            if status == "approved":
                return "Approved"
            if status == "rejected":
                return "Rejected"
            return exhaustive(status)
    """
    raise UnhandledCaseError(value)


def _render(value: Any) -> str:
    try:
        return json.dumps(value, default=repr)
    except (TypeError, ValueError):
        return repr(value)
