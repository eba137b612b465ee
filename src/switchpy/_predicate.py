"""Named predicates, decorator factories and logical combinators."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, Generic

from switchpy._types import T


class Predicate(Generic[T]):
    """
    A named, reusable boolean test over a subject value.

    Predicates are plain callables, so they can be passed anywhere a
    ``(value) -> bool`` function is expected. They also compose with
    operators:
        &  = all_  (both must hold, short-circuits on the first False)
        |  = any_  (either may hold, short-circuits on the first True)
        ~  = not_

    Example:
        is_positive: Predicate[int] = Predicate(lambda x: x > 0, "is_positive")
        is_positive(5)  # True

        small = is_positive & lt(10)
    """

    def __init__(self, fn: Callable[[T], bool], name: str | None = None):
        self.fn = fn
        self.name = name or getattr(fn, "__name__", "predicate")

    def __call__(self, value: T) -> bool:
        return bool(self.fn(value))

    def __and__(self, other: Callable[[T], bool]) -> Predicate[T]:
        """a & b = a and b."""
        return all_([self, other])

    def __or__(self, other: Callable[[T], bool]) -> Predicate[T]:
        """a | b = a or b."""
        return any_([self, other])

    def __rand__(self, other: Callable[[T], bool]) -> Predicate[T]:
        """fn & a, with a plain callable on the left."""
        return all_([other, self])

    def __ror__(self, other: Callable[[T], bool]) -> Predicate[T]:
        """fn | a, with a plain callable on the left."""
        return any_([other, self])

    def __invert__(self) -> Predicate[T]:
        """~a = not a."""
        return not_(self)

    def __repr__(self) -> str:
        return f"Predicate({self.name})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Predicate):
            return NotImplemented
        return self.fn == other.fn and self.name == other.name

    def __hash__(self) -> int:
        return hash((id(self.fn), self.name))


class PredicateFactory(Generic[T]):
    """
    A factory that creates Predicates when called with arguments.

    Used for parameterized predicates like `older_than(30)`.
    """

    def __init__(self, fn: Callable[..., bool], name: str):
        self._fn = fn
        self._name = name
        self.__name__ = name

    def __call__(self, *args: Any, **kwargs: Any) -> Predicate[T]:
        name = f"{self._name}({', '.join(map(repr, args))})"
        return Predicate(lambda value: self._fn(value, *args, **kwargs), name)

    def __repr__(self) -> str:
        return f"PredicateFactory({self._name})"


def rule(fn: Callable[[T], bool]) -> Predicate[T]:
    """
    Decorator to create a named predicate (single subject argument).

    Example:
        @rule
        def is_admin(user: User) -> bool:
            return user.is_admin

        when(user).is_(is_admin, then("welcome")).otherwise(then("denied"))

    For parameterized rules, use @rule_args instead.
    """
    return Predicate(fn, fn.__name__)


def rule_args(fn: Callable[..., bool]) -> PredicateFactory[Any]:
    """
    Decorator to create a parameterized predicate factory.

    Example:
        @rule_args
        def older_than(user: User, days: int) -> bool:
            return user.account_age_days > days

        when(user).is_(older_than(30), then("veteran")).otherwise(then("new"))

    For simple rules (single argument), use @rule instead.
    """
    return PredicateFactory(fn, fn.__name__)


def describe(predicate: Callable[..., Any]) -> str:
    """Get a human-readable name for a predicate or guard."""
    if isinstance(predicate, Predicate):
        return predicate.name
    return getattr(predicate, "__name__", repr(predicate))


def describe_all(predicates: Iterable[Callable[..., Any]]) -> str:
    return f"[{', '.join(describe(p) for p in predicates)}]"


# =============================================================================
# Logical Combinators
# =============================================================================


def all_(predicates: Iterable[Callable[[T], bool]]) -> Predicate[T]:
    """
    Combine predicates with logical AND.

    Evaluates in order and stops at the first False. An empty sequence
    is vacuously true.

    Example:
        when(x).is_(all_([gt(0), lt(10)]), then("digit")).otherwise(then("other"))
    """
    preds = tuple(predicates)
    name = _joined(preds, " & ", "all_([])")
    return Predicate(lambda value: all(p(value) for p in preds), name)


def any_(predicates: Iterable[Callable[[T], bool]]) -> Predicate[T]:
    """
    Combine predicates with logical OR.

    Evaluates in order and stops at the first True. An empty sequence
    is vacuously false.
    """
    preds = tuple(predicates)
    name = _joined(preds, " | ", "any_([])")
    return Predicate(lambda value: any(p(value) for p in preds), name)


def not_(predicate: Callable[[T], bool]) -> Predicate[T]:
    """Negate a predicate."""
    return Predicate(lambda value: not predicate(value), f"~{describe(predicate)}")


def _joined(preds: tuple[Callable[..., Any], ...], op: str, empty: str) -> str:
    if not preds:
        return empty
    return f"({op.join(describe(p) for p in preds)})"
