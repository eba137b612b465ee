"""
Example: Replacing if/elif ladders with switchpy

This example shows how match chains map to common branching idioms:
range classification, type dispatch, nested state transitions, reusable
named rules, and tracing a chain with the standard logging module.
"""

import logging
from dataclasses import dataclass
from typing import Literal

from switchpy import (
    LoggingHook,
    between,
    exhaustive,
    ge,
    is_number,
    is_string,
    lt,
    one_of,
    rule,
    rule_args,
    then,
    use_tracing,
    when,
)

# =============================================================================
# Domain model
# =============================================================================


@dataclass(frozen=True)
class Order:
    items: tuple[str, ...]
    total: float = 0.0
    country: str = "US"


Shipping = Literal["standard", "express", "pickup"]


# =============================================================================
# 1. Range classification with predicate factories
# =============================================================================


def grade(score: int) -> str:
    return (
        when(score)
        .is_(ge(90), then("A"))
        .is_(between(80, 89), then("B"))
        .is_(between(70, 79), then("C"))
        .is_(ge(0) & lt(70), then("F"))
        .otherwise(then("invalid"))
    )


# =============================================================================
# 2. Type dispatch - the producer receives the narrowed value
# =============================================================================


def describe(value: object) -> str:
    return (
        when(value)
        .is_type(is_string, lambda s: f"text of length {len(s)}")
        .is_type(is_number, lambda n: f"number {n:,}")
        .otherwise(then("something else"))
    )


# =============================================================================
# 3. Named rules - decorators build reusable, composable predicates
# =============================================================================


@rule
def is_empty(order: Order) -> bool:
    return not order.items


@rule_args
def total_over(order: Order, amount: float) -> bool:
    return order.total > amount


def shipping_fee(order: Order) -> float:
    domestic = rule(lambda o: o.country == "US")
    return (
        when(order)
        .is_(is_empty, then(0.0))
        .is_(total_over(100) & domestic, then(0.0))
        .is_all([domestic], then(4.99))
        .otherwise(then(14.99))
    )


# =============================================================================
# 4. Exhaustive value dispatch
# =============================================================================


def delivery_days(method: Shipping) -> int:
    return (
        when(method)
        .is_value("standard", 5)
        .is_value("express", 1)
        .is_value("pickup", 0)
        .otherwise(lambda: exhaustive(method))  # type: ignore[arg-type]
    )


# =============================================================================
# 5. Tracing
# =============================================================================


def country_region(code: str) -> str:
    return (
        when(code)
        .is_(one_of(["US", "CA", "MX"]), then("North America"))
        .is_(one_of(["DE", "FR", "NL"]), then("Europe"))
        .otherwise(then("Rest of world"))
    )


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG, format="%(name)s %(message)s")

    for score in (95, 84, 71, 12, -3):
        print(f"grade({score}) = {grade(score)}")

    for value in ("hello", 1234567, None):
        print(f"describe({value!r}) = {describe(value)}")

    for order in (
        Order(items=()),
        Order(items=("book",), total=120.0),
        Order(items=("book",), total=20.0),
        Order(items=("book",), total=20.0, country="DE"),
    ):
        print(f"shipping_fee({order}) = {shipping_fee(order)}")

    for method in ("standard", "express", "pickup"):
        print(f"delivery_days({method!r}) = {delivery_days(method)}")

    with use_tracing(LoggingHook()):
        print(f"country_region('FR') = {country_region('FR')}")
