"""
Switchpy - Expression-oriented pattern matching

A small Python library for replacing if/elif ladders with a chainable
expression: test a value against an ordered sequence of conditions and
return the result of the first one that holds, or a fallback.

Condition checks:
    is_(predicate, producer)       predicate(value) holds
    is_value(expected, result)     value equals expected
    is_type(guard, producer)       guard(value) holds; producer gets the value
    is_any(predicates, producer)   at least one predicate holds
    is_all(predicates, producer)   every predicate holds
    otherwise(producer)            close the chain (alias: default)

Example:
    from switchpy import all_, ge, lt, then, when

    def status_category(status: int) -> str:
        return (
            when(status)
            .is_(all_([ge(200), lt(300)]), then("Success"))
            .is_(all_([ge(300), lt(400)]), then("Redirect"))
            .is_(ge(400) & lt(500), then("Client Error"))
            .is_(ge(500) & lt(600), then("Server Error"))
            .otherwise(then("Unknown"))
        )

    status_category(404)  # "Client Error"

The first matching condition wins: its producer runs exactly once and
every later check is skipped without being evaluated.
"""

from __future__ import annotations

__version__ = "0.1.0"
__all__ = [
    # Core
    "Cursor",
    "Unmatched",
    "Matched",
    "when",
    "then",
    "exhaustive",
    # Errors
    "SwitchpyError",
    "UnhandledCaseError",
    # Predicates
    "Predicate",
    "PredicateFactory",
    "rule",
    "rule_args",
    "strict_equals",
    "eq",
    "ne",
    "gt",
    "lt",
    "ge",
    "le",
    "between",
    "between_exclusive",
    "one_of",
    "none_of",
    # Combinators
    "all_",
    "any_",
    "not_",
    # Type guards
    "UNDEFINED",
    "is_string",
    "is_number",
    "is_boolean",
    "is_null",
    "is_undefined",
    # Tracing
    "TraceHook",
    "TraceConfig",
    "use_tracing",
    "PrintHook",
    "LoggingHook",
    "OpenTelemetryHook",
]

from switchpy._comparison import (
    between,
    between_exclusive,
    eq,
    ge,
    gt,
    le,
    lt,
    ne,
    none_of,
    one_of,
    strict_equals,
)
from switchpy._core import (
    Cursor,
    Matched,
    SwitchpyError,
    UnhandledCaseError,
    Unmatched,
    exhaustive,
    then,
    when,
)
from switchpy._guards import (
    UNDEFINED,
    is_boolean,
    is_null,
    is_number,
    is_string,
    is_undefined,
)
from switchpy._predicate import (
    Predicate,
    PredicateFactory,
    all_,
    any_,
    not_,
    rule,
    rule_args,
)
from switchpy._tracing import (
    LoggingHook,
    OpenTelemetryHook,
    PrintHook,
    TraceConfig,
    TraceHook,
    use_tracing,
)
