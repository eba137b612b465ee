"""Type guards for primitive kinds.

Each guard is a plain function annotated with ``TypeGuard`` so that static
checkers narrow the value handed to an ``is_type`` producer.
"""

from __future__ import annotations

from typing import Any, Final, TypeGuard


class _Undefined:
    """Marker for a value that was never supplied (distinct from None)."""

    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "UNDEFINED"


UNDEFINED: Final = _Undefined()


def is_string(value: Any) -> TypeGuard[str]:
    return isinstance(value, str)


def is_number(value: Any) -> TypeGuard[int | float]:
    """True for ints and floats. Booleans are not numbers here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_boolean(value: Any) -> TypeGuard[bool]:
    return isinstance(value, bool)


def is_null(value: Any) -> TypeGuard[None]:
    return value is None


def is_undefined(value: Any) -> TypeGuard[_Undefined]:
    """True only for the UNDEFINED sentinel; None is not undefined."""
    return value is UNDEFINED
