"""Shared type variables and callable aliases."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

T = TypeVar("T")
R = TypeVar("R")
U = TypeVar("U")

PredicateFn = Callable[[Any], bool]
"""Signature of a plain predicate: (value) -> bool"""

Producer = Callable[[], R]
"""Signature of a deferred result: () -> result"""
