"""Tracing hooks for match chains.

Every condition check evaluated on an unmatched cursor, and every fallback
taken by ``otherwise``, is reported to the active ``TraceHook`` as one
step. Checks on an already matched cursor evaluate nothing and are not
reported.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any, Protocol, TextIO, TypeVar, runtime_checkable

# Optional OpenTelemetry imports - only needed if using OpenTelemetryHook
try:
    from opentelemetry.trace import (
        Link as _Link,
    )
    from opentelemetry.trace import (
        Status as _Status,
    )
    from opentelemetry.trace import (
        StatusCode as _StatusCode,
    )
    from opentelemetry.trace import (
        set_span_in_context as _set_span_in_context,
    )

    _HAS_OPENTELEMETRY = True
except ImportError:
    _HAS_OPENTELEMETRY = False
    _Link = None
    _Status = None
    _StatusCode = None
    _set_span_in_context = None

_S = TypeVar("_S")


@runtime_checkable
class TraceHook(Protocol):
    """
    Receives one enter/exit pair for each step a match chain evaluates.

    A step is either a condition check on an unmatched cursor
    (``is_value(2)``, ``is_(gt(0))`` ...) or the fallback run by
    ``otherwise``. Whatever ``on_enter`` returns is handed back to
    ``on_exit`` or ``on_error`` for the same step.

    Example:
        class MissCounter:
            def __init__(self):
                self.misses = 0

            def on_enter(self, name, subject, depth):
                return None

            def on_exit(self, span, name, matched, duration_ms, depth):
                if not matched:
                    self.misses += 1

            def on_error(self, span, name, error, duration_ms, depth):
                pass
    """

    def on_enter(self, name: str, subject: Any, depth: int) -> Any:
        """
        A step is about to run.

        Args:
            name: Step label, e.g. "is_value(2)" or "otherwise"
            subject: The value the chain was started with
            depth: 0 for a top-level chain, +1 per enclosing producer

        Returns:
            Any token; None is fine
        """
        ...

    def on_exit(
        self, span: Any, name: str, matched: bool, duration_ms: float, depth: int
    ) -> None:
        """
        A step finished.

        `matched` is True when the condition held (its producer has run)
        and always True for a fallback. `duration_ms` covers the
        condition and the producer.
        """
        ...

    def on_error(
        self, span: Any, name: str, error: Exception, duration_ms: float, depth: int
    ) -> None:
        """A condition, guard or producer raised; the error propagates afterwards."""
        ...


@dataclass
class TraceConfig:
    """
    Configuration for tracing behavior.

    Attributes:
        nested: If True, trace chains started inside producers
        max_depth: Maximum chain depth to trace (None = unlimited)
        include_fallback: If True, trace the fallback taken by otherwise()
    """

    nested: bool = True
    max_depth: int | None = None
    include_fallback: bool = True


# Context variables for global tracing
_trace_hook: ContextVar[TraceHook | None] = ContextVar("trace_hook", default=None)
_trace_config: ContextVar[TraceConfig] = ContextVar(
    "trace_config", default=TraceConfig()
)
_chain_depth: ContextVar[int] = ContextVar("chain_depth", default=0)
# Identity of the chain whose step is being entered
_current_chain: ContextVar[object] = ContextVar("current_chain", default=None)


@contextmanager
def use_tracing(hook: TraceHook, config: TraceConfig | None = None) -> Iterator[None]:
    """
    Report every chain evaluated inside the block to `hook`.

    Scopes nest: leaving an inner block puts the outer hook and config
    back. Chains outside any block run untraced.

    Example:
        with use_tracing(LoggingHook(), TraceConfig(include_fallback=False)):
            transition("loading", "resolve")
    """
    hook_token = _trace_hook.set(hook)
    config_token = _trace_config.set(config or TraceConfig())
    try:
        yield
    finally:
        _trace_config.reset(config_token)
        _trace_hook.reset(hook_token)


def traced_step(
    name: Callable[[], str],
    subject: Any,
    step: Callable[[], tuple[bool, _S]],
    *,
    fallback: bool = False,
    chain: object = None,
) -> _S:
    """
    Run one evaluation step of a chain, reporting it to the active hook.

    `step` returns (matched, outcome). `name` is only called when a hook
    will actually receive the step. Chains started while `step` runs are
    one level deeper.
    """
    hook = _trace_hook.get()
    if hook is None:
        return step()[1]

    config = _trace_config.get()
    depth = _chain_depth.get()
    token = _chain_depth.set(depth + 1)
    try:
        if not _should_trace(config, depth, fallback):
            return step()[1]
        return _run_with_hook(hook, name(), subject, step, depth, chain)
    finally:
        _chain_depth.reset(token)


def _should_trace(config: TraceConfig, depth: int, fallback: bool) -> bool:
    if depth > 0 and not config.nested:
        return False
    if config.max_depth is not None and depth > config.max_depth:
        return False
    return config.include_fallback or not fallback


def _run_with_hook(
    hook: TraceHook,
    name: str,
    subject: Any,
    step: Callable[[], tuple[bool, _S]],
    depth: int,
    chain: object,
) -> _S:
    chain_token = _current_chain.set(chain)
    try:
        span = hook.on_enter(name, subject, depth)
    finally:
        _current_chain.reset(chain_token)
    start = time.perf_counter()

    try:
        matched, outcome = step()
    except Exception as e:
        duration_ms = (time.perf_counter() - start) * 1000
        hook.on_error(span, name, e, duration_ms, depth)
        raise

    duration_ms = (time.perf_counter() - start) * 1000
    hook.on_exit(span, name, matched, duration_ms, depth)
    return outcome


# =============================================================================
# Built-in Trace Hooks
# =============================================================================


class PrintHook:
    """
    Print each step and its outcome, indented by chain depth.

    Example:
        with use_tracing(PrintHook(show_subject=True)):
            when(2).is_(eq(1), then("one")).is_(eq(2), then("two")).otherwise(then("?"))

        # Output:
        # when(2) is_(eq(1))
        #   miss (0.01ms)
        # when(2) is_(eq(2))
        #   match (0.01ms)
    """

    def __init__(
        self, indent: str = "  ", show_subject: bool = False, file: TextIO | None = None
    ):
        self.indent = indent
        self.show_subject = show_subject
        self.file = file

    def on_enter(self, name: str, subject: Any, depth: int) -> None:
        label = f"when({subject!r}) {name}" if self.show_subject else name
        self._emit(depth, label)

    def on_exit(
        self, span: None, name: str, matched: bool, duration_ms: float, depth: int
    ) -> None:
        if name == "otherwise":
            outcome = "fallback"
        else:
            outcome = "match" if matched else "miss"
        self._emit(depth + 1, f"{outcome} ({duration_ms:.2f}ms)")

    def on_error(
        self, span: None, name: str, error: Exception, duration_ms: float, depth: int
    ) -> None:
        self._emit(depth + 1, f"raised {type(error).__name__}: {error}")

    def _emit(self, depth: int, text: str) -> None:
        print(f"{self.indent * depth}{text}", file=self.file)


class LoggingHook:
    """
    Trace hook that logs to a Python logger.

    Example:
        import logging
        logging.basicConfig(level=logging.DEBUG)

        with use_tracing(LoggingHook()):
            classify(status)
    """

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.DEBUG):
        self.logger = logger or logging.getLogger("switchpy")
        self.level = level

    def on_enter(self, name: str, subject: Any, depth: int) -> dict:
        span = {"name": name, "depth": depth, "start": time.perf_counter()}
        self.logger.log(self.level, "[ENTER] %s (depth=%d)", name, depth)
        return span

    def on_exit(
        self, span: dict, name: str, matched: bool, duration_ms: float, depth: int
    ) -> None:
        status = "MATCH" if matched else "MISS"
        self.logger.log(
            self.level, "[EXIT] %s -> %s (%.2fms)", name, status, duration_ms
        )

    def on_error(
        self, span: dict, name: str, error: Exception, duration_ms: float, depth: int
    ) -> None:
        self.logger.error("[ERROR] %s -> %s (%.2fms)", name, error, duration_ms)


class OpenTelemetryHook:
    """
    OpenTelemetry trace hook for match chains with:

    - One span per evaluated step
    - Parent/child spans for chains nested inside producers
    - Depth-based span suppression
    - Optional links between consecutive steps of the same chain

    Requires: pip install opentelemetry-api
    """

    def __init__(
        self,
        tracer,
        *,
        max_span_depth: int | None = None,
        link_sibling_spans: bool = True,
    ):
        if not _HAS_OPENTELEMETRY:
            raise ImportError(
                "OpenTelemetry is not installed. "
                "Install it with: pip install opentelemetry-api"
            )
        self.tracer = tracer
        self.max_span_depth = max_span_depth
        self.link_sibling_spans = link_sibling_spans

        self._span_stack: list[Any] = []
        # depth -> (chain, span) of the most recent step entered at that depth
        self._last_span_at_depth: dict[int, tuple[object, Any]] = {}

    # -------------------------------------------------
    # Span lifecycle
    # -------------------------------------------------

    def on_enter(self, name: str, subject: Any, depth: int) -> Any:
        # Set whenever __init__ succeeded
        assert _set_span_in_context is not None
        assert _Link is not None

        if self.max_span_depth is not None and depth > self.max_span_depth:
            return None

        parent = self._span_stack[-1] if self._span_stack else None
        parent_ctx = _set_span_in_context(parent) if parent else None

        chain = _current_chain.get()
        links = []
        previous = self._last_span_at_depth.get(depth)
        if self.link_sibling_spans and previous is not None and previous[0] is chain:
            links.append(_Link(previous[1].get_span_context()))

        span = self.tracer.start_span(
            name,
            context=parent_ctx,
            links=links or None,
        )
        span.set_attribute("switchpy.step", name)
        span.set_attribute(
            "switchpy.kind", "fallback" if name == "otherwise" else "condition"
        )
        span.set_attribute("switchpy.depth", depth)
        span.set_attribute("switchpy.subject_type", type(subject).__name__)

        self._span_stack.append(span)
        self._last_span_at_depth[depth] = (chain, span)
        return span

    def on_exit(
        self,
        span: Any,
        name: str,
        matched: bool,
        duration_ms: float,
        depth: int,
    ) -> None:
        if span is None:
            return

        span.set_attribute("switchpy.matched", matched)
        span.set_attribute("switchpy.duration_ms", duration_ms)
        span.end()
        self._span_stack.pop()

    def on_error(
        self,
        span: Any,
        name: str,
        error: Exception,
        duration_ms: float,
        depth: int,
    ) -> None:
        if span is None:
            return

        # Set whenever __init__ succeeded
        assert _Status is not None
        assert _StatusCode is not None

        span.set_attribute("switchpy.matched", False)
        span.set_attribute("switchpy.duration_ms", duration_ms)
        span.record_exception(error)
        span.set_status(_Status(_StatusCode.ERROR, str(error)))

        span.end()
        self._span_stack.pop()
