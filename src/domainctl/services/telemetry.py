"""Per-operation timing for ``-v`` output.

A registry operation decorated with :func:`traced` opens a root span and
:func:`trace_span` opens phases beneath it (``validate``, ``persist``,
``transfer``). The finished tree is attached to
``ServiceResult.meta["telemetry"]`` and logged at DEBUG.

With telemetry off, both cost one ContextVar lookup.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from domainctl.services.result import ServiceResult

_enabled: ContextVar[bool] = ContextVar("domainctl_telemetry", default=False)
_active_span: ContextVar[Span | None] = ContextVar("domainctl_active_span", default=None)


@dataclass
class Span:
    """One timed phase of a registry operation."""

    name: str
    started: float = field(default_factory=time.perf_counter)
    finished: float | None = None
    annotations: dict[str, Any] = field(default_factory=dict)
    children: list[Span] = field(default_factory=list)

    @property
    def duration_ms(self) -> float:
        if self.finished is None:
            return 0.0
        return (self.finished - self.started) * 1000

    def close(self) -> None:
        self.finished = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def child(self, name: str) -> Span:
        span = Span(name=name)
        self.children.append(span)
        return span

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        if self.children:
            data["children"] = [c.to_dict() for c in self.children]
        return data


@contextmanager
def _activate(span: Span) -> Generator[Span]:
    token = _active_span.set(span)
    try:
        yield span
    finally:
        span.close()
        _active_span.reset(token)


@contextmanager
def trace_span(name: str) -> Generator[Span | None]:
    """Time a phase of the enclosing :func:`traced` operation.

    Yields None when telemetry is off or no operation is being traced.
    """
    parent = _active_span.get() if _enabled.get() else None
    if parent is None:
        yield None
        return
    with _activate(parent.child(name)) as span:
        yield span


def _log_span(span: Span, *, ok: bool) -> None:
    structlog.get_logger("domainctl.telemetry").debug(
        "operation.timed",
        operation=span.name,
        duration_ms=round(span.duration_ms, 2),
        ok=ok,
        phases=[c.name for c in span.children],
    )


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Time a service method and attach its span tree to the returned result."""

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        root = Span(name=func.__qualname__)
        ok = False
        try:
            with _activate(root):
                result = func(*args, **kwargs)
            ok = result.ok if isinstance(result, ServiceResult) else True
        finally:
            _log_span(root, ok=ok)

        if isinstance(result, ServiceResult):
            meta = {**(result.meta or {}), "telemetry": root.to_dict()}
            return result.model_copy(update={"meta": meta})  # type: ignore[return-value]
        return result

    return wrapper


def enable_telemetry() -> None:
    """Turn on span collection (AppContext does this for ``-v``)."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)


def get_active_span() -> Span | None:
    """The span currently being timed, for manual annotation."""
    if not _enabled.get():
        return None
    return _active_span.get()
