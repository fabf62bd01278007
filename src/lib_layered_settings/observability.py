"""Structured logging helpers for resolution and binding events.

Purpose
    Keep every diagnostic emission predictable and contextual without forcing
    applications to adopt a specific logging backend. Events carry key names and
    counts only; configuration values never reach a log record.

Contents
    - ``TRACE_ID``: context variable storing the active trace identifier.
    - ``get_logger``: returns the shared package logger (quiet by default).
    - ``bind_trace_id``: binds or clears the active trace identifier.
    - ``log_debug`` / ``log_info`` / ``log_error``: emit structured entries via a
      single private emitter.
    - ``make_event``: builder for source lifecycle payloads.

System Integration
    Used by adapters, the resolver and the binder so all diagnostics share the
    same trace metadata while the domain layer stays free of logging concerns.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Final, Mapping

TRACE_ID: ContextVar[str | None] = ContextVar("lib_layered_settings_trace_id", default=None)
"""Current trace identifier attached to every structured event.

Why
    Resolution, binding and reload events of one startup run must be
    correlated without passing an identifier through every call.
"""

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_layered_settings")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Expose the package logger so applications may attach handlers.

    Why
        The library stays silent by default; the host application owns handler
        and formatter configuration.
    """

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Bind or clear the active trace identifier.

    Why
        Correlates configuration events with the startup run or request that
        triggered them.
    What
        Stores ``trace_id`` in :data:`TRACE_ID`; ``None`` clears the binding.
    Inputs
        trace_id: Identifier string or ``None`` to drop the binding.
    Side Effects
        Mutates the context variable read by every ``log_*`` helper.

    Examples
    --------
    >>> bind_trace_id('startup-1')
    >>> TRACE_ID.get()
    'startup-1'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


def log_debug(message: str, **fields: Any) -> None:
    """Emit a structured debug log entry that includes the trace context."""

    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    """Emit a structured info log entry that includes the trace context."""

    _emit(logging.INFO, message, fields)


def log_error(message: str, **fields: Any) -> None:
    """Emit a structured error log entry that includes the trace context."""

    _emit(logging.ERROR, message, fields)


def make_event(source: str, kind: str, path: str | None, payload: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Build a structured payload describing one configuration source.

    Why
        Source lifecycle events (loaded, skipped, unavailable, malformed) share
        stable keys so log processors can group them per source.
    What
        Returns ``source``, ``kind`` and ``path`` plus any *payload* fields.
    Inputs
        source: Declared source name.
        kind: ``"file"``, ``"environment"`` or ``"secrets"``.
        path: Concrete location, ``None`` for the environment.
        payload: Optional counts or parse positions. Never configuration values.
    Outputs
        dict[str, Any]: Data safe to unpack into the ``log_*`` helpers.

    Examples
    --------
    >>> make_event('overlay', 'file', 'appsettings.Development.json', {'keys': 3})
    {'source': 'overlay', 'kind': 'file', 'path': 'appsettings.Development.json', 'keys': 3}
    """

    event: dict[str, Any] = {"source": source, "kind": kind, "path": path}
    if payload:
        event |= dict(payload)
    return event


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    """Send one entry through the package logger with the trace context attached."""

    context = {"trace_id": TRACE_ID.get()}
    context.update(fields)
    _LOGGER.log(level, message, extra={"context": context})
