"""Structured logging helpers shared by every layer of ``lib_tenant_routing``.

Purpose
    Keep every diagnostic emitted while loading the system configuration,
    resolving behaviors, and publishing KVS entries predictable and ready for
    downstream aggregation, without forcing callers onto a logging backend.

Contents
    - ``TRACE_ID``: identifier of the build currently in progress.
    - ``get_logger``: the ``lib_tenant_routing`` logger, silent until an
      application attaches a handler.
    - ``bind_trace_id`` / ``new_trace_id``: set, clear or mint that identifier.
    - ``log_debug`` / ``log_info`` / ``log_warning`` / ``log_error``: level
      shortcuts over one private ``_log`` function.
    - ``make_event``: ``scope`` / ``key`` payload builder.

System Integration
    Used by adapters, the application layer, and the composition root so a
    single document build can be followed end to end through its trace id.
"""

from __future__ import annotations

import logging
import uuid
from contextvars import ContextVar
from typing import Any, Final, Mapping

TRACE_ID: ContextVar[str | None] = ContextVar("lib_tenant_routing_trace_id", default=None)
"""Current trace identifier propagated through logging helpers."""

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_tenant_routing")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Return the logger every module of the package writes to."""

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Set the identifier attached to subsequent log records; ``None`` clears it.

    Examples
    --------
    >>> bind_trace_id("build-42")
    >>> TRACE_ID.get()
    'build-42'
    >>> bind_trace_id(None)
    >>> print(TRACE_ID.get())
    None
    """

    TRACE_ID.set(trace_id)


def new_trace_id() -> str:
    """Mint and bind a fresh trace identifier for one document build.

    Examples
    --------
    >>> trace = new_trace_id()
    >>> TRACE_ID.get() == trace and len(trace) == 12
    True
    >>> bind_trace_id(None)
    """

    trace_id = uuid.uuid4().hex[:12]
    bind_trace_id(trace_id)
    return trace_id


def log_debug(message: str, **fields: Any) -> None:
    """Log *message* at DEBUG level with *fields* as structured context."""

    _log(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    """Log *message* at INFO level with *fields* as structured context."""

    _log(logging.INFO, message, fields)


def log_warning(message: str, **fields: Any) -> None:
    """Log *message* at WARNING level with *fields* as structured context."""

    _log(logging.WARNING, message, fields)


def log_error(message: str, **fields: Any) -> None:
    """Log *message* at ERROR level with *fields* as structured context."""

    _log(logging.ERROR, message, fields)


def make_event(
    scope: str,
    key: str | None,
    payload: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a structured logging payload for resolution lifecycle events.

    Why
        Keeps event construction consistent so log processors can rely on the
        ``scope`` (system/tenant/subtenant/stack/kvs) and ``key`` fields.
    Inputs
        scope: Which part of the hierarchy or which collaborator is observed.
        key: Identifier of the observed entity (tenant key, domain, stack).
        payload: Extra fields merged after scope and key.

    Examples
    --------
    >>> make_event('tenant', 't1', {'behaviors': 3})
    {'scope': 'tenant', 'key': 't1', 'behaviors': 3}
    """

    event: dict[str, Any] = {"scope": scope, "key": key}
    if payload:
        event |= dict(payload)
    return event


def _log(level: int, message: str, fields: Mapping[str, Any]) -> None:
    if not _LOGGER.isEnabledFor(level):
        return
    _LOGGER.log(level, message, extra={"context": {"trace_id": TRACE_ID.get(), **fields}})
