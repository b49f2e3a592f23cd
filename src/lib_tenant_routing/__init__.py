"""Public package surface for ``lib_tenant_routing``.

Re-exports the composition-root API from :mod:`lib_tenant_routing.core` and
the logging hooks from :mod:`lib_tenant_routing.observability` so callers can
``import lib_tenant_routing`` and reach everything they need.
"""

from __future__ import annotations

from .core import *  # noqa: F401,F403
from .core import __all__ as _core_all
from .observability import bind_trace_id, get_logger

__all__ = [*_core_all, "bind_trace_id", "get_logger"]
