"""Entry composition: overlay a level's own behaviors onto its parent's.

Purpose
-------
Build the flattened :class:`ResolvedEntry` for a tenant or a subtenant. Both
levels share the same recipe, expressed once in :func:`_compose_level`:

1. start from the parent's resolved, path-keyed behavior map;
2. resolve the level's own ``Behaviors`` with the level's placeholder;
3. overlay the result, child winning on equal paths.

Contents
    - ``overlay``: the path-keyed merge rule.
    - ``compose_tenant`` / ``compose_subtenant``: public entry points.

Suffix fields
-------------
``ts`` is the tenant's ``TenantSuffix`` or the literal ``"{ss}"``; ``sts`` is
the subtenant's ``SubTenantSuffix`` or the literal ``"{ts}"``. The literals are
expanded by the edge function, never here.
"""

from __future__ import annotations

from typing import Any, Mapping

from ..domain.errors import CompositionError, NullArgument, ResolutionError
from ..domain.model import BehaviorSet, Level, SubtenantConfig, TenantConfig
from ..domain.resolved import BehaviorMap, ResolvedBehavior, ResolvedEntry
from ..observability import log_debug, make_event
from .resolve import resolve_behaviors


def overlay(base: BehaviorMap, own: BehaviorMap) -> dict[str, ResolvedBehavior]:
    """Return *base* with every path of *own* replaced or appended.

    Examples
    --------
    >>> overlay({"/a": 1, "/b": 2}, {"/b": 3, "/c": 4})
    {'/a': 1, '/b': 3, '/c': 4}
    """

    merged = dict(base)
    merged.update(own)
    return merged


def compose_tenant(
    system_key: str,
    system_suffix: str,
    environment: str,
    region: str,
    system_behaviors: BehaviorMap | None,
    tenant_key: str,
    tenant: TenantConfig | None,
    stack_outputs: Mapping[str, str] | None,
) -> ResolvedEntry:
    """Compose the entry served on a tenant's ``RootDomain``.

    *system_behaviors* is the level-0 map produced by
    :func:`~lib_tenant_routing.application.resolve.resolve_behaviors`.

    Raises
    ------
    NullArgument
        When *system_behaviors*, *tenant* or *stack_outputs* is ``None``.
    CompositionError
        When the tenant's own behaviors cannot be resolved.
    """

    _require(system_behaviors=system_behaviors, tenant=tenant, stack_outputs=stack_outputs)
    merged = _compose_level(
        Level.TENANT,
        tenant_key,
        base=system_behaviors,
        own=tenant.behaviors,
        environment=environment,
        region=region,
        stack_outputs=stack_outputs,
    )
    entry = ResolvedEntry(
        env=environment,
        region=region,
        system_key=system_key,
        tenant_key=tenant_key,
        ss=system_suffix,
        ts=tenant.tenant_suffix or Level.SYSTEM.placeholder,
        level=Level.TENANT,
        behavior_map=merged,
    )
    log_debug("tenant_composed", **make_event("tenant", tenant_key, {"behaviors": len(merged)}))
    return entry


def compose_subtenant(
    resolved_tenant: ResolvedEntry | None,
    subtenant: SubtenantConfig | None,
    subtenant_key: str,
    stack_outputs: Mapping[str, str] | None,
) -> ResolvedEntry:
    """Compose a subtenant entry on top of its tenant's already-merged entry.

    Raises
    ------
    NullArgument
        When *resolved_tenant*, *subtenant* or *stack_outputs* is ``None``.
    CompositionError
        When the subtenant's own behaviors cannot be resolved.
    """

    _require(resolved_tenant=resolved_tenant, subtenant=subtenant, stack_outputs=stack_outputs)
    key = f"{resolved_tenant.tenant_key}/{subtenant_key}"
    merged = _compose_level(
        Level.SUBTENANT,
        key,
        base=resolved_tenant.behavior_map,
        own=subtenant.behaviors,
        environment=resolved_tenant.env,
        region=resolved_tenant.region,
        stack_outputs=stack_outputs,
    )
    entry = ResolvedEntry(
        env=resolved_tenant.env,
        region=resolved_tenant.region,
        system_key=resolved_tenant.system_key,
        tenant_key=resolved_tenant.tenant_key,
        subtenant_key=subtenant_key,
        ss=resolved_tenant.ss,
        ts=resolved_tenant.ts,
        sts=subtenant.subtenant_suffix or Level.TENANT.placeholder,
        level=Level.SUBTENANT,
        behavior_map=merged,
    )
    log_debug("subtenant_composed", **make_event("subtenant", key, {"behaviors": len(merged)}))
    return entry


def _compose_level(
    level: Level,
    key: str,
    *,
    base: BehaviorMap,
    own: BehaviorSet,
    environment: str,
    region: str,
    stack_outputs: Mapping[str, str],
) -> dict[str, ResolvedBehavior]:
    """Resolve *own* at *level* and overlay it onto *base*, wrapping failures with *key*."""

    try:
        resolved = resolve_behaviors(level.placeholder, environment, region, own, stack_outputs, level)
    except ResolutionError as exc:
        raise CompositionError(level.label, key, str(exc)) from exc
    return overlay(base, resolved)


def _require(**arguments: Any) -> None:
    for name, value in arguments.items():
        if value is None:
            raise NullArgument(name)
