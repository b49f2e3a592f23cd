"""Behavior resolution policy.

Purpose
-------
Convert the raw ``Behaviors`` block of one hierarchy level into a path-keyed
map of resolved behaviors, filling defaults and looking API identifiers up in
the service stack outputs. Free of I/O so it can be exercised directly by
property tests.

Contents
    - ``resolve_behaviors``: public entry point.
    - ``find_path_collisions``: lint helper used at configuration load time.
    - ``_resolve_assets`` / ``_resolve_web_apps`` / ``_resolve_apis``: one
      stanza per behavior kind, consumed in that order.

Collision policy
----------------
Entries are processed Assets, then WebApps, then Apis; a later entry that
claims an existing ``Path`` replaces the earlier one. This is not a validation
error; :func:`find_path_collisions` only reports it.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterator, Mapping

from ..domain.errors import MissingStackOutput
from ..domain.model import BehaviorSet, Level
from ..domain.resolved import ResolvedApi, ResolvedAsset, ResolvedBehavior, ResolvedWebApp


def resolve_behaviors(
    placeholder: str,
    environment: str,
    region: str,
    behaviors: BehaviorSet,
    stack_outputs: Mapping[str, str],
    level: Level,
) -> dict[str, ResolvedBehavior]:
    """Resolve *behaviors* declared at *level* into a path-keyed map.

    Parameters
    ----------
    placeholder:
        Suffix token (``{ss}``, ``{ts}`` or ``{sts}``) used when an entry
        does not name its own ``Suffix``.
    environment / region:
        Run environment (stamped on API tuples) and default region.
    behaviors:
        Raw behavior set of one level.
    stack_outputs:
        Read-only snapshot of the service stack outputs.
    level:
        Stamped on every asset and webapp tuple.

    Raises
    ------
    MissingStackOutput
        When an ``Apis`` entry has no ``<ApiName>Id`` output. Nothing is
        returned in that case.

    Examples
    --------
    >>> from lib_tenant_routing.domain.model import ApiBehavior, AssetBehavior
    >>> resolved = resolve_behaviors(
    ...     "{ss}", "dev", "us-east-1",
    ...     BehaviorSet(assets=(AssetBehavior("/static"),), apis=(ApiBehavior("/api", "Public"),)),
    ...     {"PublicId": "abc"}, Level.SYSTEM,
    ... )
    >>> [behavior.to_wire() for behavior in resolved.values()]
    [['/static', 'assets', '{ss}', 'us-east-1', 0], ['/api', 'api', 'abc', 'us-east-1', 'dev']]
    """

    resolved: dict[str, ResolvedBehavior] = {}
    for behavior in _resolve_assets(placeholder, region, behaviors, level):
        resolved[behavior.path] = behavior
    for behavior in _resolve_web_apps(placeholder, region, behaviors, level):
        resolved[behavior.path] = behavior
    for behavior in _resolve_apis(environment, region, behaviors, stack_outputs):
        resolved[behavior.path] = behavior
    return resolved


def find_path_collisions(behaviors: BehaviorSet) -> dict[str, list[str]]:
    """Return paths claimed more than once, with the claiming kinds in processing order.

    Examples
    --------
    >>> from lib_tenant_routing.domain.model import AssetBehavior, WebAppBehavior
    >>> find_path_collisions(BehaviorSet(
    ...     assets=(AssetBehavior("/store"),), web_apps=(WebAppBehavior("/store", "store"),),
    ... ))
    {'/store': ['assets', 'webapp']}
    """

    claims: dict[str, list[str]] = defaultdict(list)
    for asset in behaviors.assets:
        claims[asset.path].append(ResolvedAsset.kind)
    for web_app in behaviors.web_apps:
        claims[web_app.path].append(ResolvedWebApp.kind)
    for api in behaviors.apis:
        claims[api.path].append(ResolvedApi.kind)
    return {path: kinds for path, kinds in claims.items() if len(kinds) > 1}


def _resolve_assets(placeholder: str, region: str, behaviors: BehaviorSet, level: Level) -> Iterator[ResolvedAsset]:
    for asset in behaviors.assets:
        yield ResolvedAsset(
            path=asset.path,
            suffix=asset.suffix or placeholder,
            region=asset.region or region,
            level=level,
        )


def _resolve_web_apps(
    placeholder: str, region: str, behaviors: BehaviorSet, level: Level
) -> Iterator[ResolvedWebApp]:
    for web_app in behaviors.web_apps:
        yield ResolvedWebApp(
            path=web_app.path,
            app_name=web_app.app_name,
            suffix=web_app.suffix or placeholder,
            region=web_app.region or region,
            level=level,
        )


def _resolve_apis(
    environment: str, region: str, behaviors: BehaviorSet, stack_outputs: Mapping[str, str]
) -> Iterator[ResolvedApi]:
    for api in behaviors.apis:
        output_key = f"{api.api_name}Id"
        api_id = stack_outputs.get(output_key)
        if not api_id:
            raise MissingStackOutput(output_key, subject=f"API '{api.api_name}'")
        yield ResolvedApi(
            path=api.path,
            api_id=api_id,
            region=api.region or region,
            environment=environment,
        )
