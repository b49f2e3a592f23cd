"""Resolved behaviors and the per-domain KVS entry.

Purpose
-------
Hold the output side of the resolution pipeline. Internally a resolved
behavior is a tagged union (one dataclass per kind); on the wire it is a flat
positional array so a whole :class:`ResolvedEntry` fits in a CloudFront KVS
value.

Contents
--------
* :data:`MAX_KVS_VALUE_BYTES` – CloudFront KVS value-size limit.
* :class:`ResolvedAsset` / :class:`ResolvedWebApp` / :class:`ResolvedApi`.
* :class:`ResolvedEntry` – one domain's flattened configuration.

Wire shapes
-----------
* asset:  ``[path, "assets", suffix, region, level]``
* webapp: ``[path, "webapp", appName, suffix, region, level]``
* api:    ``[path, "api", apiId, region, environment]``

Suffix values may be the literal placeholders ``{ss}``/``{ts}``/``{sts}``;
they are kept verbatim for the edge function to expand.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Final, Mapping, Union

from .model import Level

MAX_KVS_VALUE_BYTES: Final[int] = 1024


@dataclass(frozen=True, slots=True)
class ResolvedAsset:
    path: str
    suffix: str
    region: str
    level: Level

    kind = "assets"

    def to_wire(self) -> list[Any]:
        return [self.path, self.kind, self.suffix, self.region, int(self.level)]


@dataclass(frozen=True, slots=True)
class ResolvedWebApp:
    path: str
    app_name: str
    suffix: str
    region: str
    level: Level

    kind = "webapp"

    def to_wire(self) -> list[Any]:
        return [self.path, self.kind, self.app_name, self.suffix, self.region, int(self.level)]


@dataclass(frozen=True, slots=True)
class ResolvedApi:
    """API route; the last slot carries the environment rather than a level."""

    path: str
    api_id: str
    region: str
    environment: str

    kind = "api"

    def to_wire(self) -> list[Any]:
        return [self.path, self.kind, self.api_id, self.region, self.environment]


ResolvedBehavior = Union[ResolvedAsset, ResolvedWebApp, ResolvedApi]
"""Any resolved behavior kind."""

BehaviorMap = Mapping[str, ResolvedBehavior]
"""Resolved behaviors keyed by routing ``Path``."""


@dataclass(frozen=True, slots=True)
class ResolvedEntry:
    """Flattened configuration for one domain (tenant or subtenant).

    ``level`` and ``behavior_map`` are not serialized; they let a subtenant be
    composed from its tenant entry and let resource naming pick the behaviors
    owned by this level.

    Examples
    --------
    >>> entry = ResolvedEntry(
    ...     env="dev", region="us-east-1", system_key="acme", tenant_key="t1",
    ...     ss="x1", ts="{ss}", level=Level.TENANT,
    ...     behavior_map={"/static": ResolvedAsset("/static", "{ss}", "us-east-1", Level.SYSTEM)},
    ... )
    >>> entry.to_json()
    '{"env":"dev","region":"us-east-1","systemKey":"acme","tenantKey":"t1","ss":"x1","ts":"{ss}","behaviors":[["/static","assets","{ss}","us-east-1",0]]}'
    """

    env: str
    region: str
    system_key: str
    tenant_key: str
    ss: str
    ts: str
    level: Level
    behavior_map: BehaviorMap = field(default_factory=dict)
    subtenant_key: str | None = None
    sts: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "behavior_map", MappingProxyType(dict(self.behavior_map)))

    @property
    def behaviors(self) -> tuple[ResolvedBehavior, ...]:
        return tuple(self.behavior_map.values())

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation with the published field names."""

        payload: dict[str, Any] = {
            "env": self.env,
            "region": self.region,
            "systemKey": self.system_key,
            "tenantKey": self.tenant_key,
        }
        if self.subtenant_key is not None:
            payload["subtenantKey"] = self.subtenant_key
        payload["ss"] = self.ss
        payload["ts"] = self.ts
        if self.sts is not None:
            payload["sts"] = self.sts
        payload["behaviors"] = [behavior.to_wire() for behavior in self.behavior_map.values()]
        return payload

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)

    def serialized_size(self) -> int:
        """UTF-8 byte length of :meth:`to_json`, as counted by the KVS."""

        return len(self.to_json().encode("utf-8"))

    def fits_kvs(self, limit: int = MAX_KVS_VALUE_BYTES) -> bool:
        return self.serialized_size() <= limit
