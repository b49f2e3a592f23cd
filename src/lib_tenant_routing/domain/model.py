"""Domain value objects describing the system / tenant / subtenant tree.

Purpose
-------
Turn the raw mapping parsed from ``systemconfig.yaml`` into immutable, typed
objects. The module performs structural validation only and contains no I/O;
locating and parsing the document is the job of
:mod:`lib_tenant_routing.adapters.config_loader.yaml_loader`.

Contents
--------
* :class:`Level` – ordinal depth in the hierarchy plus its suffix placeholder.
* :class:`AssetBehavior` / :class:`WebAppBehavior` / :class:`ApiBehavior` –
  raw routing rules as written by the configuration author.
* :class:`BehaviorSet` – the three behavior lists of one level.
* :class:`SubtenantConfig` / :class:`TenantConfig` / :class:`SystemConfig` –
  the configuration tree.

System Role
-----------
:class:`SystemConfig` is loaded once per run and travels inside
:class:`lib_tenant_routing.domain.context.RunContext`; the application layer
reads it but never mutates it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from types import MappingProxyType
from typing import Any, Mapping

from .errors import ConfigInvalid


class Level(IntEnum):
    """Depth of a node in the configuration tree.

    Examples
    --------
    >>> Level.TENANT.placeholder
    '{ts}'
    >>> Level.SUBTENANT.parent is Level.TENANT
    True
    """

    SYSTEM = 0
    TENANT = 1
    SUBTENANT = 2

    @property
    def placeholder(self) -> str:
        """Deferred suffix token resolved by the edge function at request time."""

        return _PLACEHOLDERS[self]

    @property
    def parent(self) -> Level | None:
        return None if self is Level.SYSTEM else Level(self - 1)

    @property
    def label(self) -> str:
        return self.name.lower()


_PLACEHOLDERS = {Level.SYSTEM: "{ss}", Level.TENANT: "{ts}", Level.SUBTENANT: "{sts}"}


@dataclass(frozen=True, slots=True)
class AssetBehavior:
    path: str
    suffix: str | None = None
    region: str | None = None


@dataclass(frozen=True, slots=True)
class WebAppBehavior:
    path: str
    app_name: str
    suffix: str | None = None
    region: str | None = None


@dataclass(frozen=True, slots=True)
class ApiBehavior:
    path: str
    api_name: str
    region: str | None = None


@dataclass(frozen=True, slots=True)
class BehaviorSet:
    """The ``Assets``, ``WebApps`` and ``Apis`` lists declared at one level."""

    assets: tuple[AssetBehavior, ...] = ()
    web_apps: tuple[WebAppBehavior, ...] = ()
    apis: tuple[ApiBehavior, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.assets or self.web_apps or self.apis)

    @classmethod
    def from_mapping(cls, data: Any, *, where: str) -> BehaviorSet:
        """Parse a ``Behaviors`` block; ``None`` yields an empty set.

        Examples
        --------
        >>> behaviors = BehaviorSet.from_mapping({"Assets": [{"Path": "/static"}]}, where="system")
        >>> behaviors.assets[0].path
        '/static'
        >>> BehaviorSet.from_mapping(None, where="system") == BehaviorSet()
        True
        """

        if data is None:
            return cls()
        block = _ensure_mapping(data, where=where)
        assets = tuple(
            AssetBehavior(
                path=_require_str(item, "Path", where=f"{where}.Assets[{idx}]"),
                suffix=_optional_str(item, "Suffix", where=f"{where}.Assets[{idx}]"),
                region=_optional_str(item, "Region", where=f"{where}.Assets[{idx}]"),
            )
            for idx, item in _iter_items(block, "Assets", where=where)
        )
        web_apps = tuple(
            WebAppBehavior(
                path=_require_str(item, "Path", where=f"{where}.WebApps[{idx}]"),
                app_name=_require_str(item, "AppName", where=f"{where}.WebApps[{idx}]"),
                suffix=_optional_str(item, "Suffix", where=f"{where}.WebApps[{idx}]"),
                region=_optional_str(item, "Region", where=f"{where}.WebApps[{idx}]"),
            )
            for idx, item in _iter_items(block, "WebApps", where=where)
        )
        apis = tuple(
            ApiBehavior(
                path=_require_str(item, "Path", where=f"{where}.Apis[{idx}]"),
                api_name=_require_str(item, "ApiName", where=f"{where}.Apis[{idx}]"),
                region=_optional_str(item, "Region", where=f"{where}.Apis[{idx}]"),
            )
            for idx, item in _iter_items(block, "Apis", where=where)
        )
        return cls(assets=assets, web_apps=web_apps, apis=apis)


@dataclass(frozen=True, slots=True)
class SubtenantConfig:
    subdomain: str
    subtenant_suffix: str | None = None
    behaviors: BehaviorSet = field(default_factory=BehaviorSet)

    @classmethod
    def from_mapping(cls, data: Any, *, where: str) -> SubtenantConfig:
        block = _ensure_mapping(data, where=where)
        return cls(
            subdomain=_require_str(block, "Subdomain", where=where),
            subtenant_suffix=_optional_str(block, "SubTenantSuffix", where=where),
            behaviors=BehaviorSet.from_mapping(block.get("Behaviors"), where=f"{where}.Behaviors"),
        )


@dataclass(frozen=True, slots=True)
class TenantConfig:
    root_domain: str
    hosted_zone_id: str | None = None
    acm_certificate_arn: str | None = None
    tenant_suffix: str | None = None
    behaviors: BehaviorSet = field(default_factory=BehaviorSet)
    subtenants: Mapping[str, SubtenantConfig] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "subtenants", MappingProxyType(dict(self.subtenants)))

    def domain_for(self, subtenant: SubtenantConfig) -> str:
        """Return the fully-qualified domain served by *subtenant*.

        Examples
        --------
        >>> TenantConfig(root_domain="t1.com").domain_for(SubtenantConfig(subdomain="store"))
        'store.t1.com'
        """

        return f"{subtenant.subdomain}.{self.root_domain}"

    @classmethod
    def from_mapping(cls, data: Any, *, where: str) -> TenantConfig:
        block = _ensure_mapping(data, where=where)
        raw_subtenants = block.get("SubTenants") or {}
        subtenants = {
            str(key): SubtenantConfig.from_mapping(value, where=f"{where}.SubTenants.{key}")
            for key, value in _ensure_mapping(raw_subtenants, where=f"{where}.SubTenants").items()
        }
        return cls(
            root_domain=_require_str(block, "RootDomain", where=where),
            hosted_zone_id=_optional_str(block, "HostedZoneId", where=where),
            acm_certificate_arn=_optional_str(block, "AcmCertificateArn", where=where),
            tenant_suffix=_optional_str(block, "TenantSuffix", where=where),
            behaviors=BehaviorSet.from_mapping(block.get("Behaviors"), where=f"{where}.Behaviors"),
            subtenants=subtenants,
        )


@dataclass(frozen=True, slots=True)
class SystemConfig:
    """Root of the configuration tree.

    Examples
    --------
    >>> cfg = SystemConfig.from_mapping({
    ...     "SystemKey": "acme", "SystemSuffix": "x1", "Environment": "dev", "Region": "us-east-1",
    ...     "Tenants": {"t1": {"RootDomain": "t1.com"}},
    ... })
    >>> cfg.profile, sorted(cfg.tenants)
    ('default', ['t1'])
    """

    system_key: str
    system_suffix: str
    environment: str
    region: str
    profile: str = "default"
    behaviors: BehaviorSet = field(default_factory=BehaviorSet)
    tenants: Mapping[str, TenantConfig] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tenants", MappingProxyType(dict(self.tenants)))

    @property
    def service_stack_name(self) -> str:
        """Name of the stack whose outputs feed behavior resolution."""

        return f"{self.system_key}---service"

    @classmethod
    def from_mapping(cls, data: Any) -> SystemConfig:
        block = _ensure_mapping(data, where="system")
        raw_tenants = block.get("Tenants") or {}
        tenants = {
            str(key): TenantConfig.from_mapping(value, where=f"Tenants.{key}")
            for key, value in _ensure_mapping(raw_tenants, where="Tenants").items()
        }
        return cls(
            system_key=_require_str(block, "SystemKey", where="system"),
            system_suffix=_require_str(block, "SystemSuffix", where="system"),
            environment=_require_str(block, "Environment", where="system"),
            region=_require_str(block, "Region", where="system"),
            profile=_optional_str(block, "Profile", where="system") or "default",
            behaviors=BehaviorSet.from_mapping(block.get("Behaviors"), where="Behaviors"),
            tenants=tenants,
        )


def _ensure_mapping(data: Any, *, where: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ConfigInvalid(f"{where}: expected a mapping, got {type(data).__name__}")
    return data


def _iter_items(block: Mapping[str, Any], key: str, *, where: str) -> list[tuple[int, Mapping[str, Any]]]:
    items = block.get(key) or []
    if not isinstance(items, list):
        raise ConfigInvalid(f"{where}.{key}: expected a list, got {type(items).__name__}")
    return [(idx, _ensure_mapping(item, where=f"{where}.{key}[{idx}]")) for idx, item in enumerate(items)]


def _require_str(block: Mapping[str, Any], key: str, *, where: str) -> str:
    value = _optional_str(block, key, where=where)
    if value is None:
        raise ConfigInvalid(f"{where}: missing required field '{key}'")
    return value


def _optional_str(block: Mapping[str, Any], key: str, *, where: str) -> str | None:
    value = block.get(key)
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)):
        # YAML 1.1 reads an unquoted 0010 as the integer 8.
        raise ConfigInvalid(
            f"{where}.{key}: expected a string, got {type(value).__name__} {value!r}; quote the value in YAML"
        )
    if not isinstance(value, str):
        raise ConfigInvalid(f"{where}.{key}: expected a string, got {type(value).__name__}")
    return value
