"""Composition root for ``lib_tenant_routing``.

Purpose
-------
Wire the collaborators (YAML loader, CloudFormation reader, KVS writer) to the
pure resolution pipeline and expose the stable, consumer-ready API used by the
CLI and by deployment scripts.

Contents
--------
* :func:`load_run_context` – load + validate the system document once.
* :func:`lint_behavior_paths` – warn about last-write-wins path collisions.
* :func:`build_tenant_document` / :func:`build_system_document` – documents.
* :func:`tenant_kvs_pairs` – size-checked ``(domain, value)`` pairs.
* :func:`tenant_resource_names` – bucket/table names per domain.
* :func:`publish_tenant_document` – push one tenant's entries to the KVS.

System Role
-----------
The only module that picks concrete adapters. Every function takes an explicit
:class:`RunContext`; there is no module-level profile, region, or config.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Final, Optional

from .adapters.aws.cloudformation import CloudFormationOutputReader
from .adapters.aws.keyvaluestore import CloudFrontKvsWriter
from .adapters.aws.session import profile_region
from .adapters.config_loader.yaml_loader import CONFIG_FILENAME, SystemConfigLoader, find_config_file
from .adapters.env.overrides import default_env_prefix
from .adapters.stack_outputs.static import StaticOutputReader
from .application import walker
from .application.naming import ResourceName, derive_resource_names
from .application.ports import ConfigLoader, KvsWriter, ResourceProvisioner, StackOutputReader
from .application.resolve import find_path_collisions
from .domain.context import RunContext
from .domain.errors import (
    CompositionError,
    ConfigInvalid,
    ConfigNotFound,
    InvalidResourceName,
    MissingStackOutput,
    NullArgument,
    PayloadTooLarge,
    ResolutionError,
    StackHasNoOutputs,
    StackNotFound,
    TenantRoutingError,
    UnknownSubtenant,
    UnknownTenant,
)
from .domain.model import BehaviorSet, Level, SystemConfig
from .domain.resolved import MAX_KVS_VALUE_BYTES, ResolvedEntry
from .observability import bind_trace_id, log_debug, log_info, log_warning, new_trace_id

KVS_ARN_OUTPUT: Final[str] = "KeyValueStoreArn"
"""Service stack output naming the CloudFront KeyValueStore to publish into."""

ProfileRegionLookup = Callable[[str], Optional[str]]


def load_run_context(
    loader: ConfigLoader | None = None,
    *,
    config_path: str | Path | None = None,
    start_dir: str | Path | None = None,
    region_lookup: ProfileRegionLookup | None = profile_region,
) -> RunContext:
    """Load the system configuration and freeze it into a :class:`RunContext`.

    Parameters
    ----------
    loader:
        Custom loader; defaults to :class:`SystemConfigLoader` with
        *config_path* / *start_dir*.
    region_lookup:
        Returns the region bound to a credential profile. ``None`` skips the
        ``Region`` consistency check (offline use).

    Raises
    ------
    ConfigNotFound / ConfigInvalid
        From the loader, or when ``Region`` disagrees with the profile.

    Examples
    --------
    >>> import os
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> body = os.linesep.join(["SystemKey: acme", "SystemSuffix: x1", "Environment: dev", "Region: us-east-1"])
    >>> _ = (Path(tmp.name) / CONFIG_FILENAME).write_text(body, encoding="utf-8")
    >>> ctx = load_run_context(start_dir=tmp.name, region_lookup=lambda profile: "us-east-1")
    >>> ctx.config.system_key, ctx.region
    ('acme', 'us-east-1')
    >>> tmp.cleanup()
    """

    bind_trace_id(None)
    loader = loader or SystemConfigLoader(path=config_path, start_dir=start_dir)
    config = loader.load()
    if region_lookup is not None:
        _check_profile_region(config, region_lookup)
    lint_behavior_paths(config)
    return RunContext.for_config(config)


def lint_behavior_paths(config: SystemConfig) -> dict[str, dict[str, list[str]]]:
    """Report paths claimed by more than one behavior inside a single level.

    Resolution keeps last-write-wins (Assets, WebApps, Apis); this only emits a
    ``behavior_path_collision`` warning per finding and returns them keyed by
    ``system`` / ``<tenant>`` / ``<tenant>/<subtenant>``.
    """

    findings: dict[str, dict[str, list[str]]] = {}
    for owner, level, behaviors in _iter_behavior_sets(config):
        collisions = find_path_collisions(behaviors)
        if not collisions:
            continue
        findings[owner] = collisions
        for path, kinds in collisions.items():
            log_warning(
                "behavior_path_collision",
                scope=level.label,
                key=owner,
                path=path,
                kinds=kinds,
                winner=kinds[-1],
            )
    return findings


def build_tenant_document(
    context: RunContext, tenant_key: str, reader: StackOutputReader | None = None
) -> dict[str, ResolvedEntry]:
    """Return ``{domain: entry}`` for *tenant_key* and its subtenants."""

    new_trace_id()
    _require_tenant(context, tenant_key)
    return walker.build_tenant_document(context, tenant_key, reader or default_output_reader(context))


def build_system_document(context: RunContext, reader: StackOutputReader | None = None) -> dict[str, ResolvedEntry]:
    """Return ``{domain: entry}`` for every tenant of the system."""

    new_trace_id()
    return walker.build_system_document(context, reader or default_output_reader(context))


def tenant_kvs_pairs(
    context: RunContext, tenant_key: str, reader: StackOutputReader | None = None
) -> list[tuple[str, str]]:
    """Return every ``(domain, value)`` pair of a tenant, each checked against the KVS limit."""

    return list(walker.iter_kvs_pairs(build_tenant_document(context, tenant_key, reader)))


def tenant_resource_names(
    context: RunContext, tenant_key: str, reader: StackOutputReader | None = None
) -> dict[str, list[ResourceName]]:
    """Return the buckets and tables each domain of *tenant_key* needs."""

    document = build_tenant_document(context, tenant_key, reader)
    return {domain: list(derive_resource_names(entry)) for domain, entry in document.items()}


def publish_tenant_document(
    context: RunContext,
    tenant_key: str,
    *,
    reader: StackOutputReader | None = None,
    writer: KvsWriter | None = None,
    provisioner: ResourceProvisioner | None = None,
    dry_run: bool = False,
) -> list[str]:
    """Write every domain entry of *tenant_key* into the service KVS.

    All entries are composed and size-checked before the first write, so a
    failure leaves the store untouched. A *provisioner*, when given, receives
    the bucket and table names of every domain before that first write.
    Returns the published domains.

    Raises
    ------
    MissingStackOutput
        When the service stack does not export ``KeyValueStoreArn``.
    PayloadTooLarge
        When any entry exceeds :data:`MAX_KVS_VALUE_BYTES`.
    """

    new_trace_id()
    _require_tenant(context, tenant_key)
    outputs = walker.fetch_stack_outputs(context, reader or default_output_reader(context))
    kvs_arn = outputs.get(KVS_ARN_OUTPUT)
    if not kvs_arn:
        raise MissingStackOutput(KVS_ARN_OUTPUT, subject="KVS publishing")
    document = walker.compose_tenant_document(context, tenant_key, outputs)
    pairs = list(walker.iter_kvs_pairs(document))
    if dry_run:
        log_info("kvs_publish_skipped", scope="kvs", key=kvs_arn, domains=len(pairs))
        return [domain for domain, _ in pairs]
    if provisioner is not None:
        provisioner.ensure([name for entry in document.values() for name in derive_resource_names(entry)])
    writer = writer or CloudFrontKvsWriter(kvs_arn, region=context.region, profile=context.profile)
    for domain, value in pairs:
        writer.put(domain, value)
    log_info("kvs_published", scope="kvs", key=kvs_arn, domains=len(pairs))
    return [domain for domain, _ in pairs]


def default_output_reader(context: RunContext) -> StackOutputReader:
    return CloudFormationOutputReader(region=context.region, profile=context.profile)


def _require_tenant(context: RunContext, tenant_key: str) -> None:
    if tenant_key not in context.config.tenants:
        raise UnknownTenant(tenant_key, context.config.tenants.keys())


def _check_profile_region(config: SystemConfig, region_lookup: ProfileRegionLookup) -> None:
    bound = region_lookup(config.profile)
    if bound is None:
        log_warning("profile_region_unset", scope="system", key=config.profile, region=config.region)
        return
    if bound != config.region:
        raise ConfigInvalid(
            f"Region '{config.region}' does not match region '{bound}' of profile '{config.profile}'"
        )
    log_debug("profile_region_checked", scope="system", key=config.profile, region=bound)


def _iter_behavior_sets(config: SystemConfig):
    yield "system", Level.SYSTEM, config.behaviors
    for tenant_key, tenant in config.tenants.items():
        yield tenant_key, Level.TENANT, tenant.behaviors
        for subtenant_key, subtenant in tenant.subtenants.items():
            yield f"{tenant_key}/{subtenant_key}", Level.SUBTENANT, subtenant.behaviors


__all__ = [
    "BehaviorSet",
    "CONFIG_FILENAME",
    "CompositionError",
    "ConfigInvalid",
    "ConfigNotFound",
    "InvalidResourceName",
    "KVS_ARN_OUTPUT",
    "Level",
    "MAX_KVS_VALUE_BYTES",
    "MissingStackOutput",
    "NullArgument",
    "PayloadTooLarge",
    "ResolutionError",
    "ResolvedEntry",
    "ResourceName",
    "RunContext",
    "StackHasNoOutputs",
    "StackNotFound",
    "StaticOutputReader",
    "SystemConfig",
    "SystemConfigLoader",
    "TenantRoutingError",
    "UnknownSubtenant",
    "UnknownTenant",
    "build_system_document",
    "build_tenant_document",
    "default_env_prefix",
    "default_output_reader",
    "find_config_file",
    "lint_behavior_paths",
    "load_run_context",
    "publish_tenant_document",
    "tenant_kvs_pairs",
    "tenant_resource_names",
]
