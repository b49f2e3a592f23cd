"""Tree walk from system to tenant to subtenants, producing domain-keyed documents.

Purpose
-------
Drive :mod:`~lib_tenant_routing.application.compose` over one tenant (or all
tenants) and collect the resulting entries keyed by the domain they serve.

Ordering
--------
Within one build the stack outputs are fetched once, system behaviors are
resolved once, the tenant entry is composed next, and every subtenant is
composed from the tenant entry. Any failure aborts the build; no partial
document is ever returned.

Contents
    - ``build_tenant_document`` / ``build_subtenant_entry`` /
      ``build_system_document``: public walks that fetch stack outputs.
    - ``compose_tenant_document``: the same walk over a given snapshot.
    - ``fetch_stack_outputs`` / ``resolve_system_behaviors``: shared steps.
    - ``document_to_dict`` / ``document_to_json`` / ``iter_kvs_pairs``:
      external-boundary serialisation.
    - ``check_kvs_sizes``: size guard for documents written to files or stdout.
"""

from __future__ import annotations

import json
from types import MappingProxyType
from typing import Iterator, Mapping

from ..domain.context import RunContext
from ..domain.errors import (
    CompositionError,
    ConfigInvalid,
    PayloadTooLarge,
    ResolutionError,
    UnknownSubtenant,
    UnknownTenant,
)
from ..domain.model import Level, SystemConfig, TenantConfig
from ..domain.resolved import MAX_KVS_VALUE_BYTES, BehaviorMap, ResolvedEntry
from ..observability import log_debug, log_info, log_warning, make_event
from .compose import compose_subtenant, compose_tenant
from .ports import StackOutputReader
from .resolve import resolve_behaviors

Document = dict[str, ResolvedEntry]
"""Resolved entries keyed by fully-qualified domain."""

_NEAR_LIMIT_RATIO = 0.9


def build_tenant_document(context: RunContext, tenant_key: str, reader: StackOutputReader) -> Document:
    """Return the entries for *tenant_key*'s root domain and all its subdomains.

    Raises
    ------
    UnknownTenant
        Before any stack output is fetched.
    CompositionError
        When any level fails to resolve; the cause is chained.
    """

    _lookup_tenant(context.config, tenant_key)
    outputs = fetch_stack_outputs(context, reader)
    return compose_tenant_document(context, tenant_key, outputs)


def compose_tenant_document(context: RunContext, tenant_key: str, outputs: Mapping[str, str]) -> Document:
    """Walk *tenant_key* against an already-fetched stack-output snapshot."""

    tenant = _lookup_tenant(context.config, tenant_key)
    system_map = resolve_system_behaviors(context, outputs)
    document = _walk_tenant(context, tenant_key, tenant, system_map, outputs)
    log_info("document_built", **make_event("tenant", tenant_key, {"domains": len(document)}))
    return document


def build_subtenant_entry(
    context: RunContext, tenant_key: str, subtenant_key: str, reader: StackOutputReader
) -> tuple[str, ResolvedEntry]:
    """Return ``(domain, entry)`` for a single subtenant."""

    tenant = _lookup_tenant(context.config, tenant_key)
    subtenant = tenant.subtenants.get(subtenant_key)
    if subtenant is None:
        raise UnknownSubtenant(subtenant_key, tenant.subtenants.keys())
    outputs = fetch_stack_outputs(context, reader)
    system_map = resolve_system_behaviors(context, outputs)
    tenant_entry = _compose_tenant(context, tenant_key, tenant, system_map, outputs)
    return tenant.domain_for(subtenant), compose_subtenant(tenant_entry, subtenant, subtenant_key, outputs)


def build_system_document(context: RunContext, reader: StackOutputReader) -> Document:
    """Return the entries of every tenant, sharing one stack-output snapshot."""

    outputs = fetch_stack_outputs(context, reader)
    system_map = resolve_system_behaviors(context, outputs)
    document: Document = {}
    for tenant_key, tenant in context.config.tenants.items():
        for domain, entry in _walk_tenant(context, tenant_key, tenant, system_map, outputs).items():
            _claim(document, domain, entry)
    log_info("document_built", **make_event("system", context.config.system_key, {"domains": len(document)}))
    return document


def fetch_stack_outputs(context: RunContext, reader: StackOutputReader) -> Mapping[str, str]:
    """Read the service stack outputs once and freeze them for the build."""

    outputs = MappingProxyType(dict(reader.get_outputs(context.service_stack_name)))
    log_debug("stack_outputs_fetched", **make_event("stack", context.service_stack_name, {"keys": len(outputs)}))
    return outputs


def resolve_system_behaviors(context: RunContext, outputs: Mapping[str, str]) -> BehaviorMap:
    config = context.config
    try:
        return resolve_behaviors(
            Level.SYSTEM.placeholder, config.environment, context.region, config.behaviors, outputs, Level.SYSTEM
        )
    except ResolutionError as exc:
        raise CompositionError(Level.SYSTEM.label, config.system_key, str(exc)) from exc


def document_to_dict(document: Mapping[str, ResolvedEntry]) -> dict[str, dict[str, object]]:
    return {domain: entry.to_dict() for domain, entry in document.items()}


def document_to_json(document: Mapping[str, ResolvedEntry], *, indent: int | None = None) -> str:
    """Serialise *document* for the output file / stdout boundary."""

    separators = (",", ":") if indent is None else None
    return json.dumps(document_to_dict(document), indent=indent, separators=separators, ensure_ascii=False)


def iter_kvs_pairs(
    document: Mapping[str, ResolvedEntry], *, limit: int = MAX_KVS_VALUE_BYTES
) -> Iterator[tuple[str, str]]:
    """Yield ``(domain, value)`` pairs ready for a KVS writer.

    Raises
    ------
    PayloadTooLarge
        For the first entry whose UTF-8 value exceeds *limit*. Values are never
        truncated.
    """

    for domain, entry in document.items():
        value = entry.to_json()
        size = len(value.encode("utf-8"))
        if size > limit:
            raise PayloadTooLarge(domain, size, limit)
        if size > limit * _NEAR_LIMIT_RATIO:
            log_warning("kvs_entry_near_limit", **make_event("kvs", domain, {"size": size, "limit": limit}))
        else:
            log_debug("kvs_entry_size", **make_event("kvs", domain, {"size": size, "limit": limit}))
        yield domain, value


def check_kvs_sizes(document: Mapping[str, ResolvedEntry], *, limit: int = MAX_KVS_VALUE_BYTES) -> None:
    """Apply the KVS size guard of :func:`iter_kvs_pairs` without keeping the values."""

    for _domain, _value in iter_kvs_pairs(document, limit=limit):
        pass


def _walk_tenant(
    context: RunContext,
    tenant_key: str,
    tenant: TenantConfig,
    system_map: BehaviorMap,
    outputs: Mapping[str, str],
) -> Document:
    tenant_entry = _compose_tenant(context, tenant_key, tenant, system_map, outputs)
    document: Document = {tenant.root_domain: tenant_entry}
    for subtenant_key, subtenant in tenant.subtenants.items():
        entry = compose_subtenant(tenant_entry, subtenant, subtenant_key, outputs)
        _claim(document, tenant.domain_for(subtenant), entry)
    return document


def _compose_tenant(
    context: RunContext,
    tenant_key: str,
    tenant: TenantConfig,
    system_map: BehaviorMap,
    outputs: Mapping[str, str],
) -> ResolvedEntry:
    config = context.config
    return compose_tenant(
        config.system_key,
        config.system_suffix,
        config.environment,
        context.region,
        system_map,
        tenant_key,
        tenant,
        outputs,
    )


def _lookup_tenant(config: SystemConfig, tenant_key: str) -> TenantConfig:
    tenant = config.tenants.get(tenant_key)
    if tenant is None:
        raise UnknownTenant(tenant_key, config.tenants.keys())
    return tenant


def _claim(document: Document, domain: str, entry: ResolvedEntry) -> None:
    if domain in document:
        existing = document[domain]
        raise ConfigInvalid(
            f"Domain '{domain}' is served by both '{_describe(existing)}' and '{_describe(entry)}'"
        )
    document[domain] = entry


def _describe(entry: ResolvedEntry) -> str:
    return f"{entry.tenant_key}/{entry.subtenant_key}" if entry.subtenant_key else entry.tenant_key
