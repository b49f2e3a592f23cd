from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lib_tenant_routing.application.compose import compose_subtenant, compose_tenant, overlay
from lib_tenant_routing.application.resolve import resolve_behaviors
from lib_tenant_routing.domain.errors import CompositionError, MissingStackOutput, NullArgument
from lib_tenant_routing.domain.model import (
    ApiBehavior,
    AssetBehavior,
    BehaviorSet,
    Level,
    SubtenantConfig,
    TenantConfig,
    WebAppBehavior,
)
from lib_tenant_routing.domain.resolved import ResolvedAsset, ResolvedWebApp

PATHS = st.from_regex(r"/[a-z]{1,6}", fullmatch=True)
SYSTEM_BEHAVIORS = BehaviorSet(assets=(AssetBehavior("/static"),), web_apps=(WebAppBehavior("/app", "main"),))


def _system_map(behaviors: BehaviorSet = SYSTEM_BEHAVIORS, outputs=None):
    return resolve_behaviors("{ss}", "dev", "us-east-1", behaviors, outputs or {}, Level.SYSTEM)


def _tenant(tenant: TenantConfig, outputs=None, system_map=None):
    return compose_tenant(
        "acme",
        "x1",
        "dev",
        "us-east-1",
        _system_map() if system_map is None else system_map,
        "t1",
        tenant,
        outputs if outputs is not None else {},
    )


@given(st.sets(PATHS, max_size=8))
def test_empty_tenant_behaviors_keep_system_set_unchanged(paths) -> None:
    system_map = _system_map(BehaviorSet(assets=tuple(AssetBehavior(p) for p in sorted(paths))))
    entry = _tenant(TenantConfig(root_domain="t1.com"), system_map=system_map)
    assert dict(entry.behavior_map) == system_map


def test_tenant_behavior_overrides_system_behavior_on_same_path() -> None:
    tenant = TenantConfig(
        root_domain="t1.com",
        behaviors=BehaviorSet(assets=(AssetBehavior("/static", suffix="mine"),)),
    )
    entry = _tenant(tenant)
    assert entry.behavior_map["/static"] == ResolvedAsset("/static", "mine", "us-east-1", Level.TENANT)
    assert entry.behavior_map["/app"] == ResolvedWebApp("/app", "main", "{ss}", "us-east-1", Level.SYSTEM)


def test_tenant_suffix_placeholder_law() -> None:
    assert _tenant(TenantConfig(root_domain="t1.com")).ts == "{ss}"
    assert _tenant(TenantConfig(root_domain="t1.com", tenant_suffix="abc123")).ts == "abc123"


def test_tenant_entry_fields() -> None:
    entry = _tenant(TenantConfig(root_domain="t1.com"))
    payload = entry.to_dict()
    assert payload["env"] == "dev"
    assert payload["systemKey"] == "acme"
    assert payload["tenantKey"] == "t1"
    assert payload["ss"] == "x1"
    assert "subtenantKey" not in payload and "sts" not in payload
    assert entry.level is Level.TENANT


def test_subtenant_overlays_on_merged_tenant_map() -> None:
    tenant = TenantConfig(
        root_domain="t1.com",
        tenant_suffix="tt",
        behaviors=BehaviorSet(web_apps=(WebAppBehavior("/app", "tenantapp"),)),
    )
    tenant_entry = _tenant(tenant)
    subtenant = SubtenantConfig(
        subdomain="store",
        behaviors=BehaviorSet(assets=(AssetBehavior("/static"),), apis=(ApiBehavior("/api", "Public"),)),
    )
    entry = compose_subtenant(tenant_entry, subtenant, "store", {"PublicId": "abc"})
    assert entry.subtenant_key == "store"
    assert entry.sts == "{ts}"
    assert entry.ts == "tt"
    assert entry.level is Level.SUBTENANT
    assert entry.behavior_map["/static"] == ResolvedAsset("/static", "{sts}", "us-east-1", Level.SUBTENANT)
    assert entry.behavior_map["/app"].app_name == "tenantapp"
    assert entry.behavior_map["/api"].api_id == "abc"


def test_subtenant_suffix_is_used_when_set() -> None:
    tenant_entry = _tenant(TenantConfig(root_domain="t1.com"))
    entry = compose_subtenant(tenant_entry, SubtenantConfig(subdomain="s", subtenant_suffix="s9"), "s", {})
    assert entry.sts == "s9"


def test_composition_does_not_touch_parent_entry() -> None:
    tenant_entry = _tenant(TenantConfig(root_domain="t1.com"))
    before = tenant_entry.to_json()
    subtenant = SubtenantConfig(subdomain="s", behaviors=BehaviorSet(assets=(AssetBehavior("/static"),)))
    compose_subtenant(tenant_entry, subtenant, "s", {})
    assert tenant_entry.to_json() == before


@pytest.mark.parametrize("argument", ["system_behaviors", "tenant", "stack_outputs"])
def test_compose_tenant_null_arguments(argument: str) -> None:
    arguments = {
        "system_behaviors": _system_map(),
        "tenant": TenantConfig(root_domain="t1.com"),
        "stack_outputs": {},
    }
    arguments[argument] = None
    with pytest.raises(NullArgument) as excinfo:
        compose_tenant("acme", "x1", "dev", "us-east-1", tenant_key="t1", **arguments)
    assert excinfo.value.argument == argument


@pytest.mark.parametrize("argument", ["resolved_tenant", "subtenant", "stack_outputs"])
def test_compose_subtenant_null_arguments(argument: str) -> None:
    arguments = {
        "resolved_tenant": _tenant(TenantConfig(root_domain="t1.com")),
        "subtenant": SubtenantConfig(subdomain="s"),
        "stack_outputs": {},
    }
    arguments[argument] = None
    with pytest.raises(NullArgument, match=argument):
        compose_subtenant(subtenant_key="s", **arguments)


def test_resolution_failure_is_wrapped_with_tenant_key() -> None:
    tenant = TenantConfig(root_domain="t1.com", behaviors=BehaviorSet(apis=(ApiBehavior("/api", "Missing"),)))
    with pytest.raises(CompositionError) as excinfo:
        _tenant(tenant)
    assert excinfo.value.key == "t1"
    assert excinfo.value.level == "tenant"
    assert isinstance(excinfo.value.__cause__, MissingStackOutput)


def test_subtenant_failure_is_wrapped_with_qualified_key() -> None:
    tenant_entry = _tenant(TenantConfig(root_domain="t1.com"))
    subtenant = SubtenantConfig(subdomain="s", behaviors=BehaviorSet(apis=(ApiBehavior("/api", "Missing"),)))
    with pytest.raises(CompositionError, match="subtenant 't1/s'"):
        compose_subtenant(tenant_entry, subtenant, "s", {})


def test_overlay_keeps_base_order_and_appends_new_paths() -> None:
    merged = overlay({"/a": 1, "/b": 2}, {"/c": 3, "/a": 4})
    assert list(merged.items()) == [("/a", 4), ("/b", 2), ("/c", 3)]
