"""Shared fixtures: configuration builders and in-memory collaborators."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Callable, Mapping

import pytest
import yaml

from lib_tenant_routing.domain.context import RunContext
from lib_tenant_routing.domain.errors import StackNotFound
from lib_tenant_routing.domain.model import SystemConfig

SERVICE_STACK = "acme---service"

BASE_DOCUMENT: dict[str, Any] = {
    "SystemKey": "acme",
    "SystemSuffix": "x1",
    "Environment": "dev",
    "Region": "us-east-1",
    "Profile": "acme-dev",
    "Behaviors": {"Assets": [{"Path": "/static"}]},
    "Tenants": {
        "t1": {
            "RootDomain": "t1.com",
            "Behaviors": {"Apis": [{"Path": "/api", "ApiName": "Public"}]},
            "SubTenants": {
                "store": {
                    "Subdomain": "store",
                    "Behaviors": {"WebApps": [{"Path": "/shop", "AppName": "storeapp"}]},
                },
            },
        },
        "t2": {"RootDomain": "t2.io", "TenantSuffix": "abc123"},
    },
}

BASE_OUTPUTS = {"PublicId": "abc", "KeyValueStoreArn": "arn:aws:cloudfront::123456789012:key-value-store/acme"}


class RecordingReader:
    """Stack-output reader that serves a fixed snapshot and counts calls."""

    def __init__(self, stacks: Mapping[str, Mapping[str, str]]) -> None:
        self.stacks = {name: dict(outputs) for name, outputs in stacks.items()}
        self.calls: list[str] = []

    def get_outputs(self, stack_name: str) -> dict[str, str]:
        self.calls.append(stack_name)
        if stack_name not in self.stacks:
            raise StackNotFound(stack_name)
        return dict(self.stacks[stack_name])


class RecordingWriter:
    """KVS writer that keeps every put in order."""

    def __init__(self) -> None:
        self.puts: list[tuple[str, str]] = []

    def put(self, key: str, value: str) -> None:
        self.puts.append((key, value))


@pytest.fixture()
def document() -> dict[str, Any]:
    """A fresh, mutable copy of the base system document."""

    return copy.deepcopy(BASE_DOCUMENT)


@pytest.fixture()
def make_context() -> Callable[[Mapping[str, Any]], RunContext]:
    def factory(data: Mapping[str, Any]) -> RunContext:
        return RunContext.for_config(SystemConfig.from_mapping(data))

    return factory


@pytest.fixture()
def context(document: dict[str, Any], make_context) -> RunContext:
    return make_context(document)


@pytest.fixture()
def reader() -> RecordingReader:
    return RecordingReader({SERVICE_STACK: BASE_OUTPUTS})


@pytest.fixture()
def writer() -> RecordingWriter:
    return RecordingWriter()


@pytest.fixture()
def write_config(tmp_path: Path) -> Callable[[Mapping[str, Any]], Path]:
    """Write a mapping as ``systemconfig.yaml`` into ``tmp_path``."""

    def factory(data: Mapping[str, Any], directory: Path | None = None) -> Path:
        target = (directory or tmp_path) / "systemconfig.yaml"
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(yaml.safe_dump(dict(data), sort_keys=False), encoding="utf-8")
        return target

    return factory


@pytest.fixture()
def make_reader() -> type[RecordingReader]:
    return RecordingReader
