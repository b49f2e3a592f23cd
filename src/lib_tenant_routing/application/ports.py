"""Application-layer ports describing collaborator responsibilities.

Purpose
-------
Define the structural contracts the composition root relies on so the
resolution pipeline never depends on a concrete transport (filesystem, AWS
control plane).

Contents
--------
* :class:`ConfigLoader` – produces the :class:`SystemConfig` for a run.
* :class:`StackOutputReader` – reads CloudFormation stack outputs.
* :class:`KvsWriter` – stores one KVS key/value pair.
* :class:`ResourceProvisioner` – ensures buckets/tables exist.

System Role
-----------
Adapters under :mod:`lib_tenant_routing.adapters` implement these protocols;
tests substitute in-memory fakes.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Protocol, runtime_checkable

from ..domain.model import SystemConfig
from .naming import ResourceName


@runtime_checkable
class ConfigLoader(Protocol):
    """Locate, parse, and validate the system configuration document."""

    def load(self) -> SystemConfig:
        """Return the configuration or raise ``ConfigNotFound``/``ConfigInvalid``."""


@runtime_checkable
class StackOutputReader(Protocol):
    """Read the outputs exported by a deployed stack.

    Retry and timeout policy for the control-plane call belongs to the
    implementation, not to its callers.
    """

    def get_outputs(self, stack_name: str) -> Mapping[str, str]:
        """Return ``OutputKey -> OutputValue`` or raise ``StackNotFound``/``StackHasNoOutputs``."""


@runtime_checkable
class KvsWriter(Protocol):
    """Persist a ``(domain, json-value)`` pair into an edge key/value store."""

    def put(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous value."""


@runtime_checkable
class ResourceProvisioner(Protocol):
    """Ensure the named buckets and tables exist before entries are published."""

    def ensure(self, names: Iterable[ResourceName]) -> None:
        """Create missing resources; existing ones are left untouched."""
