"""Immutable run context threaded through every resolution call."""

from __future__ import annotations

from dataclasses import dataclass

from .model import SystemConfig


@dataclass(frozen=True, slots=True)
class RunContext:
    """The loaded system configuration plus the credential selection it was checked against.

    Built once by :func:`lib_tenant_routing.core.load_run_context`; nothing in
    the package keeps profile or region in module state.

    Examples
    --------
    >>> from lib_tenant_routing.domain.model import SystemConfig
    >>> cfg = SystemConfig(system_key="acme", system_suffix="x1", environment="dev", region="us-east-1")
    >>> ctx = RunContext.for_config(cfg)
    >>> ctx.region, ctx.profile, ctx.service_stack_name
    ('us-east-1', 'default', 'acme---service')
    """

    config: SystemConfig
    region: str
    profile: str
    account: str | None = None

    @classmethod
    def for_config(cls, config: SystemConfig, *, account: str | None = None) -> RunContext:
        return cls(config=config, region=config.region, profile=config.profile, account=account)

    @property
    def service_stack_name(self) -> str:
        return self.config.service_stack_name
