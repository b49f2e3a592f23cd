"""Domain-level exception hierarchy.

Purpose
-------
Expose the error taxonomy shared by adapters, the resolution pipeline, the
composition root, and the CLI. The hierarchy lives in the domain layer so
outer layers can depend on it without the domain depending on them.

Contents
--------
* :class:`TenantRoutingError` – umbrella base class.
* :class:`ConfigNotFound` / :class:`ConfigInvalid` – system document problems.
* :class:`UnknownTenant` / :class:`UnknownSubtenant` – lookup failures that
  carry the known keys for diagnostics.
* :class:`ResolutionError` / :class:`MissingStackOutput` – behavior
  resolution failures.
* :class:`StackNotFound` / :class:`StackHasNoOutputs` – stack-output reader
  failures.
* :class:`NullArgument` – a required collaborator input was not supplied.
* :class:`CompositionError` – wraps a failure with the tenant/subtenant key.
* :class:`PayloadTooLarge` – a KVS value exceeds the sink limit.
* :class:`InvalidResourceName` – a derived bucket/table name is unusable.

System Role
-----------
Every failure inside one document build is fatal to that build. Callers catch
:class:`TenantRoutingError` to handle the whole family uniformly.
"""

from __future__ import annotations

from typing import Iterable


class TenantRoutingError(Exception):
    """Base type for all exceptions emitted by ``lib_tenant_routing``."""


class ConfigNotFound(TenantRoutingError):
    """Raised when no system configuration document can be located."""


class ConfigInvalid(TenantRoutingError):
    """Raised when the system document is malformed or misses a required field.

    Typical Sources
    ---------------
    PyYAML parse errors, non-mapping roots, missing ``SystemKey``/``Path``
    fields, and a ``Region`` that disagrees with the credential profile.
    """


class _UnknownKey(TenantRoutingError):
    """Shared shape for lookups that name the missing key and the known ones."""

    kind = "key"

    def __init__(self, key: str, known: Iterable[str] = ()) -> None:
        self.key = key
        self.known = tuple(sorted(known))
        listing = ", ".join(self.known) if self.known else "<none>"
        super().__init__(f"Unknown {self.kind} '{key}' (known: {listing})")


class UnknownTenant(_UnknownKey):
    """Raised when a tenant key is not present in ``SystemConfig.Tenants``."""

    kind = "tenant"


class UnknownSubtenant(_UnknownKey):
    """Raised when a subtenant key is not present in ``TenantConfig.SubTenants``."""

    kind = "subtenant"


class ResolutionError(TenantRoutingError):
    """Raised when a behavior set cannot be resolved against stack outputs."""


class MissingStackOutput(ResolutionError):
    """An expected key (API id, KVS ARN, ...) is absent from a stack output map."""

    def __init__(self, output_key: str, *, subject: str | None = None) -> None:
        self.output_key = output_key
        self.subject = subject
        detail = f" required by {subject}" if subject else ""
        super().__init__(f"Stack output '{output_key}'{detail} is missing")


class StackNotFound(TenantRoutingError):
    """Raised by stack-output readers when the named stack does not exist."""


class StackHasNoOutputs(TenantRoutingError):
    """Raised by stack-output readers when the stack exports nothing."""


class NullArgument(TenantRoutingError, ValueError):
    """A required input was ``None``; the message names the argument."""

    def __init__(self, argument: str) -> None:
        self.argument = argument
        super().__init__(f"Argument '{argument}' must not be None")


class CompositionError(TenantRoutingError):
    """Wraps a failure raised while composing one tenant or subtenant entry.

    The original exception is available through ``__cause__``.
    """

    def __init__(self, level: str, key: str, reason: str) -> None:
        self.level = level
        self.key = key
        super().__init__(f"Failed to compose {level} '{key}': {reason}")


class PayloadTooLarge(TenantRoutingError):
    """A serialized entry exceeds the KVS value-size limit."""

    def __init__(self, domain: str, size: int, limit: int) -> None:
        self.domain = domain
        self.size = size
        self.limit = limit
        super().__init__(f"KVS value for '{domain}' is {size} bytes (limit {limit})")


class InvalidResourceName(TenantRoutingError):
    """A derived S3 bucket or DynamoDB table name violates the service rules."""
