"""Environment variable overrides for scalar system fields.

Purpose
-------
Let CI jobs and operators retarget a run (``Environment``, ``Region``,
``Profile``, ``SystemSuffix``) without editing ``systemconfig.yaml``.

Key behaviours
--------------
* Only variables carrying the prefix (``TENANT_ROUTING_`` by default) are read.
* The remainder is matched case-insensitively against
  :data:`OVERRIDABLE_FIELDS`; unknown names are ignored with a debug event.
* Values stay strings; the tree (tenants, behaviors) cannot be overridden.
"""

from __future__ import annotations

import os
from typing import Any, Final, Mapping

from ...observability import log_debug

OVERRIDABLE_FIELDS: Final[tuple[str, ...]] = ("SystemSuffix", "Environment", "Region", "Profile")


def default_env_prefix(slug: str = "tenant-routing") -> str:
    """Return the canonical environment prefix for *slug*.

    Examples
    --------
    >>> default_env_prefix()
    'TENANT_ROUTING'
    >>> default_env_prefix('acme-deploy')
    'ACME_DEPLOY'
    """

    return slug.replace("-", "_").upper()


class EnvOverrideLoader:
    """Collect system-field overrides from the environment."""

    def __init__(self, *, environ: Mapping[str, str] | None = None, prefix: str | None = None) -> None:
        """Initialise the loader with a specific ``environ`` mapping for testability."""

        self._environ = os.environ if environ is None else environ
        self._prefix = prefix if prefix is not None else default_env_prefix()

    def load(self) -> dict[str, str]:
        """Return ``{FieldName: value}`` for every recognised override.

        Examples
        --------
        >>> loader = EnvOverrideLoader(environ={"TENANT_ROUTING_ENVIRONMENT": "prod", "TENANT_ROUTING_FOO": "x"})
        >>> loader.load()
        {'Environment': 'prod'}
        """

        prefix = f"{self._prefix}_" if self._prefix and not self._prefix.endswith("_") else self._prefix
        collected: dict[str, str] = {}
        for key, value in self._environ.items():
            if not key.startswith(prefix):
                continue
            name = _resolve_field(key[len(prefix) :])
            if name is None:
                log_debug("env_override_ignored", scope="system", key=key)
                continue
            collected[name] = value
        return collected


def apply_overrides(document: Mapping[str, Any], overrides: Mapping[str, str]) -> dict[str, Any]:
    """Return a copy of *document* with top-level *overrides* applied.

    Examples
    --------
    >>> apply_overrides({"Region": "us-east-1", "SystemKey": "acme"}, {"Region": "eu-west-1"})
    {'Region': 'eu-west-1', 'SystemKey': 'acme'}
    """

    updated = dict(document)
    updated.update(overrides)
    return updated


def _resolve_field(name: str) -> str | None:
    lowered = name.lower()
    for field in OVERRIDABLE_FIELDS:
        if field.lower() == lowered:
            return field
    return None
