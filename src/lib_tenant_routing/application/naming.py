"""Deterministic resource names derived from resolved entries.

Purpose
-------
Tell provisioning collaborators which S3 buckets and DynamoDB tables a domain
needs. Only behaviors declared at the entry's own level are named: a tenant
entry owns its level-1 buckets, a subtenant entry its level-2 buckets, and
system-level behaviors inherited by either are provisioned elsewhere.

Contents
    - ``ResourceName``: value object handed to provisioners.
    - ``expand_suffix``: turn ``{ss}``/``{ts}``/``{sts}`` into concrete text.
    - ``derive_asset_names`` / ``derive_table_names`` /
      ``derive_resource_names``: lazy generators, no I/O.
    - ``is_valid_bucket_name``: S3 bucket naming rules.

Templates
---------
* bucket: ``<systemKey>-<tenantKey>[-<subtenantKey>]-<assets|appName>-<suffix>``
* table:  ``<systemKey>-<tenantKey>[-<subtenantKey>]-<suffix>``
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from itertools import chain
from typing import Final, Iterator

from ..domain.errors import InvalidResourceName
from ..domain.model import Level
from ..domain.resolved import ResolvedAsset, ResolvedEntry, ResolvedWebApp

_BUCKET_PATTERN: Final = re.compile(r"^[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]$")
_BUCKET_BAD_SEQUENCE: Final = re.compile(r"\.\.|\.-|-\.")
_BUCKET_IP_ADDRESS: Final = re.compile(r"^\d{1,3}(\.\d{1,3}){3}$")
_BUCKET_RESERVED_PREFIXES: Final = ("xn--", "sthree-", "amzn-s3-demo-")
_BUCKET_RESERVED_SUFFIXES: Final = ("-s3alias", "--ol-s3", ".mrap", "--x-s3", "--table-s3")
_TABLE_PATTERN: Final = re.compile(r"^[A-Za-z0-9_.-]{3,255}$")


@dataclass(frozen=True, slots=True)
class ResourceName:
    kind: str
    name: str
    path: str | None = None


def expand_suffix(value: str, entry: ResolvedEntry) -> str:
    """Follow placeholder tokens through *entry* until a concrete suffix remains.

    Examples
    --------
    >>> entry = ResolvedEntry(env="dev", region="r", system_key="acme", tenant_key="t1",
    ...                       ss="x1", ts="{ss}", level=Level.SUBTENANT, subtenant_key="s", sts="{ts}")
    >>> expand_suffix("{sts}", entry)
    'x1'
    >>> expand_suffix("fixed", entry)
    'fixed'
    """

    fields = {
        Level.SYSTEM.placeholder: entry.ss,
        Level.TENANT.placeholder: entry.ts,
        Level.SUBTENANT.placeholder: entry.sts,
    }
    seen: set[str] = set()
    while value in fields:
        if value in seen:
            raise InvalidResourceName(f"Suffix placeholder {value} refers to itself in {_owner(entry)}")
        seen.add(value)
        replacement = fields[value]
        if replacement is None:
            raise InvalidResourceName(f"Suffix placeholder {value} cannot be expanded for {_owner(entry)}")
        value = replacement
    return value


def derive_asset_names(entry: ResolvedEntry) -> Iterator[ResourceName]:
    """Yield one bucket per asset/webapp behavior owned by *entry*'s level.

    Examples
    --------
    >>> entry = ResolvedEntry(env="dev", region="us-east-1", system_key="acme", tenant_key="t1",
    ...                       ss="x1", ts="{ss}", level=Level.TENANT,
    ...                       behavior_map={"/static": ResolvedAsset("/static", "{ts}", "us-east-1", Level.TENANT)})
    >>> [resource.name for resource in derive_asset_names(entry)]
    ['acme-t1-assets-x1']
    """

    prefix = _name_prefix(entry)
    for behavior in entry.behavior_map.values():
        if not isinstance(behavior, (ResolvedAsset, ResolvedWebApp)) or behavior.level != entry.level:
            continue
        role = "assets" if isinstance(behavior, ResolvedAsset) else behavior.app_name
        name = f"{prefix}-{role}-{expand_suffix(behavior.suffix, entry)}".lower()
        if not is_valid_bucket_name(name):
            raise InvalidResourceName(f"Bucket name '{name}' for {behavior.path} in {_owner(entry)} is invalid")
        yield ResourceName(kind="bucket", name=name, path=behavior.path)


def derive_table_names(entry: ResolvedEntry) -> Iterator[ResourceName]:
    """Yield the tenant-scoped DynamoDB table for *entry*."""

    own_suffix = entry.sts if entry.level is Level.SUBTENANT else entry.ts
    name = f"{_name_prefix(entry)}-{expand_suffix(own_suffix or entry.ss, entry)}"
    if not _TABLE_PATTERN.match(name):
        raise InvalidResourceName(f"Table name '{name}' for {_owner(entry)} is invalid")
    yield ResourceName(kind="table", name=name)


def derive_resource_names(entry: ResolvedEntry) -> Iterator[ResourceName]:
    return chain(derive_asset_names(entry), derive_table_names(entry))


def is_valid_bucket_name(name: str) -> bool:
    """Check *name* against the S3 general-purpose bucket naming rules.

    Examples
    --------
    >>> is_valid_bucket_name("acme-t1-assets-x1")
    True
    >>> is_valid_bucket_name("acme-t1..x1"), is_valid_bucket_name("xn--acme-t1")
    (False, False)
    """

    return bool(
        _BUCKET_PATTERN.match(name)
        and not _BUCKET_BAD_SEQUENCE.search(name)
        and not _BUCKET_IP_ADDRESS.match(name)
        and not name.startswith(_BUCKET_RESERVED_PREFIXES)
        and not name.endswith(_BUCKET_RESERVED_SUFFIXES)
    )


def _name_prefix(entry: ResolvedEntry) -> str:
    parts = [entry.system_key, entry.tenant_key]
    if entry.subtenant_key:
        parts.append(entry.subtenant_key)
    return "-".join(parts)


def _owner(entry: ResolvedEntry) -> str:
    if entry.subtenant_key:
        return f"subtenant '{entry.tenant_key}/{entry.subtenant_key}'"
    return f"tenant '{entry.tenant_key}'"
