"""Example configuration scaffolding.

Purpose
-------
Write a ready-to-edit ``systemconfig.yaml`` and a matching stack-outputs
snapshot so a new system can be previewed offline
(``lib_tenant_routing document <tenant> --outputs-file stack-outputs.json``).

Contents
    - ``ExampleSpec``: one file to write, relative to the destination.
    - ``generate_examples``: public entry point.
    - ``_build_specs`` / ``_should_write``: helpers.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from ..adapters.config_loader.yaml_loader import CONFIG_FILENAME

OUTPUTS_FILENAME = "stack-outputs.json"


@dataclass(slots=True)
class ExampleSpec:
    """A single example file: path relative to the destination plus UTF-8 content."""

    relative_path: Path
    content: str


def generate_examples(
    destination: str | Path,
    *,
    system_key: str = "acme",
    region: str = "us-east-1",
    force: bool = False,
) -> list[Path]:
    """Write the example files under *destination*; existing files are kept unless *force*.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> sorted(path.name for path in generate_examples(tmp.name))
    ['stack-outputs.json', 'systemconfig.yaml']
    >>> generate_examples(tmp.name)
    []
    >>> tmp.cleanup()
    """

    dest = Path(destination)
    written: list[Path] = []
    for spec in _build_specs(system_key=system_key, region=region):
        path = dest / spec.relative_path
        if not _should_write(path, force):
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(spec.content, encoding="utf-8")
        written.append(path)
    return written


def _should_write(path: Path, force: bool) -> bool:
    return force or not path.exists()


def _build_specs(*, system_key: str, region: str) -> Iterator[ExampleSpec]:
    yield ExampleSpec(
        Path(CONFIG_FILENAME),
        f"""# System configuration read by lib_tenant_routing.
# Behaviors declared at a deeper level override the same Path inherited from above.
SystemKey: {system_key}
SystemSuffix: x1
Environment: dev
Region: {region}
Profile: default
Behaviors:
  Assets:
    - Path: /static
  Apis:
    - Path: /api
      ApiName: Public
Tenants:
  tenant1:
    RootDomain: tenant1.example.com
    HostedZoneId: Z0000000000000000000
    AcmCertificateArn: arn:aws:acm:us-east-1:123456789012:certificate/00000000-0000-0000-0000-000000000000
    Behaviors:
      WebApps:
        - Path: /store
          AppName: storeapp
    SubTenants:
      shop:
        Subdomain: shop
        SubTenantSuffix: s1
        Behaviors:
          Assets:
            - Path: /images
""",
    )
    outputs = {
        f"{system_key}---service": {
            "PublicId": "a1b2c3d4e5",
            "KeyValueStoreArn": f"arn:aws:cloudfront::123456789012:key-value-store/{system_key}-kvs",
        }
    }
    yield ExampleSpec(Path(OUTPUTS_FILENAME), json.dumps(outputs, indent=2) + "\n")
