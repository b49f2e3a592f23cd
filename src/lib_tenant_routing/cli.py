"""CLI adapter for ``lib_tenant_routing`` built on ``lib_cli_exit_tools``.

Purpose
-------
Let operators and deployment pipelines preview, inspect, and publish the
per-domain KVS entries of a tenant without writing Python.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – ``-h`` alias shared by every command.
* :func:`cli` – root command wiring traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – distribution metadata.
* :func:`cli_document` / :func:`cli_system_document` – print documents.
* :func:`cli_asset_names` – bucket/table names per domain.
* :func:`cli_publish` – write entries to the CloudFront KVS.
* :func:`cli_generate_example` – scaffold ``systemconfig.yaml``.
* :func:`main` – console-script entry point returning the exit code.

System Role
-----------
Outermost layer: it only calls :mod:`lib_tenant_routing.core` and never reaches
into adapters except to build the offline stack-output reader.
"""

from __future__ import annotations

import json
import sys
from dataclasses import asdict
from importlib import metadata
from pathlib import Path
from typing import Any, Callable, Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .adapters.aws.session import profile_region
from .adapters.stack_outputs.static import StaticOutputReader
from .application.ports import StackOutputReader
from .application.walker import check_kvs_sizes, document_to_json
from .core import (
    build_system_document,
    build_tenant_document,
    load_run_context,
    publish_tenant_document,
    tenant_resource_names,
)
from .domain.context import RunContext
from .examples import generate_examples as _generate_examples

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000


def _resolve_version() -> str:
    """Return the installed package version, ``"0.0.0"`` for source checkouts."""

    try:
        return metadata.version("lib_tenant_routing")
    except metadata.PackageNotFoundError:
        return "0.0.0"


def _config_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the options every configuration-reading command shares."""

    func = click.option(
        "--skip-profile-check",
        is_flag=True,
        default=False,
        help="Do not compare Region with the region of the AWS profile",
    )(func)
    func = click.option(
        "--start-dir",
        type=click.Path(path_type=Path, exists=True, file_okay=False, dir_okay=True),
        default=None,
        help="Directory where the upward search for systemconfig.yaml starts (defaults to CWD)",
    )(func)
    func = click.option(
        "--config",
        "config_path",
        type=click.Path(path_type=Path, exists=True, file_okay=True, dir_okay=False, readable=True),
        default=None,
        help="Explicit path to the system configuration document",
    )(func)
    return func


def _outputs_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option(
        "--outputs-file",
        type=click.Path(path_type=Path, exists=True, file_okay=True, dir_okay=False, readable=True),
        default=None,
        help="JSON snapshot of stack outputs used instead of CloudFormation",
    )(func)


@click.group(
    help="Resolve tenant routing behaviors into CloudFront KeyValueStore entries",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_tenant_routing",
    message="lib_tenant_routing version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Print the full traceback instead of a one-line error summary",
)
def cli(traceback: bool) -> None:
    """Root command; ``--traceback`` is handed to ``lib_cli_exit_tools``."""

    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Show the installed version and Python requirement."""

    try:
        meta = metadata.metadata("lib_tenant_routing")
    except metadata.PackageNotFoundError:
        click.echo("lib_tenant_routing (metadata unavailable)")
        return
    for field in ("Name", "Version", "Requires-Python", "Summary"):
        value = meta.get(field)
        if value:
            click.echo(f"{field:<16}{value}")


@cli.command("document", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("tenant")
@_config_options
@_outputs_option
@click.option("--indent", type=int, default=None, help="Pretty-print JSON output with the provided indent size")
def cli_document(
    tenant: str,
    config_path: Optional[Path],
    start_dir: Optional[Path],
    skip_profile_check: bool,
    outputs_file: Optional[Path],
    indent: Optional[int],
) -> None:
    """Print the domain-keyed document for TENANT and its subtenants.

    Fails before printing anything when an entry would not fit a KVS value.
    """

    context = _load_context(config_path, start_dir, skip_profile_check)
    document = build_tenant_document(context, tenant, _make_reader(outputs_file))
    check_kvs_sizes(document)
    click.echo(document_to_json(document, indent=indent))


@cli.command("system-document", context_settings=CLICK_CONTEXT_SETTINGS)
@_config_options
@_outputs_option
@click.option("--indent", type=int, default=None, help="Pretty-print JSON output with the provided indent size")
def cli_system_document(
    config_path: Optional[Path],
    start_dir: Optional[Path],
    skip_profile_check: bool,
    outputs_file: Optional[Path],
    indent: Optional[int],
) -> None:
    """Print the document covering every tenant of the system."""

    context = _load_context(config_path, start_dir, skip_profile_check)
    document = build_system_document(context, _make_reader(outputs_file))
    check_kvs_sizes(document)
    click.echo(document_to_json(document, indent=indent))


@cli.command("asset-names", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("tenant")
@_config_options
@_outputs_option
def cli_asset_names(
    tenant: str,
    config_path: Optional[Path],
    start_dir: Optional[Path],
    skip_profile_check: bool,
    outputs_file: Optional[Path],
) -> None:
    """Print the S3 buckets and DynamoDB tables each domain of TENANT needs."""

    context = _load_context(config_path, start_dir, skip_profile_check)
    names = tenant_resource_names(context, tenant, _make_reader(outputs_file))
    payload = {domain: [asdict(resource) for resource in resources] for domain, resources in names.items()}
    click.echo(json.dumps(payload, indent=2))


@cli.command("publish", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("tenant")
@_config_options
@_outputs_option
@click.option(
    "--dry-run/--no-dry-run",
    default=False,
    help="Compose and size-check entries without writing to the KVS",
    show_default=True,
)
def cli_publish(
    tenant: str,
    config_path: Optional[Path],
    start_dir: Optional[Path],
    skip_profile_check: bool,
    outputs_file: Optional[Path],
    dry_run: bool,
) -> None:
    """Write every domain entry of TENANT into the service KeyValueStore."""

    context = _load_context(config_path, start_dir, skip_profile_check)
    domains = publish_tenant_document(context, tenant, reader=_make_reader(outputs_file), dry_run=dry_run)
    click.echo(json.dumps(domains, indent=2))


@cli.command("generate-example", context_settings=CLICK_CONTEXT_SETTINGS)
@click.option(
    "--destination",
    type=click.Path(path_type=Path, file_okay=False, dir_okay=True, resolve_path=True),
    required=True,
    help="Directory that will receive systemconfig.yaml and stack-outputs.json",
)
@click.option("--system-key", default="acme", show_default=True, help="SystemKey written into the example")
@click.option("--region", default="us-east-1", show_default=True, help="Region written into the example")
@click.option(
    "--force/--no-force",
    default=False,
    help="Replace example files that already exist",
    show_default=True,
)
def cli_generate_example(destination: Path, system_key: str, region: str, force: bool) -> None:
    """Generate an example system configuration under DESTINATION."""

    created = _generate_examples(destination, system_key=system_key, region=region, force=force)
    click.echo(json.dumps(list(map(str, created)), indent=2))


def _load_context(config_path: Optional[Path], start_dir: Optional[Path], skip_profile_check: bool) -> RunContext:
    return load_run_context(
        config_path=config_path,
        start_dir=start_dir,
        region_lookup=None if skip_profile_check else profile_region,
    )


def _make_reader(outputs_file: Optional[Path]) -> Optional[StackOutputReader]:
    """Return the offline reader for *outputs_file*; ``None`` selects CloudFormation."""

    if outputs_file is None:
        return None
    return StaticOutputReader.from_json_file(outputs_file)


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Run the command group and translate any escaping exception into an exit code.

    The ``--traceback`` flag mutates ``lib_cli_exit_tools.config``; with
    *restore_traceback* the previous settings are put back afterwards.
    """

    config = lib_cli_exit_tools.config
    saved = (getattr(config, "traceback", False), getattr(config, "traceback_force_color", False))
    args = None if argv is None else list(argv)
    try:
        return lib_cli_exit_tools.run_cli(cli, argv=args, prog_name="lib_tenant_routing")
    except BaseException as exc:  # noqa: BLE001 - reported by lib_cli_exit_tools
        limit = _TRACEBACK_VERBOSE_LIMIT if config.traceback else _TRACEBACK_SUMMARY_LIMIT
        lib_cli_exit_tools.print_exception_message(trace_back=config.traceback, length_limit=limit)
        return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            config.traceback, config.traceback_force_color = saved


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main(sys.argv[1:]))
