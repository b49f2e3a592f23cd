"""YAML system configuration loader.

Purpose
-------
Implement the :class:`lib_tenant_routing.application.ports.ConfigLoader`
protocol: find ``systemconfig.yaml`` by walking up from a start directory,
parse it with ``yaml.safe_load``, apply environment overrides, and hand the
mapping to :meth:`SystemConfig.from_mapping` for validation.

Contents
--------
* :data:`CONFIG_FILENAME` – the fixed document name.
* :func:`find_config_file` – upward search.
* :class:`SystemConfigLoader` – the loader itself.

System Role
-----------
Called once per run by :func:`lib_tenant_routing.core.load_run_context`. The
resulting :class:`SystemConfig` is immutable for the rest of the run.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Final, Mapping

import yaml

from ...domain.errors import ConfigInvalid, ConfigNotFound
from ...domain.model import SystemConfig
from ...observability import log_debug, log_error, log_info
from ..env.overrides import EnvOverrideLoader, apply_overrides

CONFIG_FILENAME: Final[str] = "systemconfig.yaml"


def find_config_file(start_dir: str | Path | None = None, *, filename: str = CONFIG_FILENAME) -> Path:
    """Return the first *filename* found in *start_dir* or one of its parents.

    Raises
    ------
    ConfigNotFound
        When the search reaches the filesystem root without a match.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> root = Path(tmp.name)
    >>> _ = (root / CONFIG_FILENAME).write_text("SystemKey: acme", encoding="utf-8")
    >>> nested = root / "a" / "b"
    >>> nested.mkdir(parents=True)
    >>> find_config_file(nested) == (root / CONFIG_FILENAME).resolve()
    True
    >>> tmp.cleanup()
    """

    current = Path(start_dir) if start_dir is not None else Path.cwd()
    current = current.resolve()
    for parent in [current, *current.parents]:
        candidate = parent / filename
        if candidate.is_file():
            log_debug("config_file_found", scope="system", key=None, path=str(candidate))
            return candidate
    raise ConfigNotFound(f"No {filename} found in {current} or any parent directory")


class SystemConfigLoader:
    """Load the system configuration document from disk.

    Parameters
    ----------
    path:
        Explicit document path; skips the upward search when given.
    start_dir:
        Directory that seeds the upward search (defaults to the CWD).
    env_overrides:
        Loader for ``TENANT_ROUTING_*`` overrides; defaults to one reading
        :data:`os.environ`.
    """

    def __init__(
        self,
        *,
        path: str | Path | None = None,
        start_dir: str | Path | None = None,
        env_overrides: EnvOverrideLoader | None = None,
        filename: str = CONFIG_FILENAME,
    ) -> None:
        self._path = Path(path) if path is not None else None
        self._start_dir = start_dir
        self._env_overrides = env_overrides or EnvOverrideLoader()
        self._filename = filename
        self.last_loaded_path: str | None = None

    def load(self) -> SystemConfig:
        """Return the validated :class:`SystemConfig`.

        Raises
        ------
        ConfigNotFound
            When no document exists at the explicit path or along the search.
        ConfigInvalid
            When the YAML is malformed or a required field is missing.
        """

        path = self._locate()
        document = self._parse(path)
        overrides = self._env_overrides.load()
        if overrides:
            log_info("env_overrides_applied", scope="system", key=None, fields=sorted(overrides))
        try:
            config = SystemConfig.from_mapping(apply_overrides(document, overrides))
        except ConfigInvalid as exc:
            log_error("config_invalid", scope="system", key=None, path=str(path), error=str(exc))
            raise ConfigInvalid(f"{path}: {exc}") from exc
        self.last_loaded_path = str(path)
        log_info(
            "config_loaded",
            scope="system",
            key=config.system_key,
            path=str(path),
            tenants=len(config.tenants),
        )
        return config

    def _locate(self) -> Path:
        if self._path is None:
            return find_config_file(self._start_dir, filename=self._filename)
        if not self._path.is_file():
            raise ConfigNotFound(f"Configuration file not found: {self._path}")
        return self._path

    @staticmethod
    def _parse(path: Path) -> Mapping[str, Any]:
        try:
            data = yaml.safe_load(path.read_bytes())
        except yaml.YAMLError as exc:
            log_error("config_file_invalid", scope="system", key=None, path=str(path), error=str(exc))
            raise ConfigInvalid(f"Invalid YAML in {path}: {exc}") from exc
        if data is None:
            raise ConfigInvalid(f"{path} is empty")
        if not isinstance(data, Mapping):
            raise ConfigInvalid(f"File {path} did not produce a mapping")
        return data
