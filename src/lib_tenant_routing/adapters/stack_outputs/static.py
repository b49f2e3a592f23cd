"""Offline stack-output reader backed by a mapping or a JSON file.

Purpose
-------
Build documents without touching AWS: CI previews, local testing of a
configuration change, or replaying a captured ``describe_stacks`` result.
The JSON file holds ``{"<stack name>": {"<OutputKey>": "<OutputValue>"}}``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

from ...domain.errors import ConfigInvalid, StackHasNoOutputs, StackNotFound
from ...observability import log_debug, log_error


class StaticOutputReader:
    """Serve stack outputs from memory.

    Examples
    --------
    >>> reader = StaticOutputReader({"acme---service": {"PublicId": "abc"}})
    >>> reader.get_outputs("acme---service")
    {'PublicId': 'abc'}
    >>> reader.get_outputs("other")
    Traceback (most recent call last):
    ...
    lib_tenant_routing.domain.errors.StackNotFound: Stack 'other' does not exist
    """

    def __init__(self, stacks: Mapping[str, Mapping[str, str]]) -> None:
        self._stacks = {name: dict(outputs) for name, outputs in stacks.items()}

    @classmethod
    def from_json_file(cls, path: str | Path) -> StaticOutputReader:
        """Load a stack-outputs snapshot from *path*."""

        file_path = Path(path)
        try:
            data = json.loads(file_path.read_bytes())
        except FileNotFoundError as exc:
            raise ConfigInvalid(f"Stack outputs file not found: {file_path}") from exc
        except json.JSONDecodeError as exc:
            log_error("outputs_file_invalid", scope="stack", key=None, path=str(file_path), error=str(exc))
            raise ConfigInvalid(f"Invalid JSON in {file_path}: {exc}") from exc
        if not isinstance(data, Mapping) or not all(isinstance(value, Mapping) for value in data.values()):
            raise ConfigInvalid(f"File {file_path} must map stack names to output mappings")
        log_debug("outputs_file_loaded", scope="stack", key=None, path=str(file_path), stacks=len(data))
        return cls({str(name): {str(k): str(v) for k, v in outputs.items()} for name, outputs in data.items()})

    def get_outputs(self, stack_name: str) -> dict[str, str]:
        outputs = self._stacks.get(stack_name)
        if outputs is None:
            raise StackNotFound(f"Stack '{stack_name}' does not exist")
        if not outputs:
            raise StackHasNoOutputs(f"Stack '{stack_name}' has no outputs")
        return dict(outputs)
