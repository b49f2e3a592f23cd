"""CloudFormation stack-output reader.

Purpose
-------
Implement :class:`lib_tenant_routing.application.ports.StackOutputReader` on
top of ``describe_stacks``. Retries for throttling and transient faults are
handled by botocore's adaptive retry mode configured on the client.

Error mapping
-------------
* ``ValidationError`` mentioning "does not exist" -> :class:`StackNotFound`.
* A stack without outputs -> :class:`StackHasNoOutputs`.
* Every other ``ClientError`` propagates unchanged.
"""

from __future__ import annotations

from typing import Any

from botocore.exceptions import ClientError

from ...domain.errors import StackHasNoOutputs, StackNotFound
from ...observability import log_debug
from .session import RETRY_CONFIG, make_session


class CloudFormationOutputReader:
    """Read ``OutputKey``/``OutputValue`` pairs from a deployed stack.

    Parameters
    ----------
    region / profile:
        Used to build a client when *client* is not supplied.
    client:
        Pre-built ``cloudformation`` client (tests pass a stubbed one).
    """

    def __init__(self, *, region: str | None = None, profile: str | None = None, client: Any = None) -> None:
        if client is None:
            client = make_session(profile, region).client("cloudformation", region_name=region, config=RETRY_CONFIG)
        self._client = client

    def get_outputs(self, stack_name: str) -> dict[str, str]:
        try:
            response = self._client.describe_stacks(StackName=stack_name)
        except ClientError as exc:
            error = exc.response.get("Error", {})
            if error.get("Code") == "ValidationError" and "does not exist" in error.get("Message", ""):
                raise StackNotFound(f"Stack '{stack_name}' does not exist") from exc
            raise
        stacks = response.get("Stacks") or []
        if not stacks:
            raise StackNotFound(f"Stack '{stack_name}' does not exist")
        outputs = stacks[0].get("Outputs") or []
        if not outputs:
            raise StackHasNoOutputs(f"Stack '{stack_name}' has no outputs")
        log_debug("stack_outputs_read", scope="stack", key=stack_name, count=len(outputs))
        return {output["OutputKey"]: output["OutputValue"] for output in outputs}
