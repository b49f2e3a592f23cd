"""AWS adapter tests.

CloudFormation calls go through :class:`botocore.stub.Stubber`; the KVS writer
is driven by a recording client so the ETag threading can be asserted
directly. No request ever leaves the process.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import boto3
import pytest
from botocore.exceptions import ClientError
from botocore.stub import Stubber

from lib_tenant_routing.adapters.aws.cloudformation import CloudFormationOutputReader
from lib_tenant_routing.adapters.aws.keyvaluestore import CloudFrontKvsWriter
from lib_tenant_routing.adapters.aws.session import make_session, profile_region
from lib_tenant_routing.domain.errors import ConfigInvalid, StackHasNoOutputs, StackNotFound

KVS_ARN = "arn:aws:cloudfront::123456789012:key-value-store/acme"


@pytest.fixture(autouse=True)
def isolated_aws_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point botocore at an empty sandbox so local profiles never leak in."""

    config_file = tmp_path / "aws-config"
    config_file.write_text("[profile ops]\nregion = eu-west-1\n\n[profile bare]\noutput = json\n", encoding="utf-8")
    monkeypatch.setenv("AWS_CONFIG_FILE", str(config_file))
    monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(tmp_path / "aws-credentials"))
    for name in ("AWS_PROFILE", "AWS_DEFAULT_PROFILE", "AWS_REGION", "AWS_DEFAULT_REGION"):
        monkeypatch.delenv(name, raising=False)
    return config_file


@pytest.fixture()
def cloudformation():
    client = boto3.client(
        "cloudformation",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    with Stubber(client) as stubber:
        yield client, stubber
        stubber.assert_no_pending_responses()


def _stack(outputs: list[dict[str, str]]) -> dict[str, Any]:
    return {
        "Stacks": [
            {
                "StackName": "acme---service",
                "CreationTime": datetime(2024, 1, 1, tzinfo=timezone.utc),
                "StackStatus": "CREATE_COMPLETE",
                "Outputs": outputs,
            }
        ]
    }


def test_reader_maps_outputs(cloudformation) -> None:
    client, stubber = cloudformation
    stubber.add_response(
        "describe_stacks",
        _stack([{"OutputKey": "PublicId", "OutputValue": "abc"}, {"OutputKey": "AdminId", "OutputValue": "def"}]),
        {"StackName": "acme---service"},
    )
    reader = CloudFormationOutputReader(client=client)
    assert reader.get_outputs("acme---service") == {"PublicId": "abc", "AdminId": "def"}


def test_reader_translates_missing_stack(cloudformation) -> None:
    client, stubber = cloudformation
    stubber.add_client_error(
        "describe_stacks",
        service_error_code="ValidationError",
        service_message="Stack with id acme---service does not exist",
        http_status_code=400,
        expected_params={"StackName": "acme---service"},
    )
    with pytest.raises(StackNotFound) as excinfo:
        CloudFormationOutputReader(client=client).get_outputs("acme---service")
    assert isinstance(excinfo.value.__cause__, ClientError)


def test_reader_propagates_other_client_errors(cloudformation) -> None:
    client, stubber = cloudformation
    stubber.add_client_error("describe_stacks", service_error_code="AccessDenied", http_status_code=403)
    with pytest.raises(ClientError):
        CloudFormationOutputReader(client=client).get_outputs("acme---service")


def test_reader_reports_stack_without_outputs(cloudformation) -> None:
    client, stubber = cloudformation
    stubber.add_response("describe_stacks", _stack([]), {"StackName": "acme---service"})
    with pytest.raises(StackHasNoOutputs):
        CloudFormationOutputReader(client=client).get_outputs("acme---service")


class RecordingKvsClient:
    def __init__(self) -> None:
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self._version = 0

    def describe_key_value_store(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("describe_key_value_store", kwargs))
        return {"ETag": "etag-0"}

    def put_key(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("put_key", kwargs))
        self._version += 1
        return {"ETag": f"etag-{self._version}"}


def test_kvs_writer_threads_etags() -> None:
    client = RecordingKvsClient()
    writer = CloudFrontKvsWriter(KVS_ARN, client=client)
    writer.put("t1.com", "{}")
    writer.put("store.t1.com", '{"a":1}')

    assert [name for name, _ in client.calls] == ["describe_key_value_store", "put_key", "put_key"]
    assert client.calls[0][1] == {"KvsARN": KVS_ARN}
    assert client.calls[1][1] == {"KvsARN": KVS_ARN, "Key": "t1.com", "Value": "{}", "IfMatch": "etag-0"}
    assert client.calls[2][1]["IfMatch"] == "etag-1"


def test_make_session_uses_default_chain_for_default_profile() -> None:
    session = make_session("default", "us-east-1")
    assert session.profile_name == "default"
    assert session.region_name == "us-east-1"


def test_make_session_rejects_unknown_profile() -> None:
    with pytest.raises(ConfigInvalid, match="ghost"):
        make_session("ghost")


def test_profile_region_reads_profile_configuration() -> None:
    assert profile_region("ops") == "eu-west-1"
    assert profile_region("bare") is None
