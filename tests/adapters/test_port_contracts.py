"""Adapter contract tests for the application-layer ports.

Each shipped adapter (and the in-memory doubles the suite relies on) must keep
satisfying the protocols in ``application/ports.py`` so the composition root
can swap them freely.
"""

from __future__ import annotations

from lib_tenant_routing.adapters.aws.cloudformation import CloudFormationOutputReader
from lib_tenant_routing.adapters.aws.keyvaluestore import CloudFrontKvsWriter
from lib_tenant_routing.adapters.config_loader.yaml_loader import SystemConfigLoader
from lib_tenant_routing.adapters.env.overrides import EnvOverrideLoader
from lib_tenant_routing.adapters.stack_outputs.static import StaticOutputReader
from lib_tenant_routing.application import ports
from lib_tenant_routing.domain.model import SystemConfig


def test_yaml_loader_contract(tmp_path, write_config, document) -> None:
    """SystemConfigLoader must fulfil ConfigLoader and return a SystemConfig."""

    write_config(document)
    loader = SystemConfigLoader(start_dir=tmp_path, env_overrides=EnvOverrideLoader(environ={}))
    assert isinstance(loader, ports.ConfigLoader)
    assert isinstance(loader.load(), SystemConfig)


def test_stack_output_reader_contracts(reader) -> None:
    """Both readers (and the recording double) expose ``get_outputs``."""

    assert isinstance(StaticOutputReader({}), ports.StackOutputReader)
    assert isinstance(CloudFormationOutputReader(client=object()), ports.StackOutputReader)
    assert isinstance(reader, ports.StackOutputReader)


def test_kvs_writer_contracts(writer) -> None:
    assert isinstance(CloudFrontKvsWriter("arn", client=object()), ports.KvsWriter)
    assert isinstance(writer, ports.KvsWriter)


def test_resource_provisioner_contract() -> None:
    class Recorder:
        def ensure(self, names) -> None:
            self.names = list(names)

    assert isinstance(Recorder(), ports.ResourceProvisioner)
    assert not isinstance(StaticOutputReader({}), ports.ResourceProvisioner)
