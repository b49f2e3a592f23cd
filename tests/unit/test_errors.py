"""Unit tests for the ``domain.errors`` hierarchy."""

from __future__ import annotations

import pytest

from lib_tenant_routing import (
    CompositionError,
    ConfigInvalid,
    ConfigNotFound,
    InvalidResourceName,
    MissingStackOutput,
    NullArgument,
    PayloadTooLarge,
    ResolutionError,
    StackHasNoOutputs,
    StackNotFound,
    TenantRoutingError,
    UnknownSubtenant,
    UnknownTenant,
)


@pytest.mark.parametrize(
    "error_cls",
    [
        CompositionError,
        ConfigInvalid,
        ConfigNotFound,
        InvalidResourceName,
        MissingStackOutput,
        NullArgument,
        PayloadTooLarge,
        ResolutionError,
        StackHasNoOutputs,
        StackNotFound,
        UnknownSubtenant,
        UnknownTenant,
    ],
)
def test_errors_share_base_class(error_cls) -> None:
    """Every public error should be catchable through ``TenantRoutingError``."""

    assert issubclass(error_cls, TenantRoutingError)


def test_unknown_tenant_lists_known_keys_sorted() -> None:
    error = UnknownTenant("zz", ["t2", "t1"])
    assert error.key == "zz"
    assert error.known == ("t1", "t2")
    assert str(error) == "Unknown tenant 'zz' (known: t1, t2)"


def test_unknown_subtenant_without_known_keys() -> None:
    assert str(UnknownSubtenant("s")) == "Unknown subtenant 's' (known: <none>)"


def test_missing_stack_output_is_a_resolution_error() -> None:
    error = MissingStackOutput("PublicId", subject="API 'Public' at /api")
    assert isinstance(error, ResolutionError)
    assert str(error) == "Stack output 'PublicId' required by API 'Public' at /api is missing"
    assert str(MissingStackOutput("KeyValueStoreArn")) == "Stack output 'KeyValueStoreArn' is missing"


def test_null_argument_is_also_value_error() -> None:
    error = NullArgument("tenant")
    assert isinstance(error, ValueError)
    assert error.argument == "tenant"
    assert str(error) == "Argument 'tenant' must not be None"


def test_composition_error_and_payload_messages() -> None:
    composition = CompositionError("subtenant", "t1/s", "boom")
    assert (composition.level, composition.key) == ("subtenant", "t1/s")
    assert str(composition) == "Failed to compose subtenant 't1/s': boom"
    payload = PayloadTooLarge("t1.com", 2048, 1024)
    assert (payload.domain, payload.size, payload.limit) == ("t1.com", 2048, 1024)
    assert "2048 bytes" in str(payload)
