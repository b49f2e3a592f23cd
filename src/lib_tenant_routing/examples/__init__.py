"""Example scaffolding utilities for ``lib_tenant_routing``."""

from .generate import OUTPUTS_FILENAME, ExampleSpec, generate_examples

__all__ = [
    "ExampleSpec",
    "OUTPUTS_FILENAME",
    "generate_examples",
]
