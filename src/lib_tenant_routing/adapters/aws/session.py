"""boto3 session helpers shared by the AWS adapters."""

from __future__ import annotations

from typing import Final

import boto3
from botocore.config import Config
from botocore.exceptions import ProfileNotFound

from ...domain.errors import ConfigInvalid

RETRY_CONFIG: Final[Config] = Config(retries={"max_attempts": 5, "mode": "adaptive"})
"""Client configuration used for control-plane reads; retries live here, not in the core."""


def make_session(profile: str | None = None, region: str | None = None) -> boto3.Session:
    """Return a session for *profile* (``None`` or ``"default"`` uses the default chain)."""

    profile_name = None if profile in (None, "", "default") else profile
    try:
        return boto3.Session(profile_name=profile_name, region_name=region)
    except ProfileNotFound as exc:
        raise ConfigInvalid(f"AWS profile '{profile}' is not configured") from exc


def profile_region(profile: str) -> str | None:
    """Return the region configured for *profile*, or ``None`` if it has none."""

    return make_session(profile).region_name
