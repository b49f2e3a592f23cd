"""CloudFront KeyValueStore writer.

Purpose
-------
Implement :class:`lib_tenant_routing.application.ports.KvsWriter` with the
``cloudfront-keyvaluestore`` data-plane API. Every mutation must present the
store's current ETag; the writer reads it once and then threads the ETag
returned by each ``put_key``.

The data-plane API signs with SigV4A, which needs the ``awscrt`` package
(installed through ``botocore[crt]``).
"""

from __future__ import annotations

from typing import Any

from ...observability import log_info
from .session import RETRY_CONFIG, make_session


class CloudFrontKvsWriter:
    """Write domain entries into the KVS identified by *kvs_arn*."""

    def __init__(
        self,
        kvs_arn: str,
        *,
        region: str | None = None,
        profile: str | None = None,
        client: Any = None,
    ) -> None:
        if client is None:
            client = make_session(profile, region).client(
                "cloudfront-keyvaluestore", region_name=region, config=RETRY_CONFIG
            )
        self._client = client
        self._kvs_arn = kvs_arn
        self._etag: str | None = None

    def put(self, key: str, value: str) -> None:
        if self._etag is None:
            self._etag = self._client.describe_key_value_store(KvsARN=self._kvs_arn)["ETag"]
        response = self._client.put_key(KvsARN=self._kvs_arn, Key=key, Value=value, IfMatch=self._etag)
        self._etag = response["ETag"]
        log_info("kvs_entry_put", scope="kvs", key=key, size=len(value.encode("utf-8")))
