"""S3 storage backend using presigned download URLs."""

from __future__ import annotations

import asyncio

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from . import ObjectNotFoundError, StorageError

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


class S3Backend:
    """List and read objects from ``bucket`` and hand out presigned GET URLs."""

    def __init__(
        self,
        bucket: str,
        endpoint: str | None = None,
        region: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        url_expiry: int = 3600,
        client=None,
    ) -> None:
        self.bucket = bucket
        self.url_expiry = url_expiry
        self.client = client or boto3.client(
            "s3",
            endpoint_url=endpoint,
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
        )

    def _raise(self, key: str, exc: Exception) -> None:
        if isinstance(exc, ClientError):
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in _NOT_FOUND_CODES:
                raise ObjectNotFoundError(key) from exc
        raise StorageError(f"S3 request for {key!r} failed: {exc}") from exc

    def _list(self, prefix: str) -> list[str]:
        folder = prefix.strip("/") + "/"
        names: list[str] = []
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=folder, Delimiter="/"):
                for obj in page.get("Contents", []):
                    name = obj["Key"][len(folder):]
                    if name:
                        names.append(name)
        except (BotoCoreError, ClientError) as exc:
            self._raise(folder, exc)
        return sorted(names)

    def _read(self, key: str) -> bytes:
        try:
            obj = self.client.get_object(Bucket=self.bucket, Key=key)
            return obj["Body"].read()
        except (BotoCoreError, ClientError) as exc:
            self._raise(key, exc)

    def _url(self, key: str) -> str:
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            self._raise(key, exc)
        return self.client.generate_presigned_url(
            "get_object",
            Params={
                "Bucket": self.bucket,
                "Key": key,
                "ResponseCacheControl": "public, max-age=86400",
            },
            ExpiresIn=self.url_expiry,
        )

    async def list(self, prefix: str) -> list[str]:
        return await asyncio.to_thread(self._list, prefix)

    async def read(self, key: str) -> bytes:
        return await asyncio.to_thread(self._read, key)

    async def url(self, key: str) -> str:
        return await asyncio.to_thread(self._url, key)
