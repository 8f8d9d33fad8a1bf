"""Object storage backend selector.

Provides a unified, read-only interface over the storefront's media namespace
(menu documents, item images, the news feed) using either a local filesystem or
an S3-backed implementation. The backend is chosen via the ``storage_backend``
setting (``local`` by default).
"""

from __future__ import annotations

from typing import Protocol

from storefront.config import Settings


class StorageError(Exception):
    """The storage namespace could not be reached or read."""


class ObjectNotFoundError(StorageError):
    """The requested object does not exist."""


class ObjectStorage(Protocol):
    """Minimal protocol implemented by storage backends."""

    async def list(self, prefix: str) -> list[str]:
        """Return the names of the objects directly under ``prefix``."""

    async def read(self, key: str) -> bytes:
        """Return raw bytes for ``key``."""

    async def url(self, key: str) -> str:
        """Return a download URL for ``key``, raising if it does not exist."""


def build_storage(settings: Settings) -> ObjectStorage:
    if settings.storage_backend.lower() == "s3":
        from .s3_backend import S3Backend

        return S3Backend(
            bucket=settings.s3_bucket,
            endpoint=settings.s3_endpoint,
            region=settings.s3_region,
            access_key=settings.s3_access_key,
            secret_key=settings.s3_secret_key,
            url_expiry=settings.s3_url_expiry,
        )

    from .local_backend import LocalBackend

    return LocalBackend(settings.media_dir, base_url=settings.media_base_url)


__all__ = [
    "ObjectNotFoundError",
    "ObjectStorage",
    "StorageError",
    "build_storage",
]
