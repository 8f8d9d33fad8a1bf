"""Filesystem-based storage backend."""

from __future__ import annotations

import asyncio
from pathlib import Path
from urllib.parse import quote

from . import ObjectNotFoundError, StorageError


class LocalBackend:
    """Read objects under ``base_dir`` and serve them from ``base_url``."""

    def __init__(self, base_dir: str | Path, base_url: str = "/media") -> None:
        self.base_dir = Path(base_dir)
        self.base_url = base_url.rstrip("/")

    def _path(self, key: str) -> Path:
        path = (self.base_dir / key).resolve()
        if self.base_dir.resolve() not in path.parents:
            raise ObjectNotFoundError(key)
        return path

    def _list(self, prefix: str) -> list[str]:
        if not self.base_dir.is_dir():
            raise StorageError(f"Media directory {self.base_dir} is not available")
        folder = self.base_dir / prefix.strip("/")
        if not folder.is_dir():
            return []
        return sorted(p.name for p in folder.iterdir() if p.is_file())

    def _read(self, key: str) -> bytes:
        path = self._path(key)
        if not path.is_file():
            raise ObjectNotFoundError(key)
        return path.read_bytes()

    def _url(self, key: str) -> str:
        if not self._path(key).is_file():
            raise ObjectNotFoundError(key)
        return f"{self.base_url}/{quote(key)}"

    async def list(self, prefix: str) -> list[str]:
        return await asyncio.to_thread(self._list, prefix)

    async def read(self, key: str) -> bytes:
        return await asyncio.to_thread(self._read, key)

    async def url(self, key: str) -> str:
        return await asyncio.to_thread(self._url, key)
