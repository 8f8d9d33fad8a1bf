import json
import os
import tempfile

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

_TMP = tempfile.mkdtemp(prefix="storefront-tests-")

# Must be set before storefront.config is imported
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TMP}/storefront.db")
os.environ.setdefault("MEDIA_DIR", os.path.join(_TMP, "media"))
os.environ.setdefault("TRACING_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from storefront.database import Base  # noqa: E402
from storefront.models import Document  # noqa: E402,F401
from storefront.schemas.menu import MenuItem  # noqa: E402
from storefront.services.document_store import DocumentStore  # noqa: E402
from storefront.storage import ObjectNotFoundError  # noqa: E402
from storefront.storage.local_backend import LocalBackend  # noqa: E402


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class MemoryStorage:
    """Dict-backed storage that records every call in order."""

    def __init__(self, objects: dict[str, bytes] | None = None) -> None:
        self.objects = dict(objects or {})
        self.calls: list[tuple[str, str]] = []

    async def list(self, prefix: str) -> list[str]:
        self.calls.append(("list", prefix))
        folder = prefix.strip("/") + "/"
        return sorted(
            key[len(folder):]
            for key in self.objects
            if key.startswith(folder) and "/" not in key[len(folder):]
        )

    async def read(self, key: str) -> bytes:
        self.calls.append(("read", key))
        if key not in self.objects:
            raise ObjectNotFoundError(key)
        return self.objects[key]

    async def url(self, key: str) -> str:
        self.calls.append(("url", key))
        if key not in self.objects:
            raise ObjectNotFoundError(key)
        return f"https://cdn.example.com/{key}"


@pytest.fixture
def media(tmp_path):
    """Write objects under a temporary media dir; returns ``(put, backend)``."""
    root = tmp_path / "media"
    root.mkdir()

    def put(key: str, content) -> None:
        path = root / key
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, (bytes, str)):
            data = content.encode() if isinstance(content, str) else content
        else:
            data = json.dumps(content).encode()
        path.write_bytes(data)

    return put, LocalBackend(root, base_url="/media")


@pytest.fixture
async def documents(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/documents.db")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield DocumentStore(async_sessionmaker(engine, expire_on_commit=False))
    await engine.dispose()


def make_item(category: str, item_id: str, name: str | None = None, price: str = "5,00€", **kw) -> MenuItem:
    return MenuItem(
        id=item_id,
        name=name or item_id,
        price=price,
        category=category,
        **kw,
    )
