import asyncio
from io import BytesIO

import pytest
from botocore.exceptions import ClientError

from storefront.config import Settings
from storefront.storage import ObjectNotFoundError, StorageError, build_storage
from storefront.storage.local_backend import LocalBackend
from storefront.storage.s3_backend import S3Backend


def test_local_backend_lists_reads_and_urls(media):
    put, storage = media
    put("Menu/Pizza.json", b"[]")
    put("Menu/Pasta.json", b"[]")
    put("Menu/archive/Old.json", b"[]")

    assert asyncio.run(storage.list("Menu")) == ["Pasta.json", "Pizza.json"]
    assert asyncio.run(storage.list("Nope")) == []
    assert asyncio.run(storage.read("Menu/Pizza.json")) == b"[]"
    assert asyncio.run(storage.url("Menu/Pizza.json")) == "/media/Menu/Pizza.json"


def test_local_backend_missing_objects(media):
    _, storage = media
    with pytest.raises(ObjectNotFoundError):
        asyncio.run(storage.read("Menu/Ghost.json"))
    with pytest.raises(ObjectNotFoundError):
        asyncio.run(storage.url("Media/Pizza/ghost.jpg"))
    with pytest.raises(ObjectNotFoundError):
        asyncio.run(storage.read("../outside.txt"))


def test_local_backend_urls_are_quoted(media):
    put, storage = media
    put("Media/Pizza/quattro stagioni.jpg", b"img")
    put("News/newsImages/Pizza#1.png", b"img")

    assert asyncio.run(storage.url("Media/Pizza/quattro stagioni.jpg")) == "/media/Media/Pizza/quattro%20stagioni.jpg"
    assert asyncio.run(storage.url("News/newsImages/Pizza#1.png")) == "/media/News/newsImages/Pizza%231.png"


def test_local_backend_without_base_dir(tmp_path):
    storage = LocalBackend(tmp_path / "absent")
    with pytest.raises(StorageError):
        asyncio.run(storage.list("Menu"))


def test_build_storage_selects_backend(tmp_path):
    storage = build_storage(Settings(storage_backend="local", media_dir=str(tmp_path)))
    assert isinstance(storage, LocalBackend)


class DummyPaginator:
    def __init__(self, pages):
        self.pages = pages
        self.kwargs = None

    def paginate(self, **kwargs):
        self.kwargs = kwargs
        return iter(self.pages)


class DummyClient:
    def __init__(self, objects):
        self.objects = objects
        self.paginator = DummyPaginator(
            [
                {"Contents": [{"Key": "Menu/Pizza.json"}]},
                {"Contents": [{"Key": "Menu/Pasta.json"}, {"Key": "Menu/"}]},
            ]
        )
        self.last = {}

    def get_paginator(self, name):
        assert name == "list_objects_v2"
        return self.paginator

    def _missing(self, key, op):
        return ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, op)

    def get_object(self, Bucket, Key):
        if Key not in self.objects:
            raise self._missing(Key, "GetObject")
        return {"Body": BytesIO(self.objects[Key])}

    def head_object(self, Bucket, Key):
        if Key not in self.objects:
            raise self._missing(Key, "HeadObject")
        return {}

    def generate_presigned_url(self, op, Params, ExpiresIn):
        self.last = {"op": op, "Params": Params, "ExpiresIn": ExpiresIn}
        return f"https://example.com/{op}/{Params['Key']}"


def test_s3_backend():
    client = DummyClient({"Menu/Pizza.json": b"[]", "Media/Pizza/a.png": b"png"})
    backend = S3Backend(bucket="bkt", url_expiry=60, client=client)

    assert asyncio.run(backend.list("Menu")) == ["Pasta.json", "Pizza.json"]
    assert client.paginator.kwargs == {"Bucket": "bkt", "Prefix": "Menu/", "Delimiter": "/"}
    assert asyncio.run(backend.read("Menu/Pizza.json")) == b"[]"

    url = asyncio.run(backend.url("Media/Pizza/a.png"))
    assert url == "https://example.com/get_object/Media/Pizza/a.png"
    assert client.last["ExpiresIn"] == 60

    with pytest.raises(ObjectNotFoundError):
        asyncio.run(backend.url("Media/Pizza/a.jpg"))
    with pytest.raises(ObjectNotFoundError):
        asyncio.run(backend.read("Menu/Ghost.json"))


def test_s3_backend_other_errors_are_storage_errors():
    class BrokenClient(DummyClient):
        def get_object(self, Bucket, Key):
            raise ClientError({"Error": {"Code": "AccessDenied"}}, "GetObject")

    backend = S3Backend(bucket="bkt", client=BrokenClient({}))
    with pytest.raises(StorageError) as exc_info:
        asyncio.run(backend.read("Menu/Pizza.json"))
    assert not isinstance(exc_info.value, ObjectNotFoundError)
