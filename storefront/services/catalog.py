"""
Catalog assembly.

Turns a folder of per-category JSON documents plus per-item images into a
``category -> [MenuItem]`` mapping:

  1. list the menu folder
  2. fetch and parse every category document concurrently
  3. resolve every item's image before its category is considered final
  4. merge into a mapping keyed by document name minus ``.json``

By default any failing category aborts the whole run so that no partial
catalog is ever published. With ``partial=True`` failing categories are
logged and left out instead.
"""

import asyncio
import json
import logging
import time
from typing import Any

from pydantic import ValidationError

from storefront.errors import CatalogError, CatalogUnavailableError, CorruptedCatalogError
from storefront.metrics import CATALOG_ASSEMBLIES, CATALOG_ASSEMBLY_TIME, CATALOG_ITEMS
from storefront.schemas.menu import MenuItem
from storefront.services.images import ImageResolver
from storefront.services.pricing import require_price
from storefront.storage import ObjectStorage, StorageError

logger = logging.getLogger(__name__)

CATEGORY_SUFFIX = ".json"

Catalog = dict[str, list[MenuItem]]


def category_name(document_name: str) -> str:
    return document_name.removesuffix(CATEGORY_SUFFIX)


def parse_category_document(category: str, body: bytes) -> list[MenuItem]:
    """Parse a category document body into items, without images."""
    try:
        data: Any = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise CorruptedCatalogError(f"Category {category!r} is not valid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise CorruptedCatalogError(
            f"Category {category!r} must contain an array of items, got {type(data).__name__}"
        )

    items: list[MenuItem] = []
    seen: set[str] = set()
    for index, record in enumerate(data):
        if not isinstance(record, dict):
            raise CorruptedCatalogError(f"Category {category!r} item[{index}] is not an object")
        try:
            item = MenuItem.model_validate({**record, "category": category, "image_url": ""})
        except ValidationError as exc:
            raise CorruptedCatalogError(
                f"Category {category!r} item[{index}] is malformed: {exc}"
            ) from exc
        try:
            require_price(item.price)
        except CorruptedCatalogError as exc:
            raise CorruptedCatalogError(f"Category {category!r} item {item.id!r}: {exc}") from exc
        if item.id in seen:
            raise CorruptedCatalogError(f"Category {category!r} has duplicate item id {item.id!r}")
        seen.add(item.id)
        items.append(item)
    return items


def find_item(catalog: Catalog, category: str, item_id: str) -> MenuItem | None:
    for item in catalog.get(category, []):
        if item.id == item_id:
            return item
    return None


class CatalogAssembler:
    def __init__(
        self,
        storage: ObjectStorage,
        resolver: ImageResolver,
        menu_root: str = "Menu",
        partial: bool = False,
    ) -> None:
        self.storage = storage
        self.resolver = resolver
        self.menu_root = menu_root.strip("/")
        self.partial = partial

    async def _discover(self) -> list[str]:
        try:
            names = await self.storage.list(self.menu_root)
        except StorageError as exc:
            raise CatalogUnavailableError(
                f"Could not list category documents under {self.menu_root!r}: {exc}"
            ) from exc
        documents = [n for n in names if n.endswith(CATEGORY_SUFFIX)]
        logger.info(
            "Discovered category documents",
            extra={"menu_root": self.menu_root, "documents": documents},
        )
        return documents

    async def _with_image(self, item: MenuItem) -> MenuItem:
        url = await self.resolver.resolve(item.category, item.id)
        return item.model_copy(update={"image_url": url})

    async def _load_category(self, document_name: str) -> tuple[str, list[MenuItem]]:
        category = category_name(document_name)
        key = f"{self.menu_root}/{document_name}"
        try:
            body = await self.storage.read(key)
        except StorageError as exc:
            raise CatalogUnavailableError(f"Could not fetch category {key!r}: {exc}") from exc

        items = parse_category_document(category, body)
        resolved = await asyncio.gather(*(self._with_image(item) for item in items))
        logger.info(
            "Category assembled",
            extra={"category": category, "item_count": len(resolved)},
        )
        return category, list(resolved)

    async def assemble(self) -> Catalog:
        start = time.monotonic()
        try:
            documents = await self._discover()
            results = await asyncio.gather(
                *(self._load_category(name) for name in documents),
                return_exceptions=self.partial,
            )
        except CatalogUnavailableError:
            CATALOG_ASSEMBLIES.labels("unavailable").inc()
            raise
        except CorruptedCatalogError:
            CATALOG_ASSEMBLIES.labels("corrupted").inc()
            raise

        loaded: list[tuple[str, list[MenuItem]]] = []
        for name, result in zip(documents, results):
            if isinstance(result, CatalogError):
                logger.error(
                    "Skipping category that failed to assemble",
                    extra={"document": name, "error": str(result)},
                )
                continue
            if isinstance(result, BaseException):
                raise result
            loaded.append(result)

        catalog: Catalog = {category: items for category, items in sorted(loaded, key=lambda pair: pair[0])}
        item_count = sum(len(items) for items in catalog.values())

        CATALOG_ASSEMBLIES.labels("success").inc()
        CATALOG_ASSEMBLY_TIME.observe(time.monotonic() - start)
        CATALOG_ITEMS.set(item_count)
        logger.info(
            "Catalog assembled",
            extra={"categories": list(catalog), "item_count": item_count},
        )
        return catalog
