import json
import logging
import re

from pydantic import ValidationError

from storefront.errors import NewsUnavailableError
from storefront.schemas.news import NewsItem
from storefront.storage import ObjectStorage, StorageError

logger = logging.getLogger(__name__)

NEWS_IMAGE_EXTENSION = ".png"

_WHITESPACE = re.compile(r"\s+")


def news_image_name(title: str) -> str:
    """Image file name for a feed entry: the title without whitespace, plus ``.png``."""
    return _WHITESPACE.sub("", title) + NEWS_IMAGE_EXTENSION


class NewsAssembler:
    def __init__(
        self,
        storage: ObjectStorage,
        document: str = "News/news.json",
        images_root: str = "News/newsImages",
    ) -> None:
        self.storage = storage
        self.document = document
        self.images_root = images_root.strip("/")

    async def _feed(self) -> list[dict]:
        try:
            body = await self.storage.read(self.document)
            data = json.loads(body)
        except StorageError as exc:
            raise NewsUnavailableError(f"Could not fetch {self.document!r}: {exc}") from exc
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise NewsUnavailableError(f"{self.document!r} is not valid JSON: {exc}") from exc

        records = data if isinstance(data, list) else [data]
        if not all(isinstance(r, dict) for r in records):
            raise NewsUnavailableError(f"{self.document!r} must hold objects")
        return records

    async def _images(self) -> dict[str, str]:
        try:
            names = await self.storage.list(self.images_root)
        except StorageError as exc:
            logger.warning(
                "News images unavailable",
                extra={"images_root": self.images_root, "error": str(exc)},
            )
            return {}

        images: dict[str, str] = {}
        for name in names:
            try:
                images[name] = await self.storage.url(f"{self.images_root}/{name}")
            except StorageError as exc:
                logger.warning("News image vanished", extra={"image": name, "error": str(exc)})
        return images

    async def assemble(self) -> list[NewsItem]:
        records = await self._feed()
        images = await self._images()

        news: list[NewsItem] = []
        for record in records:
            try:
                item = NewsItem.model_validate(record)
            except ValidationError as exc:
                raise NewsUnavailableError(f"Malformed news entry: {exc}") from exc
            image_url = images.get(news_image_name(item.title))
            if image_url:
                item = item.model_copy(update={"image_url": image_url})
            news.append(item)

        logger.info(
            "News assembled",
            extra={"entries": len(news), "with_images": sum(1 for n in news if n.image_url)},
        )
        return news
