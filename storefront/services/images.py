import logging

from storefront.metrics import IMAGE_LOOKUPS
from storefront.storage import ObjectStorage, StorageError

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp", ".gif")


class ImageResolver:
    """
    Finds an item's image by trying ``<media_root>/<category>/<item_id><ext>``
    for each extension in order. The first existing object wins; candidates
    are tried one after another, never in parallel.
    """

    def __init__(
        self,
        storage: ObjectStorage,
        media_root: str = "Media",
        extensions: tuple[str, ...] | list[str] = DEFAULT_EXTENSIONS,
    ) -> None:
        self.storage = storage
        self.media_root = media_root.strip("/")
        self.extensions = tuple(extensions)

    def candidates(self, category: str, item_id: str) -> list[str]:
        return [f"{self.media_root}/{category}/{item_id}{ext}" for ext in self.extensions]

    async def resolve(self, category: str, item_id: str) -> str:
        """Return the first resolvable image URL, or ``""`` when none exists."""
        for key in self.candidates(category, item_id):
            try:
                url = await self.storage.url(key)
            except StorageError as exc:
                logger.debug(
                    "Image candidate not available",
                    extra={"key": key, "error": str(exc)},
                )
                continue
            IMAGE_LOOKUPS.labels("found").inc()
            return url

        IMAGE_LOOKUPS.labels("missing").inc()
        logger.warning(
            "No image found for item",
            extra={"category": category, "item_id": item_id},
        )
        return ""
