import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.models.document import Document

logger = logging.getLogger(__name__)

# Read once at startup
STORE_INFORMATIONS = "StoreInformations"
STATUS = "Status"
SERVICE = "service"
STORE_LOCATION = "StoreLocation"

# Written by order submission
PICKUP_ORDERS = "Abholungen"
DELIVERY_ORDERS = "Bestellungen"


class DocumentStore:
    """Collections of JSON records backed by the ``documents`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def all(self, collection: str) -> list[dict[str, Any]]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(Document)
                .where(Document.collection == collection)
                .order_by(Document.created_at, Document.id)
            )
            return [doc.data for doc in result.scalars().all()]

    async def first(self, collection: str) -> dict[str, Any] | None:
        documents = await self.all(collection)
        return documents[0] if documents else None

    async def insert(self, collection: str, data: dict[str, Any]) -> str:
        async with self.session_factory() as db:
            doc = Document(collection=collection, data=data)
            db.add(doc)
            await db.commit()
        logger.info(
            "Document inserted",
            extra={"collection": collection, "document_id": str(doc.id)},
        )
        return str(doc.id)
