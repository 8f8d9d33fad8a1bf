import logging

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from storefront.schemas.store import STATUS_DISABLED, StoreInfo, StoreLocation, StoreProfile
from storefront.services.document_store import (
    SERVICE,
    STATUS,
    STORE_INFORMATIONS,
    STORE_LOCATION,
    DocumentStore,
)

logger = logging.getLogger(__name__)


async def _info(store: DocumentStore) -> StoreInfo | None:
    data = await store.first(STORE_INFORMATIONS)
    if data is None:
        logger.warning("No store information documents found")
        return None
    return StoreInfo.model_validate(data)


async def _status(store: DocumentStore) -> str:
    data = await store.first(STATUS)
    if data is None:
        return STATUS_DISABLED
    return str(data.get("Avaible", STATUS_DISABLED))


async def _service(store: DocumentStore) -> dict[str, str]:
    schedule: dict[str, str] = {}
    for data in await store.all(SERVICE):
        for day, hours in data.items():
            schedule[day] = str(hours)
    if not schedule:
        logger.warning("Service schedule is empty")
    return schedule


async def _location(store: DocumentStore) -> StoreLocation:
    data = await store.first(STORE_LOCATION)
    if data and data.get("latitude") and data.get("longitude"):
        return StoreLocation(latitude=data["latitude"], longitude=data["longitude"])
    return StoreLocation()


async def load_store_profile(store: DocumentStore) -> StoreProfile:
    """
    Read the passive store records once. A failing collection is logged and
    falls back to its default so the storefront can still start.
    """
    loaders = {
        "info": _info,
        "status": _status,
        "service": _service,
        "location": _location,
    }
    values = {}
    for field, loader in loaders.items():
        try:
            values[field] = await loader(store)
        except (SQLAlchemyError, ValidationError, ValueError) as exc:
            logger.error(
                "Failed to load store record",
                extra={"record": field, "error": str(exc)},
            )
    profile = StoreProfile(**values)
    logger.info("Store profile loaded", extra={"loaded": sorted(values)})
    return profile
