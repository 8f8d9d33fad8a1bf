import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from storefront.dependencies import get_catalog, request_id
from storefront.errors import CatalogUnavailableError, CorruptedCatalogError
from storefront.schemas.menu import MenuItemResponse, select_category
from storefront.services.catalog import Catalog

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
async def list_categories(catalog: Catalog = Depends(get_catalog)) -> dict[str, list[str]]:
    return {"categories": list(catalog)}


@router.get("/{category}", response_model=list[MenuItemResponse])
async def list_items(
    category: str,
    catalog: Catalog = Depends(get_catalog),
) -> list[MenuItemResponse]:
    items = select_category(catalog, category)
    if items is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    return [MenuItemResponse.from_item(item) for item in items]


@router.post("/refresh")
async def refresh_menu(request: Request) -> dict[str, int]:
    logger.info("Received refresh_menu request", extra={"request_id": request_id(request)})
    try:
        catalog = await request.app.state.catalog_assembler.assemble()
    except CatalogUnavailableError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    except CorruptedCatalogError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))

    # Replace wholesale; the previous catalog stays published if assembly failed
    request.app.state.catalog = catalog
    request.app.state.catalog_error = None
    return {
        "categories": len(catalog),
        "items": sum(len(items) for items in catalog.values()),
    }
