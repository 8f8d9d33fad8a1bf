import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from storefront.dependencies import get_cart, get_catalog, request_id, session_id
from storefront.errors import CorruptedCatalogError
from storefront.schemas.menu import MenuItemResponse
from storefront.schemas.order import CartEntryResponse, CartItemAdd, CartResponse
from storefront.services.cart import CartStore, format_key
from storefront.services.catalog import Catalog, find_item

router = APIRouter()
logger = logging.getLogger(__name__)


def build_cart_response(cart: CartStore) -> CartResponse:
    try:
        entries = [
            CartEntryResponse(
                key=format_key(entry.item.key),
                item=MenuItemResponse.from_item(entry.item),
                quantity=entry.quantity,
                subtotal=f"{entry.subtotal():.2f}",
            )
            for entry in cart.entries()
        ]
        total = cart.total()
    except CorruptedCatalogError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
    return CartResponse(entries=entries, count=cart.count(), total_price=total)


@router.get("", response_model=CartResponse)
async def get_cart_contents(cart: CartStore = Depends(get_cart)) -> CartResponse:
    return build_cart_response(cart)


@router.post("/items", response_model=CartResponse)
async def add_item(
    body: CartItemAdd,
    request: Request,
    cart: CartStore = Depends(get_cart),
    catalog: Catalog = Depends(get_catalog),
) -> CartResponse:
    item = find_item(catalog, body.category, body.id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Menu item not found")
    cart.add(item)
    logger.info(
        "Item added to cart",
        extra={"request_id": request_id(request), "category": item.category, "item_id": item.id},
    )
    return build_cart_response(cart)


@router.delete("/items/{category}/{item_id}", response_model=CartResponse)
async def remove_item(
    category: str,
    item_id: str,
    request: Request,
    session: str = Depends(session_id),
    cart: CartStore = Depends(get_cart),
) -> CartResponse:
    cart.remove((category, item_id))
    response = build_cart_response(cart)
    request.app.state.carts.release(session)
    return response
