import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from storefront.dependencies import get_cart, request_id, session_id
from storefront.errors import CorruptedCatalogError, OrderSubmissionError, OrderValidationError
from storefront.schemas.order import (
    DeliveryDetails,
    DeliveryOrder,
    FulfilmentMode,
    OrderReceipt,
    PickupDetails,
)
from storefront.services.cart import CartStore

router = APIRouter()
logger = logging.getLogger(__name__)


async def _place(
    request: Request,
    mode: FulfilmentMode,
    details: PickupDetails | DeliveryDetails,
    cart: CartStore,
    session: str,
) -> OrderReceipt:
    rid = request_id(request)
    logger.info(
        "Received place_order request",
        extra={"request_id": rid, "mode": mode.value, "cart_lines": len(cart)},
    )
    composer = request.app.state.order_composer
    try:
        order = await composer.compose(mode, details, cart, request_id=rid)
    except OrderValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"group": exc.group, "message": str(exc)},
        )
    except OrderSubmissionError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    except CorruptedCatalogError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))

    # Only what was ordered leaves the cart; additions made during the submit stay
    cart.deduct({(line.category, line.id): line.quantity for line in order.cart_items.values()})
    request.app.state.carts.release(session)
    return OrderReceipt(
        mode=mode,
        total_price=order.total_price,
        item_count=sum(line.quantity for line in order.cart_items.values()),
        timestamp=order.timestamp if isinstance(order, DeliveryOrder) else None,
    )


@router.post("/pickup", response_model=OrderReceipt, status_code=status.HTTP_201_CREATED)
async def place_pickup_order(
    body: PickupDetails,
    request: Request,
    session: str = Depends(session_id),
    cart: CartStore = Depends(get_cart),
) -> OrderReceipt:
    return await _place(request, FulfilmentMode.PICKUP, body, cart, session)


@router.post("/delivery", response_model=OrderReceipt, status_code=status.HTTP_201_CREATED)
async def place_delivery_order(
    body: DeliveryDetails,
    request: Request,
    session: str = Depends(session_id),
    cart: CartStore = Depends(get_cart),
) -> OrderReceipt:
    return await _place(request, FulfilmentMode.DELIVERY, body, cart, session)
