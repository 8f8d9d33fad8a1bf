import logging
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError

from storefront.errors import OrderSubmissionError, OrderValidationError
from storefront.metrics import ORDERS
from storefront.schemas.order import (
    CardPayment,
    CartLine,
    CashPayment,
    DeliveryDetails,
    DeliveryOrder,
    FulfilmentMode,
    Order,
    PaymentMethod,
    PaypalPayment,
    PickupDetails,
    PickupOrder,
)
from storefront.services.cart import CartStore, format_key
from storefront.services.document_store import DELIVERY_ORDERS, PICKUP_ORDERS, DocumentStore

logger = logging.getLogger(__name__)

CONTACT = "contact"
PAYMENT = "payment"

_COLLECTIONS = {
    FulfilmentMode.PICKUP: PICKUP_ORDERS,
    FulfilmentMode.DELIVERY: DELIVERY_ORDERS,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _missing(**fields: str | None) -> list[str]:
    return [name for name, value in fields.items() if not value]


def _cart_lines(cart: CartStore) -> dict[str, CartLine]:
    return {
        format_key(key): CartLine(
            id=entry.item.id,
            category=entry.item.category,
            name=entry.item.name,
            price=entry.item.price,
            ingredients=list(entry.item.ingredients),
            image_url=entry.item.image_url,
            quantity=entry.quantity,
        )
        for key, entry in cart.snapshot().items()
    }


def _payment(details: DeliveryDetails) -> PaypalPayment | CardPayment | CashPayment:
    try:
        method = PaymentMethod(details.payment)
    except ValueError:
        raise OrderValidationError(
            PAYMENT, f"Unsupported payment method {details.payment!r}"
        ) from None

    if method is PaymentMethod.PAYPAL:
        missing = _missing(paypal_email=details.paypal_email)
        if not missing:
            return PaypalPayment(email=details.paypal_email)
    elif method is PaymentMethod.CARD:
        missing = _missing(
            card_number=details.card_number,
            expiration_date=details.expiration_date,
            cvv=details.cvv,
        )
        if not missing:
            return CardPayment(
                number=details.card_number,
                expiration=details.expiration_date,
                cvv=details.cvv,
            )
    else:
        return CashPayment()

    raise OrderValidationError(
        PAYMENT,
        "Please fill in all required fields for the selected payment method: "
        + ", ".join(missing),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


class OrderComposer:
    def __init__(
        self,
        store: DocumentStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.clock = clock

    def build(
        self,
        mode: FulfilmentMode,
        details: PickupDetails | DeliveryDetails,
        cart: CartStore,
    ) -> Order:
        """Validate ``details`` for ``mode`` and shape the order. No I/O."""
        mode = FulfilmentMode(mode)

        if mode is FulfilmentMode.PICKUP:
            details = PickupDetails.model_validate(details, from_attributes=True)
            missing = _missing(name=details.name, phone=details.phone)
            if missing:
                raise OrderValidationError(
                    CONTACT, "Please fill in all required fields: " + ", ".join(missing)
                )
            return PickupOrder(
                name=details.name,
                phone=details.phone,
                cart_items=_cart_lines(cart),
                total_price=cart.total(),
            )

        details = DeliveryDetails.model_validate(details, from_attributes=True)
        missing = _missing(
            name=details.name,
            email=details.email,
            address=details.address,
            phone=details.phone,
            payment=details.payment,
        )
        if missing:
            raise OrderValidationError(
                CONTACT, "Please fill in all required fields: " + ", ".join(missing)
            )
        payment = _payment(details)
        return DeliveryOrder(
            name=details.name,
            email=details.email,
            address=details.address,
            phone=details.phone,
            payment=payment,
            cart_items=_cart_lines(cart),
            total_price=cart.total(),
            timestamp=iso_timestamp(self.clock()),
        )

    async def submit(self, order: Order, request_id: str = "unknown") -> str:
        mode = FulfilmentMode(order.mode)
        collection = _COLLECTIONS[mode]
        try:
            document_id = await self.store.insert(collection, order.to_record())
        except (SQLAlchemyError, OSError) as exc:
            ORDERS.labels(mode.value, "failed").inc()
            logger.error(
                "Order submission failed",
                extra={"mode": mode.value, "request_id": request_id, "error": str(exc)},
            )
            raise OrderSubmissionError(f"Could not place {mode.value} order: {exc}") from exc

        ORDERS.labels(mode.value, "submitted").inc()
        logger.info(
            "Order submitted",
            extra={
                "mode": mode.value,
                "request_id": request_id,
                "collection": collection,
                "document_id": document_id,
                "total_price": order.total_price,
                "item_count": len(order.cart_items),
            },
        )
        return document_id

    async def compose(
        self,
        mode: FulfilmentMode,
        details: PickupDetails | DeliveryDetails,
        cart: CartStore,
        request_id: str = "unknown",
    ) -> Order:
        """
        Validate, shape and submit an order.

        Raises ``OrderValidationError`` before anything is written and
        ``OrderSubmissionError`` if the write fails. The cart is never
        touched here; deducting the ordered lines is up to the caller.
        """
        try:
            order = self.build(mode, details, cart)
        except OrderValidationError as exc:
            mode = FulfilmentMode(mode)
            ORDERS.labels(mode.value, "invalid").inc()
            logger.info(
                "Order rejected",
                extra={"mode": mode.value, "group": exc.group, "request_id": request_id},
            )
            raise
        await self.submit(order, request_id)
        return order
