from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from storefront.schemas.menu import MenuItemResponse


class FulfilmentMode(str, Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


class PaymentMethod(str, Enum):
    PAYPAL = "Paypal"
    CARD = "Card"
    CASH = "Cash"


# ---------------------------------------------------------------------------
# Visitor input (unvalidated form state)
# ---------------------------------------------------------------------------


class PickupDetails(BaseModel):
    name: str = ""
    phone: str = ""


class DeliveryDetails(BaseModel):
    name: str = ""
    email: str = ""
    address: str = ""
    phone: str = ""
    payment: str | None = PaymentMethod.PAYPAL.value
    paypal_email: str = ""
    card_number: str = ""
    expiration_date: str = ""
    cvv: str = ""


# ---------------------------------------------------------------------------
# Payment variants
# ---------------------------------------------------------------------------


class PaypalPayment(BaseModel):
    method: Literal["Paypal"] = "Paypal"
    email: str

    model_config = {"frozen": True}

    def to_record(self) -> dict:
        return {"paymentMethod": self.method, "paypalEmail": self.email}


class CardPayment(BaseModel):
    method: Literal["Card"] = "Card"
    number: str
    expiration: str
    cvv: str

    model_config = {"frozen": True}

    def to_record(self) -> dict:
        return {
            "paymentMethod": self.method,
            "cardNumber": self.number,
            "expirationDate": self.expiration,
            "cvv": self.cvv,
        }


class CashPayment(BaseModel):
    method: Literal["Cash"] = "Cash"

    model_config = {"frozen": True}

    def to_record(self) -> dict:
        return {"paymentMethod": self.method}


PaymentDetails = Annotated[
    Union[PaypalPayment, CardPayment, CashPayment],
    Field(discriminator="method"),
]


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


class CartLine(BaseModel):
    id: str
    category: str
    name: str
    price: str
    ingredients: list[str | None]
    image_url: str
    quantity: int

    model_config = {"frozen": True}

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "category": self.category,
            "name": self.name,
            "price": self.price,
            "ingredients": list(self.ingredients),
            "imageUrl": self.image_url,
            "quantity": self.quantity,
        }


class PickupOrder(BaseModel):
    mode: Literal["pickup"] = "pickup"
    name: str
    phone: str
    cart_items: dict[str, CartLine]
    total_price: str

    model_config = {"frozen": True}

    def to_record(self) -> dict:
        return {
            "name": self.name,
            "phone": self.phone,
            "cartItems": {k: line.to_record() for k, line in self.cart_items.items()},
            "totalPrice": self.total_price,
        }


class DeliveryOrder(BaseModel):
    mode: Literal["delivery"] = "delivery"
    name: str
    email: str
    address: str
    phone: str
    payment: PaymentDetails
    cart_items: dict[str, CartLine]
    total_price: str
    timestamp: str

    model_config = {"frozen": True}

    def to_record(self) -> dict:
        return {
            "name": self.name,
            "email": self.email,
            "address": self.address,
            "phone": self.phone,
            "payment": self.payment.method,
            "cartItems": {k: line.to_record() for k, line in self.cart_items.items()},
            "totalPrice": self.total_price,
            "timestamp": self.timestamp,
            **self.payment.to_record(),
        }


Order = Annotated[Union[PickupOrder, DeliveryOrder], Field(discriminator="mode")]


class OrderReceipt(BaseModel):
    mode: FulfilmentMode
    total_price: str
    item_count: int
    timestamp: str | None = None


# ---------------------------------------------------------------------------
# Cart API
# ---------------------------------------------------------------------------


class CartItemAdd(BaseModel):
    category: str
    id: str


class CartEntryResponse(BaseModel):
    key: str
    item: MenuItemResponse
    quantity: int
    subtotal: str


class CartResponse(BaseModel):
    entries: list[CartEntryResponse]
    count: int
    total_price: str
