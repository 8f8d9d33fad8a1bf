"""
In-memory cart keyed by ``(category, item id)``.

Mutations never await, so under the single-threaded event loop every
operation is atomic from the caller's point of view. A threaded caller must
wrap the store in its own lock.
"""

import logging
import math
from collections import OrderedDict
from dataclasses import dataclass, replace
from typing import Callable, Mapping

from storefront.errors import CorruptedCatalogError
from storefront.schemas.menu import MenuItem
from storefront.services.pricing import parse_price

logger = logging.getLogger(__name__)

CartKey = tuple[str, str]
Subscriber = Callable[["CartStore"], None]


def format_key(key: CartKey) -> str:
    return f"{key[0]}/{key[1]}"


@dataclass(frozen=True)
class CartEntry:
    item: MenuItem
    quantity: int

    def subtotal(self) -> float:
        amount = parse_price(self.item.price)
        if math.isnan(amount):
            raise CorruptedCatalogError(
                f"Unparseable price {self.item.price!r} for {self.item.name!r}"
            )
        return self.quantity * amount


class CartStore:
    def __init__(self) -> None:
        self._entries: dict[CartKey, CartEntry] = {}
        self._subscribers: list[Subscriber] = []

    # -- reads ---------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CartKey) -> bool:
        return key in self._entries

    def entries(self) -> list[CartEntry]:
        return list(self._entries.values())

    def snapshot(self) -> dict[CartKey, CartEntry]:
        return dict(self._entries)

    def quantity(self, key: CartKey) -> int:
        entry = self._entries.get(key)
        return entry.quantity if entry else 0

    def count(self) -> int:
        return sum(e.quantity for e in self._entries.values())

    def total(self) -> str:
        """Sum of ``quantity * price`` over all entries, formatted to 2 decimals."""
        total = sum((e.subtotal() for e in self._entries.values()), 0.0)
        return f"{total:.2f}"

    # -- mutations -----------------------------------------------------------

    def add(self, item: MenuItem) -> CartEntry:
        key = item.key
        current = self._entries.get(key)
        if current is None:
            entry = CartEntry(item=item, quantity=1)
        else:
            # Refresh the snapshot so price and image follow the latest catalog
            entry = replace(current, item=item, quantity=current.quantity + 1)
        self._entries[key] = entry
        logger.debug(
            "Cart item added",
            extra={"category": key[0], "item_id": key[1], "quantity": entry.quantity},
        )
        self._notify()
        return entry

    def remove(self, key: CartKey) -> bool:
        current = self._entries.get(key)
        if current is None:
            return False
        if current.quantity > 1:
            self._entries[key] = replace(current, quantity=current.quantity - 1)
        else:
            del self._entries[key]
        logger.debug(
            "Cart item removed",
            extra={"category": key[0], "item_id": key[1], "quantity": self.quantity(key)},
        )
        self._notify()
        return True

    def clear(self) -> None:
        if not self._entries:
            return
        self._entries = {}
        self._notify()

    def deduct(self, quantities: Mapping[CartKey, int]) -> None:
        """
        Take already-ordered quantities out of the cart.

        Lines added after the order was shaped survive, and a line whose
        quantity grew in the meantime keeps the difference.
        """
        changed = False
        for key, ordered in quantities.items():
            current = self._entries.get(key)
            if current is None or ordered <= 0:
                continue
            left = current.quantity - ordered
            if left > 0:
                self._entries[key] = replace(current, quantity=left)
            else:
                del self._entries[key]
            changed = True
        if changed:
            self._notify()

    # -- change notification -------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._subscribers):
            callback(self)


class CartRegistry:
    """
    One CartStore per visitor session, held in memory only.

    At most ``max_sessions`` carts are kept; the least recently used one is
    dropped when a new session would exceed the limit.
    """

    def __init__(self, max_sessions: int = 10_000) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.max_sessions = max_sessions
        self._carts: OrderedDict[str, CartStore] = OrderedDict()

    def __len__(self) -> int:
        return len(self._carts)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._carts

    def get(self, session_id: str) -> CartStore:
        cart = self._carts.get(session_id)
        if cart is not None:
            self._carts.move_to_end(session_id)
            return cart
        cart = self._carts[session_id] = CartStore()
        while len(self._carts) > self.max_sessions:
            evicted, _ = self._carts.popitem(last=False)
            logger.info("Cart evicted", extra={"session_id": evicted})
        return cart

    def release(self, session_id: str) -> None:
        """Forget the session's cart once it holds nothing."""
        cart = self._carts.get(session_id)
        if cart is not None and not cart:
            del self._carts[session_id]
