from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable

from .exceptions import validation_error
from .models import Product

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CartLine:
    product: Product
    quantity: int

    @property
    def product_id(self) -> int:
        return int(self.product.id)  # type: ignore[arg-type]

    @property
    def subtotal(self) -> Decimal:
        return self.product.unit_price * self.quantity


CartListener = Callable[[tuple[CartLine, ...]], None]


class Subscription:
    def __init__(self, cart: CartAggregator, token: int) -> None:
        self._cart = cart
        self._token = token

    @property
    def active(self) -> bool:
        return self._cart._has_listener(self._token)

    def unsubscribe(self) -> None:
        self._cart._remove_listener(self._token)


class CartAggregator:
    """In-memory cart keyed by product id.

    Listeners are called synchronously, in subscription order, after every
    mutation, with a snapshot of the post-mutation lines.
    """

    def __init__(self) -> None:
        self._lines: dict[int, CartLine] = {}
        self._listeners: dict[int, CartListener] = {}
        self._next_token = 0

    def subscribe(self, listener: CartListener) -> Subscription:
        token = self._next_token
        self._next_token += 1
        self._listeners[token] = listener
        return Subscription(self, token)

    def add_item(self, product: Product) -> None:
        if product.id is None:
            raise validation_error("MISSING_PRODUCT_ID", "Cannot add a product without an id to the cart")
        existing = self._lines.get(product.id)
        if existing is None:
            self._lines[product.id] = CartLine(product=product, quantity=1)
        else:
            self._lines[product.id] = CartLine(product=existing.product, quantity=existing.quantity + 1)
        logger.debug("cart_item_added", extra={"product_id": product.id})
        self._notify()

    def remove_item(self, product_id: int) -> None:
        self._lines.pop(product_id, None)
        self._notify()

    def clear(self) -> None:
        self._lines.clear()
        self._notify()

    def items(self) -> tuple[CartLine, ...]:
        return tuple(self._lines.values())

    def is_empty(self) -> bool:
        return not self._lines

    @property
    def count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    @property
    def total(self) -> Decimal:
        return sum((line.subtotal for line in self._lines.values()), Decimal("0"))

    def _notify(self) -> None:
        snapshot = self.items()
        for listener in list(self._listeners.values()):
            listener(snapshot)

    def _has_listener(self, token: int) -> bool:
        return token in self._listeners

    def _remove_listener(self, token: int) -> None:
        self._listeners.pop(token, None)
