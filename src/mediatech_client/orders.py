from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Sequence

from pydantic import ValidationError as ModelValidationError

from .cart import CartAggregator
from .clients.orders_client import OrdersClient
from .exceptions import NotFoundError, TransitionError, validation_error
from .log import get_logger, log_action
from .models import Order, OrderCreateRequest, OrderLineRequest, OrderStatus, Role
from .session import SessionStore

logger = logging.getLogger(__name__)
audit = get_logger("mediatech_client.audit")

TRANSITION_ROLES = frozenset({Role.ADMIN, Role.SELLER})
TARGET_STATUSES = frozenset({OrderStatus.VALIDATED, OrderStatus.REJECTED})

Confirm = Callable[[str], bool]


def _date_key(order: Order) -> float:
    if order.date is None:
        return float("-inf")
    return order.date.timestamp()


def sort_by_date_desc(orders: Iterable[Order]) -> list[Order]:
    return sorted(orders, key=_date_key, reverse=True)


def sort_pending_first(orders: Iterable[Order]) -> list[Order]:
    by_date = sort_by_date_desc(orders)
    return [o for o in by_date if o.status is OrderStatus.PENDING] + [
        o for o in by_date if o.status is not OrderStatus.PENDING
    ]


def sorted_for(role: Role | None, orders: Iterable[Order]) -> list[Order]:
    if role is Role.SELLER:
        return sort_pending_first(orders)
    return sort_by_date_desc(orders)


@dataclass(frozen=True)
class OrderActions:
    can_validate: bool
    can_reject: bool
    can_download: bool


def order_actions(order: Order, role: Role | None) -> OrderActions:
    can_transition = role in TRANSITION_ROLES and order.status is OrderStatus.PENDING
    return OrderActions(
        can_validate=can_transition,
        can_reject=can_transition,
        can_download=order.status is OrderStatus.VALIDATED,
    )


@dataclass
class OrderDraft:
    """Lines entered one by one on the order-creation screen."""

    customer_id: int | None = None
    lines: list[OrderLineRequest] = field(default_factory=list)

    def add_line(self, product_id: int | None, quantity: int) -> None:
        if product_id is None or quantity <= 0:
            raise validation_error(
                "INVALID_LINE",
                "A line needs a product and a positive quantity",
                product_id=product_id,
                quantity=quantity,
            )
        self.lines.append(OrderLineRequest(product_id=product_id, quantity=quantity))

    def remove_line(self, index: int) -> None:
        if 0 <= index < len(self.lines):
            del self.lines[index]

    def reset(self, *, keep_customer: bool) -> None:
        self.lines = []
        if not keep_customer:
            self.customer_id = None


class OrderWorkflow:
    def __init__(self, orders_client: OrdersClient, session_store: SessionStore) -> None:
        self.orders_client = orders_client
        self.session_store = session_store
        self.orders: list[Order] = []

    def create_order(self, customer_id: int | None, lines: Sequence[OrderLineRequest]) -> Order:
        if not lines:
            raise validation_error("EMPTY_ORDER", "An order needs at least one line")
        if customer_id is None:
            raise validation_error("MISSING_CUSTOMER", "An order needs a customer")
        try:
            request = OrderCreateRequest(customer_id=customer_id, lines=list(lines))
        except ModelValidationError as exc:
            raise validation_error("INVALID_ORDER", "Order lines must have positive quantities") from exc
        role = self.session_store.role
        order = self.orders_client.create_order(request)
        self.orders.append(order)
        logger.info("order_created", extra={"order_id": order.id, "line_count": len(request.lines)})
        log_action(
            audit,
            "orders",
            "create",
            role.name if role else None,
            "success",
            order_id=order.id,
            customer_id=customer_id,
        )
        return order

    def submit_draft(self, draft: OrderDraft) -> Order:
        customer_id = draft.customer_id
        if self.session_store.has_role(Role.CUSTOMER):
            customer_id = self.session_store.get_customer_id()
        order = self.create_order(customer_id, draft.lines)
        draft.reset(keep_customer=self.session_store.has_role(Role.CUSTOMER))
        return order

    def checkout(self, cart: CartAggregator) -> Order:
        """Turn the customer's cart into a pending order; the cart is emptied only on success."""
        lines = [OrderLineRequest(product_id=line.product_id, quantity=line.quantity) for line in cart.items()]
        order = self.create_order(self.session_store.get_customer_id(), lines)
        cart.clear()
        return order

    def list_orders(
        self,
        *,
        context_key: str | None = None,
        context_version: int | None = None,
    ) -> list[Order]:
        fetched = self.orders_client.list_orders(context_key=context_key, context_version=context_version)
        role = self.session_store.role
        if role is Role.CUSTOMER:
            # Display filter only; the server scopes customer reads itself.
            customer_id = self.session_store.get_customer_id()
            fetched = [order for order in fetched if order.customer_id == customer_id]
        self.orders = sorted_for(role, fetched)
        return list(self.orders)

    def update_status(self, order_id: int, status: OrderStatus | str, *, confirm: Confirm | None = None) -> Order | None:
        try:
            target = OrderStatus(status)
        except ValueError as exc:
            raise TransitionError(
                code="INVALID_TARGET_STATUS",
                message=f"Unknown order status: {status!r}",
            ) from exc
        role = self.session_store.role
        if role not in TRANSITION_ROLES:
            raise TransitionError(
                code="ROLE_CANNOT_TRANSITION",
                message="Only administrators and sellers can change an order status",
                details={"role": role.name if role else None},
            )
        if target not in TARGET_STATUSES:
            raise TransitionError(
                code="INVALID_TARGET_STATUS",
                message=f"Cannot move an order to {target.name}",
                details={"status": target.value},
            )
        index = self._index_of(order_id)
        current = self.orders[index]
        if current.status.is_terminal:
            raise TransitionError(
                code="ORDER_NOT_PENDING",
                message=f"Order {order_id} is already {current.status.name}",
                details={"order_id": order_id, "status": current.status.value},
            )
        if confirm is not None and not confirm(f"Confirm {target.name} for order {current.reference or order_id}?"):
            logger.info("order_status_update_declined", extra={"order_id": order_id})
            return None

        updated = self.orders_client.update_status(order_id, target)
        self.orders[index] = updated
        logger.info("order_status_updated", extra={"order_id": order_id, "status": updated.status.name})
        log_action(
            audit,
            "orders",
            "update_status",
            role.name,
            "success",
            order_id=order_id,
            status=updated.status.name,
        )
        return updated

    def pending_count(self) -> int:
        return sum(1 for order in self.orders if order.status is OrderStatus.PENDING)

    def validated_count(self) -> int:
        return sum(1 for order in self.orders if order.status is OrderStatus.VALIDATED)

    def download_document(self, order_id: int, destination: str | Path) -> Path:
        order = self.orders[self._index_of(order_id)]
        if order.status is not OrderStatus.VALIDATED:
            raise validation_error(
                "DOCUMENT_NOT_AVAILABLE",
                "Documents are only available for validated orders",
                order_id=order_id,
            )
        payload = self.orders_client.download_document(order_id)
        target = Path(destination) / f"FACTURE_{order_id}.pdf"
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(payload)
        logger.info("order_document_saved", extra={"order_id": order_id, "size": len(payload)})
        return target

    def _index_of(self, order_id: int) -> int:
        for index, order in enumerate(self.orders):
            if order.id == order_id:
                return index
        raise NotFoundError(
            code="ORDER_NOT_LOADED",
            message=f"Order {order_id} is not in the current list",
            details={"order_id": order_id},
            status_code=404,
        )
