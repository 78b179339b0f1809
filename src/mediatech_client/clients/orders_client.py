from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError as ModelValidationError

from ..exceptions import ProtocolError
from ..models import Order, OrderCreateRequest, OrderStatus, StatusUpdateRequest
from .base import BaseClient, expect_list, expect_object


def _parse_order(data: Any, what: str) -> Order:
    try:
        return Order.model_validate(expect_object(data, what))
    except ModelValidationError as exc:
        raise ProtocolError(
            code="UNEXPECTED_PAYLOAD",
            message=f"Could not read {what}",
            details={"errors": exc.errors(include_url=False)},
        ) from exc


@dataclass
class OrdersClient(BaseClient):
    module: str = "orders"

    def list_orders(self, *, context_key: str | None = None, context_version: int | None = None) -> list[Order]:
        data = self._request(
            "GET",
            "/factures",
            operation="list",
            context_key=context_key,
            context_version=context_version,
        )
        return [_parse_order(item, "order list entry") for item in expect_list(data, "order list")]

    def get_order(self, order_id: int) -> Order:
        data = self._request("GET", f"/factures/{order_id}", operation="get")
        return _parse_order(data, "order")

    def create_order(self, request: OrderCreateRequest) -> Order:
        data = self._request(
            "POST",
            "/factures",
            json_body=request.model_dump(by_alias=True, mode="json"),
            operation="create",
        )
        return _parse_order(data, "created order")

    def update_status(self, order_id: int, status: OrderStatus) -> Order:
        payload = StatusUpdateRequest(status=status)
        data = self._request(
            "PUT",
            f"/factures/{order_id}/status",
            json_body=payload.model_dump(mode="json"),
            operation="update_status",
        )
        return _parse_order(data, "updated order")

    def download_document(self, order_id: int) -> bytes:
        return self.http.request_bytes(
            "GET",
            f"/factures/{order_id}/pdf",
            module=self.module,
            operation="download_document",
        )
