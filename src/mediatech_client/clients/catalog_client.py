from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Mapping, TypeVar

from pydantic import BaseModel

from ..models import Customer, Product
from .base import BaseClient, expect_list, expect_object

RecordT = TypeVar("RecordT", bound=BaseModel)


@dataclass
class _CrudClient(BaseClient, Generic[RecordT]):
    path: str = ""
    record_type: type[BaseModel] = BaseModel

    def list_all(self) -> list[RecordT]:
        data = self._request("GET", self.path, operation="list")
        return [self._parse(item) for item in expect_list(data, f"{self.module} list")]

    def get(self, record_id: int) -> RecordT:
        data = self._request("GET", f"{self.path}/{record_id}", operation="get")
        return self._parse(expect_object(data, self.module))

    def create(self, record: RecordT | Mapping[str, Any]) -> RecordT:
        data = self._request("POST", self.path, json_body=self._dump(record), operation="create")
        return self._parse(expect_object(data, self.module))

    def update(self, record_id: int, record: RecordT | Mapping[str, Any]) -> RecordT:
        data = self._request("PUT", f"{self.path}/{record_id}", json_body=self._dump(record), operation="update")
        return self._parse(expect_object(data, self.module))

    def delete(self, record_id: int) -> None:
        self._request("DELETE", f"{self.path}/{record_id}", operation="delete")

    def _parse(self, data: Any) -> RecordT:
        return self.record_type.model_validate(data)  # type: ignore[return-value]

    def _dump(self, record: RecordT | Mapping[str, Any]) -> dict[str, Any]:
        model = record if isinstance(record, BaseModel) else self.record_type.model_validate(record)
        return model.model_dump(by_alias=True, mode="json", exclude_none=True)


@dataclass
class ProductsClient(_CrudClient[Product]):
    module: str = "products"
    path: str = "/produits"
    record_type: type[BaseModel] = Product


@dataclass
class CustomersClient(_CrudClient[Customer]):
    module: str = "customers"
    path: str = "/clients"
    record_type: type[BaseModel] = Customer
