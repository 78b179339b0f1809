from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator


class Role(str, Enum):
    ADMIN = "ADMIN"
    SELLER = "VENDEUR"
    CUSTOMER = "CLIENT"

    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            normalized = value.strip().upper()
            for member in cls:
                if normalized in {member.name, member.value}:
                    return member
        return None

    @property
    def register_path(self) -> str:
        return self.value.lower()


class OrderStatus(str, Enum):
    PENDING = "EN_ATTENTE"
    VALIDATED = "VALIDEE"
    REJECTED = "REFUSEE"

    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            normalized = value.strip().upper()
            for member in cls:
                if normalized in {member.name, member.value}:
                    return member
        return None

    @property
    def is_terminal(self) -> bool:
        return self is not OrderStatus.PENDING


class LoginRequest(BaseModel):
    username: str
    password: str


class RegisterRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    """Both the access/refresh token shape and the legacy single ``token`` shape."""

    model_config = ConfigDict(populate_by_name=True)

    access_token: str | None = Field(default=None, alias="accessToken")
    refresh_token: str | None = Field(default=None, alias="refreshToken")
    token_type: str | None = Field(default=None, alias="tokenType")
    expires_in: int | None = Field(default=None, alias="expiresIn")
    token: str | None = None
    username: str | None = None
    role: str | None = None
    customer_id: int | None = Field(default=None, alias="id_client")

    @property
    def credential(self) -> str | None:
        return self.access_token or self.token


class RefreshRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str = Field(alias="refreshToken")


class Product(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int | None = Field(default=None, alias="id_produit")
    reference: str | None = Field(default=None, alias="ref_produit")
    label: str | None = Field(default=None, alias="libelle_produit")
    unit_price: Decimal = Field(default=Decimal("0"), alias="prix_unitaire")
    stock_quantity: int | None = Field(default=None, alias="qte_stock")
    image_url: str | None = Field(default=None, alias="imageUrl")


class Customer(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int | None = Field(default=None, alias="id_client")
    last_name: str | None = Field(default=None, alias="nom_client")
    first_name: str | None = Field(default=None, alias="prenom_client")
    phone: str | None = Field(default=None, alias="telephone")


class SellerRef(BaseModel):
    model_config = ConfigDict(extra="ignore")

    username: str


class OrderLine(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int | None = Field(default=None, alias="id_ligne_facture")
    product: Product | None = Field(default=None, alias="produit")
    product_id: int | None = Field(default=None, alias="id_produit")
    quantity: int = Field(alias="qte")

    @property
    def unit_price(self) -> Decimal:
        if self.product is None:
            return Decimal("0")
        return self.product.unit_price

    @property
    def resolved_product_id(self) -> int | None:
        if self.product_id is not None:
            return self.product_id
        return self.product.id if self.product else None


class Order(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int | None = Field(default=None, alias="id_facture")
    reference: str | None = Field(default=None, alias="ref_facture")
    date: datetime | None = Field(default=None, alias="date_facture")
    status: OrderStatus = OrderStatus.PENDING
    customer: Customer | None = Field(default=None, alias="client")
    seller: SellerRef | None = Field(default=None, alias="vendeur")
    lines: List[OrderLine] = Field(default_factory=list, alias="ligneFactures")

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: object) -> object:
        if isinstance(value, str):
            return OrderStatus(value)
        return value

    @computed_field
    @property
    def total_amount(self) -> Decimal:
        return sum((line.unit_price * line.quantity for line in self.lines), Decimal("0"))

    @property
    def customer_id(self) -> int | None:
        return self.customer.id if self.customer else None


class OrderLineRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: int = Field(alias="id_produit")
    quantity: int = Field(alias="qte", gt=0)


class OrderCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_id: int = Field(alias="id_client")
    lines: List[OrderLineRequest] = Field(alias="ligneFactures", min_length=1)


class StatusUpdateRequest(BaseModel):
    status: OrderStatus

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, value: object) -> object:
        if isinstance(value, str):
            return OrderStatus(value)
        return value


class Session(BaseModel):
    """Snapshot of the authenticated identity."""

    model_config = ConfigDict(frozen=True)

    credential: str = Field(min_length=1)
    username: Optional[str] = None
    role: Role
    customer_id: Optional[int] = None
    refresh_credential: Optional[str] = None

    @field_validator("role", mode="before")
    @classmethod
    def _coerce_role(cls, value: object) -> object:
        if isinstance(value, str):
            return Role(value)
        return value

    @model_validator(mode="after")
    def _customer_has_id(self) -> "Session":
        if self.role is Role.CUSTOMER and self.customer_id is None:
            raise ValueError("customer sessions require a customer id")
        return self
