"""Request payload schemas for the HTTP API and CLI imports."""

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..models.stock_in import PaymentStatus
from ..utils.dates import to_naive_utc

EMAIL_PATTERN = re.compile(r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$")


class Payload(BaseModel):
    """Base payload: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="forbid"
    )


def _normalize_datetime(value: Optional[datetime]) -> Optional[datetime]:
    return to_naive_utc(value) if value is not None else None


def _validate_email(value: Optional[str]) -> Optional[str]:
    if value and not EMAIL_PATTERN.match(value):
        raise ValueError("Please add a valid email")
    return value


# ------------------------------------------------------------------
# Products
# ------------------------------------------------------------------

class ProductCreate(Payload):
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    unit_price: float = Field(ge=0)
    current_stock: int = 0
    min_stock_level: Optional[int] = Field(default=None, ge=0)
    description: Optional[str] = None


class ProductUpdate(Payload):
    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = Field(default=None, min_length=1)
    unit_price: Optional[float] = Field(default=None, ge=0)
    current_stock: Optional[int] = None
    min_stock_level: Optional[int] = Field(default=None, ge=0)
    description: Optional[str] = None


# ------------------------------------------------------------------
# Suppliers
# ------------------------------------------------------------------

class SupplierCreate(Payload):
    name: str = Field(min_length=1)
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, value: Optional[str]) -> Optional[str]:
        return _validate_email(value)


class SupplierUpdate(Payload):
    """Editable supplier fields; ``totalDebt`` is maintained by the ledger only."""

    name: Optional[str] = Field(default=None, min_length=1)
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, value: Optional[str]) -> Optional[str]:
        return _validate_email(value)


# ------------------------------------------------------------------
# Stock-In
# ------------------------------------------------------------------

class StockInCreate(Payload):
    product: str = Field(min_length=1)
    supplier: str = Field(min_length=1)
    quantity: int = Field(ge=1)
    unit_price: float = Field(ge=0)
    total_amount: Optional[float] = Field(default=None, ge=0)
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    amount_paid: Optional[float] = None
    delivery_date: Optional[datetime] = None
    notes: Optional[str] = None

    @field_validator("delivery_date")
    @classmethod
    def normalize_delivery_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _normalize_datetime(value)


class StockInUpdate(Payload):
    """Stock-In changes. ``product`` and ``quantity`` are accepted only to be refused."""

    product: Optional[str] = None
    quantity: Optional[int] = None
    payment_status: Optional[PaymentStatus] = None
    amount_paid: Optional[float] = None
    delivery_date: Optional[datetime] = None
    notes: Optional[str] = None

    @field_validator("delivery_date")
    @classmethod
    def normalize_delivery_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _normalize_datetime(value)


# ------------------------------------------------------------------
# Stock-Out
# ------------------------------------------------------------------

class StockOutCreate(Payload):
    product: str = Field(min_length=1)
    quantity: int = Field(ge=1)
    sale_price: float = Field(ge=0)
    total_amount: Optional[float] = Field(default=None, ge=0)
    customer: Optional[str] = None
    sale_date: Optional[datetime] = None
    notes: Optional[str] = None

    @field_validator("sale_date")
    @classmethod
    def normalize_sale_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _normalize_datetime(value)


class StockOutUpdate(Payload):
    """Stock-Out changes. ``product`` and ``quantity`` are accepted only to be refused."""

    product: Optional[str] = None
    quantity: Optional[int] = None
    sale_price: Optional[float] = Field(default=None, ge=0)
    total_amount: Optional[float] = Field(default=None, ge=0)
    customer: Optional[str] = None
    sale_date: Optional[datetime] = None
    notes: Optional[str] = None

    @field_validator("sale_date")
    @classmethod
    def normalize_sale_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _normalize_datetime(value)
