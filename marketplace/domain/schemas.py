# marketplace/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, EmailStr
from typing import List
from decimal import Decimal
from datetime import datetime


class ProductOut(BaseModel):
    """Produkt z katalogu (response)."""

    id: int
    vendor_id: int
    name: str
    description: str = ""
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class ProductIn(BaseModel):
    """Nowy produkt. vendor_id ustawia tylko admin, vendor zawsze dostaje swoje id."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=5000)
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    vendor_id: int | None = Field(None, gt=0)


class ProductUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    price: Decimal | None = Field(None, gt=0, max_digits=10, decimal_places=2)


class ItemIn(BaseModel):
    """Dodanie produktu do koszyka."""

    product_id: int = Field(..., gt=0)
    # strict: bez zamiany true -> 1 i "2" -> 2
    quantity: int = Field(..., gt=0, strict=True)


class QuantityIn(BaseModel):
    quantity: int = Field(..., gt=0, strict=True)


class CartItemOut(BaseModel):
    product_id: int
    quantity: int
    product: ProductOut | None = None


class CartOut(BaseModel):
    cart_id: int
    user_id: int
    items: List[CartItemOut]


class OrderCreate(BaseModel):
    """Dane zamowienia - core ich nie interpretuje, tylko zapisuje."""

    shipping_name: str = Field(..., min_length=1, max_length=200)
    shipping_address: str = Field(..., min_length=1, max_length=1000)
    contact_email: EmailStr
    contact_phone: str | None = Field(None, max_length=40)
    # token autoryzacji platnosci z zewnetrznego serwisu
    payment_token: str | None = Field(None, max_length=255)


class OrderItemOut(BaseModel):
    product_id: int
    vendor_id: int
    quantity: int
    price: Decimal
    subtotal: Decimal
    product: ProductOut | None = None


class OrderOut(BaseModel):
    id: int
    user_id: int
    status: str
    total: Decimal
    details: dict
    created_at: datetime
    items: List[OrderItemOut]


class StatusUpdate(BaseModel):
    status: str = Field(..., min_length=1)
