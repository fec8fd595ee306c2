# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Generic, List, Literal, Optional, TypeVar
from decimal import Decimal
from datetime import datetime


T = TypeVar("T")

#zakres kolumny INTEGER w bazie, wieksze ID nie moga dojsc do SQL
MAX_ID = 2**31 - 1


class Envelope(BaseModel, Generic[T]):
    """Wspolny format odpowiedzi: success, message, data."""

    success: bool = True
    message: str = ""
    data: Optional[T] = None


class ErrorOut(BaseModel):
    """Schema dla bledu (response)."""

    success: bool = False
    message: str


class CartItemIn(BaseModel):
    """Schema dla zmiany ilosci produktu w koszyku. Ujemna ilosc zmniejsza."""

    product_id: int = Field(..., gt=0, le=MAX_ID, alias="productId", description="ID produktu (wersji jezykowej)")
    quantity: int = Field(1, ge=-MAX_ID, le=MAX_ID, description="Zmiana ilosci (nie moze byc 0)")

    model_config = ConfigDict(populate_by_name=True)


class CartLineOut(BaseModel):
    """Schema dla linii koszyka (response)."""

    id: int
    user_id: int
    product_id: int
    quantity: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class CartItemResult(BaseModel):
    """Linia koszyka po zmianie + dane o lacznym zapasie."""

    line: CartLineOut | None
    combined_stock_available: int
    total_quantity_in_cart_all_variants: int
    is_combined_product: bool


class CartProductOut(BaseModel):
    id: int
    name: str
    locale: str
    price: Decimal
    offer_price: Decimal | None = None

    model_config = ConfigDict(from_attributes=True)


class CartEntryOut(BaseModel):
    id: int
    quantity: int
    product: CartProductOut

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    """Schema dla koszyka (response)."""

    user_id: int
    products: List[CartEntryOut]
    total_items_in_cart: int


class CartSummaryOut(BaseModel):
    user_id: int
    line_count: int
    total_items_in_cart: int
    subtotal: Decimal


class ProductCreate(BaseModel):
    """Schema dla tworzenia produktu."""

    name: str = Field(..., min_length=1, max_length=200)
    locale: str = Field("en", min_length=2, max_length=10)
    category: Literal["eyewear", "contact-lens", "accessory"] = "eyewear"
    stock: int = Field(0, ge=0)
    in_stock: bool = Field(True, alias="inStock")
    is_active: bool = Field(True, alias="isActive")
    price: Decimal = Field(..., ge=0)
    offer_price: Decimal | None = Field(None, ge=0, alias="offerPrice")
    localization_of: int | None = Field(None, gt=0, le=MAX_ID, description="ID produktu, ktorego to jest wersja jezykowa")

    model_config = ConfigDict(populate_by_name=True)


class ProductOut(BaseModel):
    """Schema dla produktu (response)."""

    id: int
    name: str
    locale: str
    category: str
    stock: int | None
    in_stock: bool
    is_active: bool
    price: Decimal
    offer_price: Decimal | None = None
    localizations: List[int] = []


class VariantStockOut(BaseModel):
    id: int
    locale: str
    stock: int
    available_stock: int
    in_stock: bool
    is_active: bool


class ProductStockOut(BaseModel):
    product_id: int
    is_active: bool
    in_stock: bool
    is_combined_product: bool
    combined_stock_total: int
    combined_stock_available: int
    variants: List[VariantStockOut]


class UserCreate(BaseModel):
    """Schema dla tworzenia użytkownika."""

    id: int = Field(..., gt=0, le=MAX_ID, description="ID użytkownika (musi być > 0)")
    name: str = Field(..., min_length=1, max_length=100, description="Imię użytkownika")
    email: str | None = Field(None, max_length=200)
    phone: str | None = Field(None, max_length=32)


class UserRead(BaseModel):
    """Schema dla użytkownika (response)."""

    id: int
    name: str
    email: str | None = None
    phone: str | None = None

    model_config = ConfigDict(from_attributes=True)
