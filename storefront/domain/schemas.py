# storefront/domain/schemas.py
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from storefront.utils.settings import DEFAULT_COUNTRY


class ProductOut(BaseModel):
    """Produkt z katalogu (response). Id jako string dla frontendu."""

    id: str
    name: str
    price: int
    description: str | None = None
    category: str | None = None
    imageUrl: str | None = None


class RegisterIn(BaseModel):
    """Schema dla rejestracji użytkownika."""

    email: str = Field(..., min_length=1, description="Email (klucz użytkownika)")
    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)
    country: str = Field(DEFAULT_COUNTRY, min_length=2, max_length=8, description="Kod kraju, np. KR")


class LoginIn(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserSessionOut(BaseModel):
    """Użytkownik + wariant eksperymentu i konfiguracja UI dla tego wariantu."""

    email: str
    name: str
    country: str
    variant: str
    uiConfig: Dict[str, Any]


class CartAddIn(BaseModel):
    """Schema dla dodawania produktu do koszyka (ilość +1)."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., min_length=1)
    product_id: int = Field(..., alias="productId", gt=0, description="ID produktu (musi być > 0)")


class CartUpdateIn(BaseModel):
    """Bezpośrednia zmiana ilości. quantity <= 0 usuwa linię."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., min_length=1)
    product_id: int = Field(..., alias="productId", gt=0)
    quantity: int


class CartLineOut(ProductOut):
    quantity: int


class SuccessOut(BaseModel):
    success: bool = True


class OrderCreate(BaseModel):
    """Schema dla tworzenia zamówienia z koszyka użytkownika."""

    email: str = Field(..., min_length=1)


class OrderCreatedOut(BaseModel):
    success: bool = True
    orderId: str


class OrderOut(BaseModel):
    """Zamówienie (response). items to snapshot z chwili zamówienia."""

    id: str
    user_email: str
    date: str
    total: int
    status: str
    items: List[Dict[str, Any]]
