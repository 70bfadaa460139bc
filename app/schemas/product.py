from pydantic import BaseModel, Field, ConfigDict, computed_field
from datetime import datetime
from typing import Optional

from app.services.catalog_engine import (
    DEFAULT_CATEGORY,
    format_price,
    normalize_affiliate_url,
)


class ProductBase(BaseModel):
    """Base schema for Product with common attributes."""
    name: str = Field("", max_length=255, description="Product name")
    brand: str = Field("", max_length=255, description="Brand name")
    category: str = Field(DEFAULT_CATEGORY, max_length=64, description="Catalog category")
    price: float = Field(0, ge=0, description="Product price (must be non-negative)")
    available: bool = Field(True, description="Shown in the public catalog")
    affiliate_url: Optional[str] = Field(None, max_length=2048, description="Purchase link")
    image_url: Optional[str] = Field(None, max_length=2048, description="Public image URL")


class ProductCreate(ProductBase):
    """Schema for creating a new product. The code is generated when omitted."""
    code: Optional[str] = Field(None, max_length=32, description="Product code")


class ProductUpdate(BaseModel):
    """Schema for updating an existing product. All fields are optional."""
    code: Optional[str] = Field(None, max_length=32, description="Product code")
    name: Optional[str] = Field(None, max_length=255, description="Product name")
    brand: Optional[str] = Field(None, max_length=255, description="Brand name")
    category: Optional[str] = Field(None, max_length=64, description="Catalog category")
    price: Optional[float] = Field(None, ge=0, description="Product price")
    available: Optional[bool] = Field(None, description="Shown in the public catalog")
    affiliate_url: Optional[str] = Field(None, max_length=2048, description="Purchase link")
    image_url: Optional[str] = Field(None, max_length=2048, description="Public image URL")


class AvailabilityUpdate(BaseModel):
    """Schema for toggling product availability."""
    available: bool


class ProductResponse(ProductBase):
    """Schema for product response including all fields."""
    id: int
    code: str
    brand_id: Optional[int] = None
    brand_name: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def display_price(self) -> str:
        return format_price(self.price)

    @computed_field
    @property
    def affiliate_link(self) -> Optional[str]:
        return normalize_affiliate_url(self.affiliate_url)


class ProductListResponse(BaseModel):
    """Schema for product list response."""
    items: list[ProductResponse]
    total: int


class NextCodeResponse(BaseModel):
    """Code the next product in a category would receive."""
    category: str
    code: str
