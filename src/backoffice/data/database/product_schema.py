"""Catalog schemas for API validation."""
from pydantic import BaseModel, Field, ValidationInfo, field_validator
from typing import Optional, List
from decimal import Decimal
from datetime import datetime
from urllib.parse import urlparse
from backoffice.data.database.connection import MAX_DB_INT


def _validate_image_urls(images: Optional[List[str]]) -> Optional[List[str]]:
    if images is None:
        return images
    for url in images:
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid image URL: {url}")
    return images


def _validate_product_name(name: Optional[str]) -> Optional[str]:
    if name is None:
        return name
    name = name.strip()
    if len(name) < 3:
        raise ValueError("Product name must be at least 3 characters")
    return name


def _strip_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    return value or None


class CategoryCreate(BaseModel):
    """Schema for creating or renaming a category."""
    name: str = Field(..., min_length=2, max_length=100, description="Category name")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Category name must be at least 2 characters")
        return v


class CategoryUpdate(CategoryCreate):
    """Schema for renaming a category."""
    pass


class CategoryResponse(BaseModel):
    """Schema for category response."""
    id: int
    name: str
    created_at: datetime

    class Config:
        from_attributes = True


class ProductBase(BaseModel):
    """Base product schema with common fields."""
    name: str = Field(..., min_length=3, max_length=255, description="Product name")
    description: Optional[str] = Field(None, description="Product description")
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, description="Product price")
    category_id: Optional[int] = Field(None, le=MAX_DB_INT, description="Category ID")
    barcode: Optional[str] = Field(None, max_length=100, description="Barcode (unique if present)")
    images: List[str] = Field(..., min_length=1, description="Ordered list of image URLs")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _validate_product_name(v)

    @field_validator("images")
    @classmethod
    def validate_images(cls, v):
        return _validate_image_urls(v)

    @field_validator("barcode")
    @classmethod
    def validate_barcode(cls, v):
        return _strip_optional(v)


class ProductCreate(ProductBase):
    """Schema for creating a new product."""
    stock: int = Field(0, ge=0, le=MAX_DB_INT, description="Initial stock quantity")


class ProductUpdate(BaseModel):
    """Schema for updating a product (all fields optional, stock excluded)."""
    name: Optional[str] = Field(None, min_length=3, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    category_id: Optional[int] = Field(None, le=MAX_DB_INT)
    barcode: Optional[str] = Field(None, max_length=100)
    images: Optional[List[str]] = Field(None, min_length=1)

    @field_validator("name", "price", "images", mode="before")
    @classmethod
    def reject_null(cls, v, info: ValidationInfo):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _validate_product_name(v)

    @field_validator("images")
    @classmethod
    def validate_images(cls, v):
        return _validate_image_urls(v)

    @field_validator("barcode")
    @classmethod
    def validate_barcode(cls, v):
        return _strip_optional(v)


class ProductResponse(ProductBase):
    """Schema for product response."""
    id: int
    stock: int
    category: Optional[CategoryResponse] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class StockAdjustment(BaseModel):
    """Signed stock delta for restock or correction."""
    adjustment: int = Field(..., ge=-MAX_DB_INT, le=MAX_DB_INT, description="Amount to add to stock (negative to remove)")
