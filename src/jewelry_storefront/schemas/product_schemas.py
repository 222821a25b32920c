from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ProductListRequest(BaseModel):
    """Catalog filters taken from the query string"""
    category_id: Optional[int] = Field(default=None, gt=0)
    search: Optional[str] = Field(default=None, max_length=100)
    in_stock: Optional[bool] = None


class ProductCreateRequest(BaseModel):
    """Admin product form; prices are entered in dollars"""
    name: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    category_id: Optional[int] = Field(default=None, gt=0)
    b2c_price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    b2b_price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    min_quantity_b2b: int = Field(default=1, ge=1, le=10000)
    in_stock: bool = True
    image_url: Optional[str] = Field(default=None, max_length=1000)
    sku: Optional[str] = Field(default=None, max_length=50)
    material: Optional[str] = Field(default=None, max_length=100)

    @field_validator("sku")
    @classmethod
    def normalize_sku(cls, v):
        return v.upper() if v else v


class ProductUpdateRequest(ProductCreateRequest):
    """Same fields as creation; the admin form always posts the full product"""


class CategoryCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(default="", max_length=1000)
    image_url: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        return v.strip()
