from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ProductCategory(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class ProductCategoryDetail(ProductCategory):
    description: str


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    price: float
    image: str
    stock: int
    category_id: int
    category: Optional[ProductCategory] = None
    created_at: datetime
    updated_at: datetime


class ProductDetail(ProductOut):
    category: Optional[ProductCategoryDetail] = None
