from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from storefront.api.v1.models.order_models import OrderSource, OrderStatus


class OrderItemIn(BaseModel):
    product: int
    quantity: int = Field(ge=1)


class CustomerInfo(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=100)
    phone: str = Field(min_length=1, max_length=50)
    address: str = Field(min_length=1)
    notes: Optional[str] = None


class OrderCreate(BaseModel):
    items: List[OrderItemIn] = []
    customer_info: Optional[CustomerInfo] = None
    order_source: OrderSource = OrderSource.website


class GuestOrderCreate(OrderCreate):
    customer_info: CustomerInfo


class OrderStatusUpdate(BaseModel):
    status: Optional[str] = None


class OrderUser(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str


class OrderProduct(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: float
    image: str


class OrderItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: Optional[int] = None
    product: Optional[OrderProduct] = None
    quantity: int
    price: float


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int] = None
    user: Optional[OrderUser] = None
    customer_info: Optional[CustomerInfo] = None
    items: List[OrderItemOut]
    total: float
    status: OrderStatus
    order_source: OrderSource
    created_at: datetime
    updated_at: datetime
