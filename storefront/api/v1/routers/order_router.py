from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.v1.models.order_models import OrderStatus
from storefront.api.v1.schema.order_schema import GuestOrderCreate, OrderCreate, OrderOut, OrderStatusUpdate
from storefront.api.v1.services import order_service
from storefront.core.db import get_db
from storefront.core.responses import envelope
from storefront.utils.get_user import get_admin_user, get_current_user

router = APIRouter(prefix="/orders", tags=["Orders"])


def _items(payload: OrderCreate):
    return [item.model_dump() for item in payload.items]


def _customer_info(payload: OrderCreate):
    return payload.customer_info.model_dump() if payload.customer_info else None


@router.get("")
async def list_orders(
    status: Optional[OrderStatus] = None,
    db: AsyncSession = Depends(get_db),
    admin=Depends(get_admin_user),
):
    orders = await order_service.list_orders(db, status=status)
    return envelope([OrderOut.model_validate(o) for o in orders], count=len(orders))


@router.post("", status_code=201)
async def create_order(payload: OrderCreate, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    order = await order_service.create_order(
        _items(payload),
        db,
        user=user,
        customer_info=_customer_info(payload),
        order_source=payload.order_source,
    )
    return envelope(OrderOut.model_validate(order))


@router.post("/guest", status_code=201)
async def create_guest_order(payload: GuestOrderCreate, db: AsyncSession = Depends(get_db)):
    order = await order_service.create_order(
        _items(payload),
        db,
        customer_info=_customer_info(payload),
        order_source=payload.order_source,
    )
    return envelope(OrderOut.model_validate(order))


# Declared before /{order_id} so the literal path wins
@router.get("/my-orders")
async def my_orders(db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    orders = await order_service.list_my_orders(user, db)
    return envelope([OrderOut.model_validate(o) for o in orders], count=len(orders))


@router.get("/{order_id}")
async def get_order(order_id: int, db: AsyncSession = Depends(get_db), user=Depends(get_current_user)):
    order = await order_service.get_order(order_id, user, db)
    return envelope(OrderOut.model_validate(order))


@router.put("/{order_id}")
async def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
    admin=Depends(get_admin_user),
):
    order = await order_service.update_order_status(order_id, payload.status, db)
    return envelope(OrderOut.model_validate(order))
