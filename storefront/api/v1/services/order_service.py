"""Order placement and fulfilment tracking.

Placing an order is all-or-nothing. Every line item is validated against
current stock before anything is written. Stock is then taken with one
conditional UPDATE per product (``stock >= quantity`` in the WHERE clause), so
an order racing another for the same units fails cleanly instead of driving
stock negative. The decrements and the order row commit in one transaction.
"""

from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from storefront.api.v1.models.order_models import (
    TERMINAL_STATUSES,
    Order,
    OrderItem,
    OrderSource,
    OrderStatus,
)
from storefront.api.v1.models.product_models import Product
from storefront.api.v1.models.user_models import User
from storefront.core.exceptions import Forbidden, NotFound, ValidationError
from storefront.core.logging import get_logger

logger = get_logger(__name__)

VALID_STATUSES = [status.value for status in OrderStatus]


def _order_query():
    return select(Order).options(
        selectinload(Order.user),
        selectinload(Order.items).selectinload(OrderItem.product),
    )


async def get_order_by_id(order_id: int, db: AsyncSession) -> Optional[Order]:
    result = await db.execute(_order_query().where(Order.id == order_id).execution_options(populate_existing=True))
    return result.scalar_one_or_none()


async def create_order(
    items: List[dict],
    db: AsyncSession,
    user: Optional[User] = None,
    customer_info: Optional[dict] = None,
    order_source: OrderSource = OrderSource.website,
) -> Order:
    if not items:
        raise ValidationError("Order must contain at least one item")
    if user is None and not customer_info:
        raise ValidationError("Guest orders must include customer contact information")
    if order_source == OrderSource.admin and (user is None or not user.is_admin):
        raise Forbidden("Only admins can record admin orders")

    # Validation pass: nothing is written until every line item checks out
    products = {}
    requested = {}
    for item in items:
        product = products.get(item["product"]) or await db.get(Product, item["product"])
        if product is None:
            raise NotFound(f"Product not found: {item['product']}")

        products[product.id] = product
        requested[product.id] = requested.get(product.id, 0) + item["quantity"]
        if product.stock < requested[product.id]:
            raise ValidationError(f"Insufficient stock for {product.name}")

    # Price snapshot per line item
    total = 0.0
    order_items = []
    for item in items:
        product = products[item["product"]]
        order_items.append(OrderItem(product_id=product.id, quantity=item["quantity"], price=product.price))
        total += product.price * item["quantity"]

    for product_id, quantity in requested.items():
        result = await db.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            name = products[product_id].name
            await db.rollback()
            raise ValidationError(f"Insufficient stock for {name}")

    order = Order(
        user_id=user.id if user is not None else None,
        items=order_items,
        total=total,
        status=OrderStatus.pending,
        order_source=order_source,
    )
    if customer_info:
        order.customer_name = customer_info["name"]
        order.customer_phone = customer_info["phone"]
        order.customer_address = customer_info["address"]
        order.customer_notes = customer_info.get("notes")

    db.add(order)
    await db.commit()

    # The conditional UPDATEs bypassed the identity map
    for product in products.values():
        await db.refresh(product, ["stock"])

    logger.info(
        "order_created",
        order_id=order.id,
        user_id=order.user_id,
        items=len(order_items),
        total=total,
        source=order.order_source.value,
    )
    return await get_order_by_id(order.id, db)


async def get_order(order_id: int, requester: User, db: AsyncSession) -> Order:
    order = await get_order_by_id(order_id, db)
    if order is None:
        raise NotFound("Order not found")

    if order.user_id != requester.id and not requester.is_admin:
        raise Forbidden("Not authorized to view this order")
    return order


async def update_order_status(order_id: int, new_status: Optional[str], db: AsyncSession) -> Order:
    if not new_status:
        raise ValidationError("Please provide order status")
    if new_status not in VALID_STATUSES:
        raise ValidationError("Invalid order status")
    status = OrderStatus(new_status)

    order = await get_order_by_id(order_id, db)
    if order is None:
        raise NotFound("Order not found")

    if order.status == status:
        return order
    if order.status in TERMINAL_STATUSES:
        raise ValidationError(f"Order is already {order.status.value}")

    previous = order.status
    order.status = status
    await db.commit()

    logger.info("order_status_updated", order_id=order.id, previous=previous.value, status=status.value)
    return await get_order_by_id(order.id, db)


async def list_orders(db: AsyncSession, status: Optional[OrderStatus] = None):
    query = _order_query()
    if status is not None:
        query = query.where(Order.status == status)
    result = await db.execute(query.order_by(Order.created_at.desc(), Order.id.desc()))
    return result.scalars().all()


async def list_my_orders(user: User, db: AsyncSession):
    result = await db.execute(
        _order_query().where(Order.user_id == user.id).order_by(Order.created_at.desc(), Order.id.desc())
    )
    return result.scalars().all()
