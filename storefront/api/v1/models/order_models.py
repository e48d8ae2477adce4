import enum

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from storefront.core.db import Base, utcnow


class OrderStatus(str, enum.Enum):
    pending = "pending"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


TERMINAL_STATUSES = {OrderStatus.delivered, OrderStatus.cancelled}


class OrderSource(str, enum.Enum):
    website = "website"
    whatsapp = "whatsapp"
    admin = "admin"


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("total >= 0", name="ck_orders_total_non_negative"),
        Index("ix_orders_user_id_status", "user_id", "status"),
    )

    id = Column(Integer, primary_key=True)
    # Null for guest orders, which carry the contact fields instead
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    customer_name = Column(String(100))
    customer_phone = Column(String(50))
    customer_address = Column(Text)
    customer_notes = Column(Text)
    total = Column(Float, nullable=False)
    status = Column(Enum(OrderStatus), default=OrderStatus.pending, nullable=False)
    order_source = Column(Enum(OrderSource), default=OrderSource.website, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", lazy="raise")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan", lazy="raise", order_by="OrderItem.id")

    @property
    def customer_info(self):
        if self.customer_name is None:
            return None
        return {
            "name": self.customer_name,
            "phone": self.customer_phone,
            "address": self.customer_address,
            "notes": self.customer_notes,
        }


class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = (CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),)

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True)
    quantity = Column(Integer, nullable=False)
    # Unit price captured when the order was placed
    price = Column(Float, nullable=False)

    order = relationship("Order", back_populates="items", lazy="raise")
    product = relationship("Product", lazy="raise")
