"""Database models for sieveql tests (shared)."""

import enum
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, JSON, String
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    """Base class for test models."""
    pass


class Customer(Base):
    __tablename__ = 'customers'

    id = Column(Integer, primary_key=True, comment='Customer primary key')
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=True)
    is_vip = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc).replace(tzinfo=None))

    orders = relationship("Order", back_populates="customer")


class OrderStatus(enum.Enum):
    ACTIVE = 'ACTIVE'
    SHIPPED = 'SHIPPED'
    CANCELLED = 'CANCELLED'


class Order(Base):
    __tablename__ = 'orders'

    id = Column(Integer, primary_key=True, comment='Order primary key')
    customer_id = Column(Integer, ForeignKey('customers.id'), nullable=False)
    status = Column(SAEnum(OrderStatus, native_enum=False, name='order_status'), nullable=False)
    total = Column(Float, nullable=False, default=0.0)
    note = Column(String(255), nullable=True)
    placed_at = Column(DateTime, nullable=False)
    # Not mapped to any ScalarKind; kept to exercise the unknown-kind fallback
    extra = Column(JSON, nullable=True)

    customer = relationship("Customer", back_populates="orders")
    items = relationship("OrderItem", back_populates="order")


class Product(Base):
    __tablename__ = 'products'

    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    price = Column(Float, nullable=False)


class OrderItem(Base):
    __tablename__ = 'order_items'

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey('orders.id'), nullable=False)
    product_id = Column(Integer, ForeignKey('products.id'), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")
