"""Order and OrderItem models"""
from datetime import datetime

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from airdealer.database import Base


class Order(Base):
    """Order model - one purchase transaction placed by a customer"""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(BigInteger, ForeignKey("users.telegram_id"), nullable=False, index=True)
    status = Column(String(50), default="pending_admin_approval", nullable=False, index=True)
    payment_method = Column(String(50), nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    delivery_method = Column(String(50), nullable=True)
    delivery_address = Column(Text, nullable=True)
    delivery_cost = Column(Numeric(10, 2), nullable=True)
    final_total_amount = Column(Numeric(10, 2), nullable=True)
    admin_notes = Column(Text, nullable=True)  # latest note only, each transition note replaces it
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
    customer = relationship("Customer", back_populates="orders")


class OrderItem(Base):
    """OrderItem model - a product line, frozen at the price when ordered"""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    location_id = Column(Integer, ForeignKey("locations.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    reserved_quantity = Column(Integer, default=0, nullable=False)
    price_at_order = Column(Numeric(10, 2), nullable=False)

    # Relationships
    order = relationship("Order", back_populates="items")
