# backend/models/order.py
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base
import enum

# Enum for order lifecycle states, in progression order
class OrderStatus(str, enum.Enum):
    PLACED = "placed"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class PaymentMethod(str, enum.Enum):
    ONLINE = "online"
    CASH = "cash"

class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String, unique=True, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String, nullable=False, default=OrderStatus.PLACED.value, index=True)
    total_amount = Column(Float, nullable=False)
    payment_method = Column(String, nullable=False, default=PaymentMethod.CASH.value)

    # Pickup details
    pickup_time = Column(DateTime(timezone=True), nullable=True)
    notes = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), index=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
    user = relationship("User")

class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    food_id = Column(Integer, ForeignKey("food_items.id"), nullable=False)
    quantity = Column(Integer, CheckConstraint("quantity >= 1"), nullable=False)
    # Price per portion at the moment of ordering
    unit_price = Column(Float, nullable=False)
    notes = Column(String, nullable=True)

    order = relationship("Order", back_populates="items")
    food = relationship("FoodItem")
