# backend/models/food.py
from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, CheckConstraint, func
from database import Base
import enum

class FoodCategory(str, enum.Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    SNACKS = "snacks"
    BEVERAGES = "beverages"
    DESSERTS = "desserts"
    SPECIAL = "special"

# A dish on the canteen menu. The current price is only read when an order is placed;
# orders keep their own copy of it.
class FoodItem(Base):
    __tablename__ = "food_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)
    price = Column(Float, CheckConstraint("price >= 0"), nullable=False)
    category = Column(String, nullable=False, default=FoodCategory.SPECIAL.value)
    available = Column(Boolean, nullable=False, default=True)

    # Portions left for today
    quantity_available = Column(Integer, CheckConstraint("quantity_available >= 0"), nullable=False, default=0)
    preparation_time = Column(Integer, nullable=False, default=15)  # minutes
    is_vegetarian = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
