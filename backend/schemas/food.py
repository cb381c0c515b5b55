from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from models.food import FoodCategory


# Input schema for adding a dish to the menu
class FoodCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: float = Field(ge=0)
    category: FoodCategory = FoodCategory.SPECIAL
    available: bool = True
    quantity_available: int = Field(0, ge=0)
    preparation_time: int = Field(15, ge=0)
    is_vegetarian: bool = False


# Partial update; only the fields that are sent change
class FoodUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    category: Optional[FoodCategory] = None
    available: Optional[bool] = None
    quantity_available: Optional[int] = Field(None, ge=0)
    preparation_time: Optional[int] = Field(None, ge=0)
    is_vegetarian: Optional[bool] = None


class FoodResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: float
    category: str
    available: bool
    quantity_available: int
    preparation_time: int
    is_vegetarian: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
