from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime

from models.order import OrderStatus, PaymentMethod


# One line of a checkout request
class OrderItemCreate(BaseModel):
    food_id: int = Field(alias="foodItemId")
    quantity: int = Field(ge=1)
    notes: Optional[str] = None

    class Config:
        populate_by_name = True


# Input schema for placing an order
class OrderCreatePayload(BaseModel):
    items: List[OrderItemCreate] = []
    payment_method: PaymentMethod = Field(PaymentMethod.CASH, alias="paymentMethod")
    pickup_time: Optional[datetime] = Field(None, alias="pickupTime")
    notes: Optional[str] = None

    class Config:
        populate_by_name = True


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    food_id: int
    food_name: str
    quantity: int
    unit_price: float
    line_total: float
    notes: Optional[str] = None


# Output schema representing the full order details
class OrderResponse(BaseModel):
    id: int
    order_number: str
    user_id: int
    status: OrderStatus
    total_amount: float
    payment_method: str
    pickup_time: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    items: List[OrderItemOut]


class OrderList(BaseModel):
    items: List[OrderResponse]
    count: int


# Schema for updating order status
class OrderStatusPatch(BaseModel):
    status: OrderStatus


# Aggregate figures for the canteen dashboard
class OrderStats(BaseModel):
    total_orders: int
    today_orders: int
    total_revenue: float
    status_breakdown: Dict[str, int]
