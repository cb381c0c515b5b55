# backend/routes/orders.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session
import logging

from database import get_db
from models.users import User
from models.order import Order, OrderStatus
from schemas.order import (
    OrderCreatePayload, OrderItemOut, OrderList, OrderResponse, OrderStats, OrderStatusPatch,
)
from services import orders as order_service
from utils.audit import client_ip, write_log
from utils.errors import CanteenError
from utils.tokenJWT import get_current_user

router = APIRouter(prefix="/orders", tags=["Orders"])
logger = logging.getLogger(__name__)


# Map Order model to OrderResponse schema
def _order_to_out(order: Order) -> OrderResponse:
    items: List[OrderItemOut] = []
    for it in order.items:
        food_name = it.food.name if it.food else "Removed item"
        items.append(OrderItemOut(
            food_id=it.food_id,
            food_name=food_name,
            quantity=it.quantity,
            unit_price=it.unit_price,
            line_total=round(it.quantity * it.unit_price, 2),
            notes=it.notes,
        ))
    return OrderResponse(
        id=order.id,
        order_number=order.order_number,
        user_id=order.user_id,
        status=order.status,
        total_amount=round(order.total_amount, 2),
        payment_method=order.payment_method,
        pickup_time=order.pickup_time,
        notes=order.notes,
        created_at=order.created_at,
        completed_at=order.completed_at,
        cancelled_at=order.cancelled_at,
        items=items,
    )


# Place an order from a list of menu items
@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: OrderCreatePayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        order = order_service.create_order(
            db,
            current_user,
            payload.items,
            payment_method=payload.payment_method,
            pickup_time=payload.pickup_time,
            notes=payload.notes,
        )
    except CanteenError as e:
        write_log(db, user_id=current_user.id, action="ORDER_CREATE", resource="orders", status="FAIL",
                  ip=client_ip(request), meta={"reason": e.code, "message": e.message})
        raise

    write_log(db, user_id=current_user.id, action="ORDER_CREATE", resource="orders", status="SUCCESS",
              ip=client_ip(request), meta={"order_id": order.id, "total": order.total_amount})
    return _order_to_out(order_service.get_order(db, order.id, current_user))


# Staff see every order, everyone else only their own
@router.get("", response_model=OrderList)
def list_orders(
    status: Optional[OrderStatus] = Query(None, description="Filter by status"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    orders = order_service.list_orders(db, current_user, status=status)
    return {"items": [_order_to_out(o) for o in orders], "count": len(orders)}


# Dashboard figures (staff/admin only). Declared before /{order_id} so "stats" is not parsed as an id.
@router.get("/stats", response_model=OrderStats)
def get_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return order_service.get_stats(db, current_user)


# Get details of a specific order
@router.get("/{order_id}", response_model=OrderResponse)
def get_order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _order_to_out(order_service.get_order(db, order_id, current_user))


# Move an order along its lifecycle, or cancel it
@router.patch("/{order_id}/status", response_model=OrderResponse)
@router.put("/{order_id}", response_model=OrderResponse)
def update_order_status(
    order_id: int,
    payload: OrderStatusPatch,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    new_status = payload.status.value
    try:
        order = order_service.update_status(db, order_id, new_status, current_user)
    except CanteenError as e:
        write_log(db, user_id=current_user.id, action="ORDER_STATUS_CHANGE", resource="orders", status="FAIL",
                  ip=client_ip(request), meta={"order_id": order_id, "new": new_status, "reason": e.code})
        raise

    write_log(db, user_id=current_user.id, action="ORDER_STATUS_CHANGE", resource="orders", status="SUCCESS",
              ip=client_ip(request), meta={"order_id": order.id, "new": new_status})
    return _order_to_out(order)
