# backend/services/orders.py
import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from database import guard_store
from models.food import FoodItem
from models.order import Order, OrderItem, OrderStatus, PaymentMethod
from models.users import User
from schemas.order import OrderItemCreate, OrderStats
from utils import permissions
from utils.errors import (
    EmptyOrder, Forbidden, InvalidItem, InvalidTransition, OrderNotFound, ValidationError,
)

logger = logging.getLogger(__name__)

PROGRESSION = [
    OrderStatus.PLACED.value,
    OrderStatus.PREPARING.value,
    OrderStatus.READY.value,
    OrderStatus.COMPLETED.value,
]
TERMINAL = {OrderStatus.COMPLETED.value, OrderStatus.CANCELLED.value}


def _status_value(status) -> str:
    return status.value if isinstance(status, OrderStatus) else str(status)


def is_valid_transition(current: str, new: str) -> bool:
    """Orders move one step forward at a time, or get cancelled before completion."""
    current, new = _status_value(current), _status_value(new)
    if current in TERMINAL or current not in PROGRESSION:
        return False
    if new == OrderStatus.CANCELLED.value:
        return True
    position = PROGRESSION.index(current)
    return position + 1 < len(PROGRESSION) and PROGRESSION[position + 1] == new


def generate_order_number() -> str:
    return f"ORD{uuid.uuid4().hex[:10].upper()}"


def _with_items(db: Session):
    return db.query(Order).options(joinedload(Order.items).joinedload(OrderItem.food))


def create_order(
    db: Session,
    owner: User,
    items: Sequence[OrderItemCreate],
    payment_method=PaymentMethod.CASH,
    pickup_time: Optional[datetime] = None,
    notes: Optional[str] = None,
) -> Order:
    if not items:
        raise EmptyOrder()
    try:
        payment_value = PaymentMethod(payment_method).value
    except ValueError:
        raise ValidationError(f"Unknown payment method: {payment_method}")

    total = 0.0
    order_items: List[OrderItem] = []

    with guard_store(db, "order creation"):
        for line in items:
            if line.quantity is None or line.quantity < 1:
                raise InvalidItem(f"Invalid quantity for food item {line.food_id}")

            food = db.query(FoodItem).filter(FoodItem.id == line.food_id).with_for_update().first()
            if food is None or not food.available:
                raise InvalidItem(f"Food item {line.food_id} not found")
            if food.quantity_available < line.quantity:
                raise InvalidItem(f"Insufficient quantity for {food.name}")

            # Reserve stock; released again if the order is cancelled
            food.quantity_available -= line.quantity
            total += line.quantity * food.price
            order_items.append(OrderItem(
                food_id=food.id, quantity=line.quantity, unit_price=food.price, notes=line.notes
            ))

        order = Order(
            order_number=generate_order_number(),
            user_id=owner.id,
            status=OrderStatus.PLACED.value,
            total_amount=round(total, 2),
            payment_method=payment_value,
            pickup_time=pickup_time,
            notes=notes,
            items=order_items,
        )
        db.add(order)
        db.commit()
        db.refresh(order)

    logger.info("Order %s placed by user %s, total %.2f", order.order_number, owner.id, order.total_amount)
    return order


def list_orders(db: Session, requester: User, status: Optional[str] = None) -> List[Order]:
    with guard_store(db, "order listing"):
        q = _with_items(db)
        if not permissions.can_view_all_orders(requester):
            q = q.filter(Order.user_id == requester.id)
        if status:
            q = q.filter(Order.status == _status_value(status))
        return q.order_by(Order.created_at.desc(), Order.id.desc()).all()


def get_order(db: Session, order_id: int, requester: User) -> Order:
    with guard_store(db, "order lookup"):
        order = _with_items(db).filter(Order.id == order_id).first()
    if order is None:
        raise OrderNotFound()
    if not permissions.can_view_order(requester, order):
        raise Forbidden("Not authorized to view this order")
    return order


def _release_stock(db: Session, order: Order) -> None:
    for item in order.items:
        food = db.query(FoodItem).filter(FoodItem.id == item.food_id).with_for_update().first()
        if food is not None:
            food.quantity_available += item.quantity


def update_status(db: Session, order_id: int, new_status, requester: User) -> Order:
    new_status = _status_value(new_status)

    with guard_store(db, "order status update"):
        order = db.query(Order).filter(Order.id == order_id).with_for_update().first()
        if order is None:
            raise OrderNotFound()
        if not permissions.can_change_status(requester, order, new_status):
            raise Forbidden("Not authorized to change this order")

        old_status = order.status
        if not is_valid_transition(old_status, new_status):
            raise InvalidTransition(old_status, new_status)

        order.status = new_status
        if new_status == OrderStatus.COMPLETED.value:
            order.completed_at = func.now()
        elif new_status == OrderStatus.CANCELLED.value:
            order.cancelled_at = func.now()
            _release_stock(db, order)
        db.commit()

    logger.info("Order %s: %s -> %s by user %s", order_id, old_status, new_status, requester.id)
    return get_order(db, order_id, requester)


def start_of_utc_day(now: Optional[datetime] = None) -> datetime:
    """Midnight UTC of the given (or current) day, timezone-aware."""
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def get_stats(db: Session, requester: User) -> OrderStats:
    if not permissions.can_view_stats(requester):
        raise Forbidden("Not authorized to view stats")

    start_of_day = start_of_utc_day()
    with guard_store(db, "order stats"):
        counts = dict(
            db.query(Order.status, func.count(Order.id)).group_by(Order.status).all()
        )
        revenue = db.query(func.sum(Order.total_amount)).filter(
            Order.status != OrderStatus.CANCELLED.value
        ).scalar()
        today_orders = db.query(func.count(Order.id)).filter(Order.created_at >= start_of_day).scalar()

    breakdown = {status.value: counts.get(status.value, 0) for status in OrderStatus}
    return OrderStats(
        total_orders=sum(breakdown.values()),
        today_orders=today_orders or 0,
        total_revenue=round(revenue or 0.0, 2),
        status_breakdown=breakdown,
    )
