from datetime import datetime, timedelta, timezone

import pytest

from models.order import OrderStatus
from models.users import Role
from schemas.order import OrderItemCreate
from services import orders as order_service
from utils.errors import (
    EmptyOrder, Forbidden, InvalidItem, InvalidTransition, OrderNotFound,
)


@pytest.fixture
def student(make_user):
    return make_user().user


@pytest.fixture
def other_student(make_user):
    return make_user().user


@pytest.fixture
def staff(make_user):
    return make_user(role=Role.CANTEEN_STAFF).user


@pytest.fixture
def admin(make_user):
    return make_user(role=Role.ADMIN).user


@pytest.fixture
def menu(make_food):
    return {
        "thali": make_food("Veg Thali", price=120.0, quantity_available=10),
        "chai": make_food("Masala Chai", price=15.0, quantity_available=50),
    }


def line(food, quantity=1, **extra):
    return OrderItemCreate(food_id=food.id, quantity=quantity, **extra)


def test_total_is_sum_of_quantity_times_price(db, student, menu):
    order = order_service.create_order(db, student, [line(menu["thali"], 2), line(menu["chai"], 3)])

    assert order.total_amount == pytest.approx(2 * 120.0 + 3 * 15.0)
    assert order.status == OrderStatus.PLACED.value
    assert order.user_id == student.id
    assert order.order_number.startswith("ORD")
    assert {(i.food_id, i.quantity, i.unit_price) for i in order.items} == {
        (menu["thali"].id, 2, 120.0),
        (menu["chai"].id, 3, 15.0),
    }


def test_total_ignores_later_price_changes(db, student, menu):
    order = order_service.create_order(db, student, [line(menu["thali"], 2)])

    menu["thali"].price = 999.0
    db.commit()

    reloaded = order_service.get_order(db, order.id, student)
    assert reloaded.total_amount == pytest.approx(240.0)
    assert reloaded.items[0].unit_price == pytest.approx(120.0)


def test_creating_order_reserves_stock(db, student, menu):
    order_service.create_order(db, student, [line(menu["thali"], 4)])
    db.refresh(menu["thali"])
    assert menu["thali"].quantity_available == 6


def test_empty_order_is_rejected(db, student):
    with pytest.raises(EmptyOrder):
        order_service.create_order(db, student, [])


def test_unknown_food_is_rejected(db, student, menu):
    with pytest.raises(InvalidItem):
        order_service.create_order(db, student, [OrderItemCreate(food_id=9999, quantity=1)])


def test_unavailable_food_is_rejected(db, student, make_food):
    sold_out = make_food("Biryani", price=150.0, available=False)
    with pytest.raises(InvalidItem):
        order_service.create_order(db, student, [line(sold_out)])


def test_insufficient_stock_rolls_back_whole_order(db, student, menu):
    with pytest.raises(InvalidItem):
        order_service.create_order(db, student, [line(menu["chai"], 5), line(menu["thali"], 11)])

    db.refresh(menu["chai"])
    assert menu["chai"].quantity_available == 50
    assert order_service.list_orders(db, student) == []


def test_full_progression(db, student, staff, menu):
    order = order_service.create_order(db, student, [line(menu["chai"])])

    for status in ("preparing", "ready", "completed"):
        order = order_service.update_status(db, order.id, status, staff)
        assert order.status == status

    assert order.completed_at is not None


@pytest.mark.parametrize("target", ["ready", "completed", "placed"])
def test_skipping_or_repeating_steps_is_rejected(db, student, staff, menu, target):
    order = order_service.create_order(db, student, [line(menu["chai"])])
    with pytest.raises(InvalidTransition):
        order_service.update_status(db, order.id, target, staff)


def test_going_backwards_is_rejected(db, student, staff, menu):
    order = order_service.create_order(db, student, [line(menu["chai"])])
    order_service.update_status(db, order.id, "preparing", staff)
    order_service.update_status(db, order.id, "ready", staff)
    with pytest.raises(InvalidTransition):
        order_service.update_status(db, order.id, "preparing", staff)


@pytest.mark.parametrize("steps", [[], ["preparing"], ["preparing", "ready"]])
def test_cancel_reachable_before_completion(db, student, staff, menu, steps):
    order = order_service.create_order(db, student, [line(menu["chai"], 2)])
    for status in steps:
        order_service.update_status(db, order.id, status, staff)

    order = order_service.update_status(db, order.id, "cancelled", staff)
    assert order.status == "cancelled"
    assert order.cancelled_at is not None


def test_cancel_not_allowed_after_completion(db, student, staff, menu):
    order = order_service.create_order(db, student, [line(menu["chai"])])
    for status in ("preparing", "ready", "completed"):
        order_service.update_status(db, order.id, status, staff)

    with pytest.raises(InvalidTransition):
        order_service.update_status(db, order.id, "cancelled", staff)


def test_cancelled_is_terminal(db, student, staff, menu):
    order = order_service.create_order(db, student, [line(menu["chai"])])
    order_service.update_status(db, order.id, "cancelled", staff)
    for target in ("placed", "preparing", "cancelled"):
        with pytest.raises(InvalidTransition):
            order_service.update_status(db, order.id, target, staff)


def test_cancellation_releases_stock(db, student, menu):
    order = order_service.create_order(db, student, [line(menu["thali"], 3)])
    order_service.update_status(db, order.id, OrderStatus.CANCELLED, student)

    db.refresh(menu["thali"])
    assert menu["thali"].quantity_available == 10


def test_owner_can_cancel_but_not_progress(db, student, menu):
    order = order_service.create_order(db, student, [line(menu["chai"])])
    with pytest.raises(Forbidden):
        order_service.update_status(db, order.id, "preparing", student)

    assert order_service.update_status(db, order.id, "cancelled", student).status == "cancelled"


def test_other_student_cannot_cancel(db, student, other_student, menu):
    order = order_service.create_order(db, student, [line(menu["chai"])])
    with pytest.raises(Forbidden):
        order_service.update_status(db, order.id, "cancelled", other_student)


def test_update_unknown_order(db, staff):
    with pytest.raises(OrderNotFound):
        order_service.update_status(db, 404, "preparing", staff)


def test_student_only_lists_own_orders(db, student, other_student, staff, menu):
    mine = order_service.create_order(db, student, [line(menu["chai"])])
    order_service.create_order(db, other_student, [line(menu["chai"])])

    listed = order_service.list_orders(db, student)
    assert [o.id for o in listed] == [mine.id]
    assert all(o.user_id == student.id for o in listed)


def test_staff_lists_all_orders_newest_first(db, student, other_student, staff, admin, menu):
    first = order_service.create_order(db, student, [line(menu["chai"])])
    second = order_service.create_order(db, other_student, [line(menu["chai"])])
    third = order_service.create_order(db, student, [line(menu["thali"])])

    expected = [third.id, second.id, first.id]
    assert [o.id for o in order_service.list_orders(db, staff)] == expected
    assert [o.id for o in order_service.list_orders(db, admin)] == expected


def test_list_filtered_by_status(db, student, staff, menu):
    a = order_service.create_order(db, student, [line(menu["chai"])])
    order_service.create_order(db, student, [line(menu["chai"])])
    order_service.update_status(db, a.id, "preparing", staff)

    assert [o.id for o in order_service.list_orders(db, staff, status="preparing")] == [a.id]


def test_get_order_checks_ownership(db, student, other_student, staff, menu):
    order = order_service.create_order(db, student, [line(menu["chai"])])

    assert order_service.get_order(db, order.id, student).id == order.id
    assert order_service.get_order(db, order.id, staff).id == order.id
    with pytest.raises(Forbidden):
        order_service.get_order(db, order.id, other_student)
    with pytest.raises(OrderNotFound):
        order_service.get_order(db, order.id + 100, staff)


def test_stats_require_staff(db, student):
    with pytest.raises(Forbidden):
        order_service.get_stats(db, student)


def test_stats_count_statuses_and_exclude_cancelled_revenue(db, student, staff, menu):
    kept = order_service.create_order(db, student, [line(menu["thali"], 1)])
    cancelled = order_service.create_order(db, student, [line(menu["chai"], 2)])
    order_service.create_order(db, student, [line(menu["chai"], 1)])
    order_service.update_status(db, kept.id, "preparing", staff)
    order_service.update_status(db, cancelled.id, "cancelled", staff)

    stats = order_service.get_stats(db, staff)

    assert stats.total_orders == 3
    assert stats.today_orders == 3
    assert stats.total_revenue == pytest.approx(120.0 + 15.0)
    assert stats.status_breakdown == {
        "placed": 1, "preparing": 1, "ready": 0, "completed": 0, "cancelled": 1,
    }


@pytest.mark.parametrize("current,new,allowed", [
    ("placed", "preparing", True),
    ("preparing", "ready", True),
    ("ready", "completed", True),
    ("placed", "cancelled", True),
    ("ready", "cancelled", True),
    ("placed", "ready", False),
    ("placed", "completed", False),
    ("completed", "cancelled", False),
    ("cancelled", "placed", False),
    ("ready", "preparing", False),
    ("placed", "shipped", False),
])
def test_transition_table(current, new, allowed):
    assert order_service.is_valid_transition(current, new) is allowed


def test_start_of_day_is_aware_utc_midnight():
    ist = timezone(timedelta(hours=5, minutes=30))
    start = order_service.start_of_utc_day(datetime(2026, 3, 2, 2, 15, tzinfo=ist))

    assert start == datetime(2026, 3, 1, tzinfo=timezone.utc)
    assert start.utcoffset() == timedelta(0)
