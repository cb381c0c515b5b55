import pytest

from models.order import Order
from models.users import User
from utils import permissions


def user(user_id, role):
    return User(id=user_id, role=role)


def order_of(owner_id):
    return Order(id=1, user_id=owner_id, status="placed")


@pytest.mark.parametrize("role,expected", [
    ("student", False),
    ("canteen_staff", True),
    ("admin", True),
    ("ADMIN", True),
    (None, False),
])
def test_is_staff(role, expected):
    assert permissions.is_staff(user(1, role)) is expected


def test_order_visibility():
    order = order_of(owner_id=1)
    assert permissions.can_view_order(user(1, "student"), order)
    assert not permissions.can_view_order(user(2, "student"), order)
    assert permissions.can_view_order(user(3, "canteen_staff"), order)


def test_status_change_rules():
    order = order_of(owner_id=1)
    owner, stranger, staff = user(1, "student"), user(2, "student"), user(3, "canteen_staff")

    assert permissions.can_change_status(staff, order, "preparing")
    assert permissions.can_change_status(owner, order, "cancelled")
    assert not permissions.can_change_status(owner, order, "preparing")
    assert not permissions.can_change_status(stranger, order, "cancelled")


def test_admin_only_operations():
    assert permissions.can_view_logs(user(1, "admin"))
    assert permissions.can_manage_users(user(1, "admin"))
    assert not permissions.can_view_logs(user(2, "canteen_staff"))
    assert not permissions.can_manage_users(user(2, "canteen_staff"))


def test_staff_operations():
    assert permissions.can_view_stats(user(1, "canteen_staff"))
    assert permissions.can_manage_menu(user(1, "canteen_staff"))
    assert not permissions.can_view_stats(user(2, "student"))
    assert not permissions.can_manage_menu(user(2, "student"))
