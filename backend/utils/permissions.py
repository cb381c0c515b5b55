# backend/utils/permissions.py
# One predicate per protected operation. Routes and services ask these instead of
# comparing role strings themselves.
from models.users import Role, User
from models.order import Order, OrderStatus

STAFF_ROLES = {Role.CANTEEN_STAFF.value, Role.ADMIN.value}


def _role(user: User) -> str:
    return (user.role or "").lower()


def is_staff(user: User) -> bool:
    return _role(user) in STAFF_ROLES


def is_admin(user: User) -> bool:
    return _role(user) == Role.ADMIN.value


def is_owner(user: User, order: Order) -> bool:
    return order.user_id == user.id


def can_view_all_orders(user: User) -> bool:
    return is_staff(user)


def can_view_order(user: User, order: Order) -> bool:
    return is_staff(user) or is_owner(user, order)


def can_change_status(user: User, order: Order, new_status: str) -> bool:
    """Staff move orders along; an owner may only cancel their own order."""
    if is_staff(user):
        return True
    return new_status == OrderStatus.CANCELLED.value and is_owner(user, order)


def can_view_stats(user: User) -> bool:
    return is_staff(user)


def can_manage_menu(user: User) -> bool:
    return is_staff(user)


def can_view_logs(user: User) -> bool:
    return is_admin(user)


def can_manage_users(user: User) -> bool:
    return is_admin(user)
