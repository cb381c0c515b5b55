# backend/routes/food.py
# Minimal menu management: the food catalog is the price source for orders.
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from database import get_db, guard_store
from models.food import FoodItem
from models.users import User
from schemas.food import FoodCreate, FoodResponse, FoodUpdate
from utils import permissions
from utils.audit import client_ip, write_log
from utils.errors import FoodNotFound, Forbidden
from utils.tokenJWT import get_current_user

router = APIRouter(prefix="/food", tags=["Food"])


def _require_menu_access(user: User) -> None:
    if not permissions.can_manage_menu(user):
        raise Forbidden("Only canteen staff can manage the menu")


@router.post("", response_model=FoodResponse, status_code=status.HTTP_201_CREATED)
def create_food_item(
    payload: FoodCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _require_menu_access(current_user)

    data = payload.model_dump()
    data["category"] = payload.category.value
    item = FoodItem(**data)
    with guard_store(db, "food creation"):
        db.add(item)
        db.commit()
        db.refresh(item)

    write_log(db, user_id=current_user.id, action="FOOD_CREATE", resource="food", status="SUCCESS",
              ip=client_ip(request), meta={"food_id": item.id, "price": item.price})
    return item


@router.get("/{food_id}", response_model=FoodResponse)
def get_food_item(
    food_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    item = db.query(FoodItem).filter(FoodItem.id == food_id).first()
    if not item:
        raise FoodNotFound()
    return item


# Price changes only affect orders placed afterwards
@router.patch("/{food_id}", response_model=FoodResponse)
def update_food_item(
    food_id: int,
    payload: FoodUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _require_menu_access(current_user)

    changes = payload.model_dump(exclude_unset=True)
    if changes.get("category") is not None:
        changes["category"] = payload.category.value

    with guard_store(db, "food update"):
        item = db.query(FoodItem).filter(FoodItem.id == food_id).first()
        if not item:
            raise FoodNotFound()
        for field, value in changes.items():
            if value is not None:
                setattr(item, field, value)
        db.commit()
        db.refresh(item)

    write_log(db, user_id=current_user.id, action="FOOD_UPDATE", resource="food", status="SUCCESS",
              ip=client_ip(request), meta={"food_id": item.id, "changes": sorted(changes)})
    return item
