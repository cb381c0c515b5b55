# backend/seed.py
"""Creates a starter admin account, a canteen staff account and a sample menu.

Safe to run repeatedly: existing accounts and dishes (matched by college ID and
name) are left untouched.

    python seed.py
"""
import logging

from database import SessionLocal, init_db
from models.food import FoodItem
from models.users import Role, User
from utils.hashing import get_password_hash

logger = logging.getLogger("seed")

ACCOUNTS = [
    {
        "name": "Canteen Admin", "email": "admin@canteenx.com", "college_id": "ADMIN001",
        "password": "admin123", "phone": "9876543210", "department": "Administration",
        "role": Role.ADMIN.value,
    },
    {
        "name": "Canteen Counter", "email": "staff@canteenx.com", "college_id": "STAFF001",
        "password": "staff123", "phone": "9876500000", "department": "Canteen",
        "role": Role.CANTEEN_STAFF.value,
    },
]

MENU = [
    {"name": "Butter Chicken", "description": "Creamy butter chicken with basmati rice",
     "price": 120, "category": "lunch", "quantity_available": 50, "preparation_time": 20},
    {"name": "Paneer Tikka", "description": "Grilled paneer pieces with spices",
     "price": 100, "category": "snacks", "quantity_available": 40, "is_vegetarian": True},
    {"name": "Aloo Paratha", "description": "Potato stuffed Indian bread",
     "price": 40, "category": "breakfast", "quantity_available": 80, "is_vegetarian": True,
     "preparation_time": 10},
    {"name": "Masala Chai", "description": "Spiced milk tea",
     "price": 15, "category": "beverages", "quantity_available": 200, "is_vegetarian": True,
     "preparation_time": 5},
    {"name": "Gulab Jamun", "description": "Two pieces in sugar syrup",
     "price": 30, "category": "desserts", "quantity_available": 60, "is_vegetarian": True,
     "preparation_time": 2},
]


def seed():
    init_db()
    session = SessionLocal()
    try:
        for account in ACCOUNTS:
            if session.query(User).filter(User.college_id == account["college_id"]).first():
                logger.info("Account %s already exists, skipping", account["college_id"])
                continue
            data = dict(account)
            data["password_hash"] = get_password_hash(data.pop("password"))
            session.add(User(**data))
            logger.info("Created %s account %s", account["role"], account["college_id"])

        for dish in MENU:
            if session.query(FoodItem).filter(FoodItem.name == dish["name"]).first():
                continue
            session.add(FoodItem(**dish))
            logger.info("Added %s to the menu", dish["name"])

        session.commit()
    except Exception:
        session.rollback()
        logger.exception("Seeding failed")
        raise
    finally:
        session.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    seed()
