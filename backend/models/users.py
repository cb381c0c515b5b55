# backend/models/users.py
from sqlalchemy import Column, Integer, String, DateTime, func
from database import Base
import enum

# Enum for account roles
class Role(str, enum.Enum):
    STUDENT = "student"
    CANTEEN_STAFF = "canteen_staff"
    ADMIN = "admin"

# Represents a canteen account with authentication details and system role
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    college_id = Column(String, unique=True, nullable=False, index=True)
    phone = Column(String, nullable=False)
    department = Column(String, nullable=False)
    role = Column(String, nullable=False, default=Role.STUDENT.value)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
