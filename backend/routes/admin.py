# backend/routes/admin.py
from fastapi import APIRouter, Depends, Query, Request
from typing import List, Optional, Literal
from sqlalchemy.orm import Session
from pydantic import BaseModel

from database import get_db, guard_store
from models.users import Role, User
from schemas.user import RoleUpdate, UserResponse
from utils import permissions
from utils.audit import client_ip, write_log
from utils.errors import Forbidden, UserNotFound
from utils.tokenJWT import get_current_user

router = APIRouter(tags=["Admin"])

# Schema for paginated user list response
class PaginatedUsersResponse(BaseModel):
    items: List[UserResponse]
    total: int
    page: int
    page_size: int


def _require_admin(user: User) -> None:
    if not permissions.can_manage_users(user):
        raise Forbidden("Admin access required")


# Retrieve a list of users with filtering, sorting, and pagination (Admin only)
@router.get("/users", response_model=PaginatedUsersResponse)
def get_all_users(
    q: Optional[str] = Query(None, description="Search by email, name or college ID"),
    role: Optional[Role] = Query(None, description="Filter by role"),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    sort_by: Literal["id", "email", "name", "role", "college_id"] = "id",
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    _require_admin(current_user)

    query = db.query(User)

    if q:
        like = f"%{q.lower()}%"
        query = query.filter(
            User.email.ilike(like) | User.name.ilike(like) | User.college_id.ilike(like)
        )

    if role:
        query = query.filter(User.role == role.value)

    sort_map = {
        "id": User.id,
        "email": User.email,
        "name": User.name,
        "role": User.role,
        "college_id": User.college_id,
    }
    col = sort_map.get(sort_by, User.id)
    query = query.order_by(col.asc() if order == "asc" else col.desc())

    total = query.count()
    users = query.offset((page - 1) * page_size).limit(page_size).all()

    return {
        "items": users,
        "total": total,
        "page": page,
        "page_size": page_size,
    }


# Update user role (Admin only). Tokens issued earlier keep the role they were signed with.
@router.put("/users/{user_id}/role")
def update_user_role(
    user_id: int,
    new_role: RoleUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    _require_admin(current_user)

    with guard_store(db, "role update"):
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise UserNotFound()
        old_role = user.role
        user.role = new_role.role.value
        db.commit()
        db.refresh(user)

    write_log(db, user_id=current_user.id, action="USER_ROLE_CHANGE", resource="users", status="SUCCESS",
              ip=client_ip(request), meta={"target": user.id, "old": old_role, "new": user.role})
    return {"message": f"User {user.email} role updated to {user.role}", "id": user.id, "role": user.role}
