# backend/routes/auth.py
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models import users as models
from schemas import user as schemas
from services import auth as auth_service
from utils.audit import client_ip, identifier_kind, write_log
from utils.errors import CanteenError
from utils.tokenJWT import TokenIssuer, get_current_user, get_token_issuer

router = APIRouter(prefix="/auth", tags=["Auth"])


# Register a new user and sign them in
@router.post("/register", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: schemas.UserCreate,
    request: Request,
    db: Session = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    try:
        result = auth_service.register(
            db,
            issuer,
            name=payload.name,
            email=payload.email,
            college_id=payload.college_id,
            password=payload.password,
            phone=payload.phone,
            department=payload.department,
            role=payload.role.value if payload.role else None,
        )
    except CanteenError as e:
        write_log(db, user_id=None, action="REGISTER", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"email": payload.email, "reason": e.code})
        raise

    write_log(db, user_id=result.user.id, action="REGISTER", resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"email": result.user.email})
    return {"user": result.user, "token": result.token, "token_type": "bearer"}


# Authenticate with email or college ID and issue a JWT
@router.post("/login", response_model=schemas.AuthResponse)
def login(
    payload: schemas.UserLogin,
    request: Request,
    db: Session = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
):
    identifier = payload.login_identifier()
    try:
        result = auth_service.login(db, issuer, identifier, payload.password)
    except CanteenError as e:
        write_log(db, user_id=None, action="LOGIN", resource="auth", status="FAIL",
                  ip=client_ip(request), meta={"identifier_type": identifier_kind(identifier), "reason": e.code})
        raise

    write_log(db, user_id=result.user.id, action="LOGIN", resource="auth",
              status="SUCCESS", ip=client_ip(request), meta={"identifier_type": identifier_kind(identifier)})
    return {"user": result.user, "token": result.token, "token_type": "bearer"}


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: models.User = Depends(get_current_user)):
    return current_user
