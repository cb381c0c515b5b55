# backend/services/auth.py
"""
Registration, login and token authentication.

``issuer`` is anything with ``issue(subject_id, role)`` and ``verify(token)``,
normally :class:`utils.tokenJWT.TokenIssuer`. A token is only issued after the
database write (register) or read (login) it depends on has succeeded.
"""
import logging
from typing import NamedTuple, Optional

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import guard_store
from models.users import Role, User
from utils.errors import (
    DuplicateUser, InvalidCredentials, InvalidToken, MissingCredential,
    MissingField, UserNotFound, ValidationError,
)
from utils.hashing import get_password_hash, verify_password

logger = logging.getLogger(__name__)

# Checked in this order; only the first missing one is reported
REQUIRED_FIELDS = ("name", "email", "college_id", "password", "phone", "department")


class AuthResult(NamedTuple):
    user: User
    token: str


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _normalize_email(email: str) -> str:
    try:
        checked = validate_email(email.strip(), check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email address: {e}")
    return checked.normalized.lower()


def _role_value(role) -> str:
    if _blank(role):
        return Role.STUDENT.value
    try:
        return Role(role).value
    except ValueError:
        raise ValidationError(f"Unknown role: {role}")


def register(
    db: Session,
    issuer,
    *,
    name: str,
    email: str,
    college_id: str,
    password: str,
    phone: str,
    department: str,
    role: Optional[str] = None,
) -> AuthResult:
    values = {
        "name": name, "email": email, "college_id": college_id,
        "password": password, "phone": phone, "department": department,
    }
    for field in REQUIRED_FIELDS:
        if _blank(values[field]):
            raise MissingField(field)

    normalized_email = _normalize_email(email)
    college_id = college_id.strip()
    role_value = _role_value(role)

    with guard_store(db, "registration"):
        existing = db.query(User).filter(
            or_(func.lower(User.email) == normalized_email, User.college_id == college_id)
        ).first()
        if existing:
            raise DuplicateUser()

        user = User(
            name=name.strip(),
            email=normalized_email,
            college_id=college_id,
            phone=phone.strip(),
            department=department.strip(),
            role=role_value,
            password_hash=get_password_hash(password),
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # A concurrent registration won the unique constraint race
            db.rollback()
            raise DuplicateUser()
        db.refresh(user)

    logger.info("Registered user %s (%s)", user.id, user.role)
    return AuthResult(user=user, token=issuer.issue(user.id, user.role))


def find_by_identifier(db: Session, identifier: str) -> Optional[User]:
    identifier = identifier.strip()
    return db.query(User).filter(
        or_(User.email == identifier.lower(), User.college_id == identifier)
    ).first()


def login(db: Session, issuer, identifier: Optional[str], password: Optional[str]) -> AuthResult:
    if _blank(identifier) or _blank(password):
        raise MissingCredential()

    with guard_store(db, "login"):
        user = find_by_identifier(db, identifier)

    # Unknown account and wrong password must be indistinguishable
    if user is None or not verify_password(password, user.password_hash):
        raise InvalidCredentials()

    return AuthResult(user=user, token=issuer.issue(user.id, user.role))


def authenticate(db: Session, issuer, token: str) -> User:
    claims = issuer.verify(token)
    try:
        user_id = int(claims.subject_id)
    except ValueError:
        raise InvalidToken()

    with guard_store(db, "session lookup"):
        user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise UserNotFound()
    return user
