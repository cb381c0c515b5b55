from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models.food
import models.log
import models.order
import models.users
from config import settings
from database import Base, get_db
from main import app
from models.food import FoodItem
from models.users import Role
from services import auth as auth_service
from utils.tokenJWT import TokenIssuer, get_token_issuer

START = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def issuer(clock):
    return TokenIssuer(secret_key="test-secret", ttl=timedelta(minutes=60), clock=clock)


@pytest.fixture
def client(db, issuer):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_issuer] = lambda: issuer
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db, issuer):
    counter = {"n": 0}

    def _make(role: Role = Role.STUDENT, password: str = "pw", **overrides):
        counter["n"] += 1
        n = counter["n"]
        fields = {
            "name": f"User {n}",
            "email": f"user{n}@college.edu",
            "college_id": f"C{n:03d}",
            "password": password,
            "phone": f"90000000{n:02d}",
            "department": "CS",
            "role": role.value,
        }
        fields.update(overrides)
        return auth_service.register(db, issuer, **fields)

    return _make


@pytest.fixture
def make_food(db):
    def _make(name="Masala Dosa", price=50.0, quantity_available=100, **extra):
        item = FoodItem(name=name, price=price, quantity_available=quantity_available, category="lunch", **extra)
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    return _make


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
