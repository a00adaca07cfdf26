"""Shared fixtures: an isolated SQLite database and seeded accounts."""
import os
import tempfile
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional

_db_dir = tempfile.mkdtemp(prefix="backoffice-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from backoffice.auth.passwords import hash_password
from backoffice.auth.policy import ActorContext
from backoffice.auth.sessions import issue_session
from backoffice.data.database.connection import Base, SessionLocal, engine
from backoffice.data.database.order_models import Order, OrderItem
from backoffice.data.database.product_model import Category, Product
from backoffice.data.database.user_model import Role, User
from backoffice.main import app

PASSWORD = "secret123"


@dataclass
class Account:
    id: int
    email: str
    role: Role
    headers: Dict[str, str]

    @property
    def actor(self) -> ActorContext:
        return ActorContext(user_id=self.id, role=self.role)


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def make_account(role: Role, email: Optional[str] = None, name: str = "Test User") -> Account:
    email = email or f"{role.value.lower()}@example.com"
    with SessionLocal() as session:
        user = User(name=name, email=email, password_hash=hash_password(PASSWORD), role=role)
        session.add(user)
        session.commit()
        token, _ = issue_session(session, user)
        return Account(id=user.id, email=email, role=role, headers={"Authorization": f"Bearer {token}"})


@pytest.fixture
def admin() -> Account:
    return make_account(Role.ADMIN)


@pytest.fixture
def staff() -> Account:
    return make_account(Role.STAFF)


@pytest.fixture
def customer() -> Account:
    return make_account(Role.CUSTOMER)


def seed_category(name: str = "Beverages") -> int:
    with SessionLocal() as session:
        category = Category(name=name)
        session.add(category)
        session.commit()
        return category.id


def seed_product(
    name: str = "Sparkling Water",
    price: str = "10.00",
    stock: int = 5,
    category_id: Optional[int] = None,
    barcode: Optional[str] = None,
) -> int:
    with SessionLocal() as session:
        product = Product(
            name=name,
            price=Decimal(price),
            stock=stock,
            category_id=category_id,
            barcode=barcode,
            images=["https://cdn.example.com/img/product.png"],
        )
        session.add(product)
        session.commit()
        return product.id


def stock_of(product_id: int) -> int:
    with SessionLocal() as session:
        return session.query(Product.stock).filter(Product.id == product_id).scalar()


def order_count() -> int:
    with SessionLocal() as session:
        return session.query(Order).count()


def order_item_count() -> int:
    with SessionLocal() as session:
        return session.query(OrderItem).count()
