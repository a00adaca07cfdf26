"""Database data layer package."""
from .connection import engine, SessionLocal, get_db, Base
from .product_model import Category, Product
from .user_model import Role, User, AuthSession
from .order_models import Order, OrderItem, OrderStatus, OrderOrigin

__all__ = [
    "engine",
    "SessionLocal",
    "get_db",
    "Base",
    "Category",
    "Product",
    "Role",
    "User",
    "AuthSession",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderOrigin",
]
