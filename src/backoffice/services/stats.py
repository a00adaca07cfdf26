"""Dashboard aggregates."""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy import func
from sqlalchemy.orm import Session

from backoffice.auth.policy import ActorContext, Operation, require
from backoffice.config import settings
from backoffice.data.database.order_models import Order, OrderStatus
from backoffice.data.database.product_model import Category, Product
from backoffice.data.database.user_model import User
from backoffice.services.base import store_operation


def get_dashboard_stats(db: Session, actor: ActorContext) -> Dict[str, Any]:
    """Headline numbers for the dashboard landing page."""
    require(actor, Operation.DASHBOARD_READ)

    start_of_day = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)

    with store_operation(db, "DASHBOARD_STATS"):
        user_count = db.query(func.count(User.id)).scalar()
        product_count = db.query(func.count(Product.id)).scalar()
        total_stock = db.query(func.coalesce(func.sum(Product.stock), 0)).scalar()
        revenue = (
            db.query(func.coalesce(func.sum(Order.total), 0))
            .filter(Order.status != OrderStatus.CANCELLED)
            .scalar()
        )
        orders_today = (
            db.query(func.count(Order.id))
            .filter(Order.created_at >= start_of_day)
            .scalar()
        )
        low_stock = (
            db.query(func.count(Product.id))
            .filter(Product.stock <= settings.low_stock_threshold)
            .scalar()
        )
        top_category = (
            db.query(Category.name, func.count(Product.id).label("product_count"))
            .join(Product, Product.category_id == Category.id)
            .group_by(Category.id, Category.name)
            .order_by(func.count(Product.id).desc(), Category.name.asc())
            .first()
        )

    return {
        "user_count": user_count,
        "product_count": product_count,
        "total_stock": int(total_stock),
        "revenue": Decimal(str(revenue)).quantize(Decimal("0.01")),
        "top_category": top_category.name if top_category else "N/A",
        "orders_today": orders_today,
        "low_stock_products": low_stock,
    }
