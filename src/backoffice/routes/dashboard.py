"""Dashboard routes."""
from decimal import Decimal
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session
from typing import Optional
from backoffice.auth.policy import ActorContext
from backoffice.auth.sessions import get_optional_actor
from backoffice.data.database.connection import get_db
from backoffice.services import stats

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


class DashboardStats(BaseModel):
    """Dashboard headline numbers."""
    user_count: int
    product_count: int
    total_stock: int
    revenue: Decimal
    top_category: str
    orders_today: int
    low_stock_products: int


@router.get("/stats", response_model=DashboardStats, summary="Get dashboard statistics")
def get_stats(
    db: Session = Depends(get_db),
    actor: Optional[ActorContext] = Depends(get_optional_actor)
):
    return stats.get_dashboard_stats(db, actor)
