"""Order routes: point-of-sale entry, self-service checkout and the order ledger."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from backoffice.auth.policy import ActorContext
from backoffice.auth.sessions import get_optional_actor
from backoffice.data.database.connection import MAX_DB_INT, get_db
from backoffice.data.database.order_models import OrderOrigin, OrderStatus
from backoffice.data.database.order_schema import (
    CheckoutCreate, OrderCreate, OrderResponse, OrderStatusUpdate,
)
from backoffice.routes import RowId
from backoffice.services import orders

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get(
    "",
    response_model=List[OrderResponse],
    summary="Get all orders",
    description="Newest first. ADMIN or STAFF only."
)
def get_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status", description="Filter by status"),
    skip: int = Query(0, ge=0, le=MAX_DB_INT),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
    actor: Optional[ActorContext] = Depends(get_optional_actor)
):
    return orders.list_orders(db, actor, status=status_filter, skip=skip, limit=limit)


@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an in-store order",
    description=(
        "Point-of-sale and manual orders. Validates and decrements stock and records "
        "the order in one transaction. Responds 409 on missing products or insufficient stock."
    )
)
def create_order(
    order: OrderCreate,
    db: Session = Depends(get_db),
    actor: Optional[ActorContext] = Depends(get_optional_actor)
):
    return orders.place_order(
        db, actor, order.items, customer_id=order.user_id, origin=OrderOrigin.IN_STORE
    )


@router.post(
    "/checkout",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Self-service checkout",
    description="Places a PENDING online order for the signed-in user."
)
def checkout(
    order: CheckoutCreate,
    db: Session = Depends(get_db),
    actor: Optional[ActorContext] = Depends(get_optional_actor)
):
    return orders.place_order(db, actor, order.items, origin=OrderOrigin.ONLINE)


@router.get("/{order_id}", response_model=OrderResponse, summary="Get order by ID")
def get_order(
    order_id: RowId,
    db: Session = Depends(get_db),
    actor: Optional[ActorContext] = Depends(get_optional_actor)
):
    return orders.get_order(db, actor, order_id)


@router.patch(
    "/{order_id}/status",
    response_model=OrderResponse,
    summary="Update order status",
    description="Any status may follow any other."
)
def update_order_status(
    order_id: RowId,
    body: OrderStatusUpdate,
    db: Session = Depends(get_db),
    actor: Optional[ActorContext] = Depends(get_optional_actor)
):
    return orders.update_order_status(db, actor, order_id, body.status)
