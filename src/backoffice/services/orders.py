"""Order placement and order ledger operations."""
import logging
from collections import OrderedDict
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from backoffice.auth.policy import ActorContext, Operation, require
from backoffice.data.database.connection import apply_transaction_timeout
from backoffice.data.database.order_models import Order, OrderItem, OrderOrigin, OrderStatus
from backoffice.data.database.order_schema import OrderItemRequest
from backoffice.data.database.user_model import User
from backoffice.errors import InsufficientStock, NotFoundError, ProductNotFound, ValidationError
from backoffice.services import inventory
from backoffice.services.base import store_operation

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def _merge_lines(items: Iterable[OrderItemRequest]) -> "OrderedDict[int, int]":
    """Collapse repeated product ids into one line, keeping first-seen order."""
    merged: "OrderedDict[int, int]" = OrderedDict()
    for item in items:
        if item.quantity < 1:
            raise ValidationError(f"Quantity must be at least 1 for product {item.product_id}")
        merged[item.product_id] = merged.get(item.product_id, 0) + item.quantity
    if not merged:
        raise ValidationError("Order must contain at least one product.")
    return merged


def place_order(
    db: Session,
    actor: ActorContext,
    items: List[OrderItemRequest],
    customer_id: Optional[int] = None,
    origin: OrderOrigin = OrderOrigin.IN_STORE,
) -> Order:
    """
    Reserve stock and record a new order as one atomic unit.

    In-store sales are entered by staff, paid immediately and attributed to
    ``customer_id`` when given, otherwise to the acting staff member. Online
    checkouts are attributed to the actor and start out PENDING.

    Either every stock decrement and the order row become visible together,
    or nothing does.

    Raises:
        AuthorizationError: actor may not place this kind of order
        ValidationError: empty order, non-positive quantity or unknown customer
        ProductNotFound: a requested product does not exist
        InsufficientStock: a product has fewer units than requested
        InternalError: store failure or timeout
    """
    if origin == OrderOrigin.IN_STORE:
        require(actor, Operation.ORDER_CREATE)
        status = OrderStatus.PAID
        owner_id = customer_id if customer_id is not None else actor.user_id
    else:
        require(actor, Operation.ORDER_CHECKOUT)
        status = OrderStatus.PENDING
        owner_id = actor.user_id

    requested = _merge_lines(items)

    with store_operation(db, "ORDER_POST", user_id=actor.user_id, products=list(requested)):
        apply_transaction_timeout(db)

        if customer_id is not None and db.get(User, customer_id) is None:
            raise ValidationError(f"Customer with ID {customer_id} not found")

        products = inventory.lock_products(db, requested.keys())

        total = Decimal("0")
        lines = []
        for product_id, quantity in requested.items():
            product = products.get(product_id)
            if product is None:
                raise ProductNotFound(product_id)
            if product.stock < quantity:
                raise InsufficientStock(product_id, product.stock, product.name)

            total += product.price * quantity
            lines.append(OrderItem(
                product_id=product_id,
                product_name=product.name,
                quantity=quantity,
                price=product.price,
            ))

        for product_id, quantity in requested.items():
            inventory.decrement_stock(db, product_id, quantity)

        total = total.quantize(CENTS)
        order = Order(
            user_id=owner_id,
            total=total,
            status=status,
            origin=origin,
            items=lines,
        )
        db.add(order)
        db.flush()
        order_id = order.id
        db.commit()

    logger.info(
        "[ORDER_POST] order=%s origin=%s total=%s lines=%d by user=%s",
        order_id, origin.value, total, len(lines), actor.user_id,
    )
    return _load_order(db, order_id)


def list_orders(
    db: Session,
    actor: ActorContext,
    status: Optional[OrderStatus] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Order]:
    """All orders, newest first, with their lines and owner."""
    require(actor, Operation.ORDER_READ)

    with store_operation(db, "ORDERS_GET"):
        query = db.query(Order).options(selectinload(Order.items), joinedload(Order.user))
        if status is not None:
            query = query.filter(Order.status == status)
        return (
            query.order_by(Order.created_at.desc(), Order.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )


def get_order(db: Session, actor: ActorContext, order_id: int) -> Order:
    require(actor, Operation.ORDER_READ)
    return _load_order(db, order_id)


def _load_order(db: Session, order_id: int) -> Order:
    with store_operation(db, "ORDER_GET", order_id=order_id):
        order = (
            db.query(Order)
            .options(selectinload(Order.items), joinedload(Order.user))
            .filter(Order.id == order_id)
            .first()
        )
    if order is None:
        raise NotFoundError(f"Order with ID {order_id} not found")
    return order


def update_order_status(db: Session, actor: ActorContext, order_id: int, status: OrderStatus) -> Order:
    """
    Set an order's status.

    Any status may follow any other. Cancelling does not return stock.
    """
    require(actor, Operation.ORDER_STATUS_UPDATE)

    with store_operation(db, "ORDER_STATUS_PATCH", order_id=order_id):
        order = db.query(Order).filter(Order.id == order_id).first()
        if order is None:
            raise NotFoundError(f"Order with ID {order_id} not found")
        previous = order.status
        order.status = status
        db.commit()

    logger.info(
        "[ORDER_STATUS_PATCH] order=%s %s -> %s by user=%s",
        order_id, previous.value, status.value, actor.user_id,
    )
    return _load_order(db, order_id)
