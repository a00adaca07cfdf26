"""Stock mutations. Every write to Product.stock goes through this module."""
import logging
from typing import Dict, Iterable

from sqlalchemy import update
from sqlalchemy.orm import Session

from backoffice.auth.policy import ActorContext, Operation, require
from backoffice.data.database.connection import MAX_DB_INT, apply_transaction_timeout
from backoffice.data.database.product_model import Product
from backoffice.errors import InsufficientStock, NegativeStockError, NotFoundError, ValidationError
from backoffice.services.base import store_operation

logger = logging.getLogger(__name__)


def lock_products(db: Session, product_ids: Iterable[int]) -> Dict[int, Product]:
    """
    Load products by id with a row lock held until the transaction ends.

    Rows are locked in ascending id order so that two transactions touching
    overlapping products cannot deadlock.
    """
    ids = sorted(set(product_ids))
    if not ids:
        return {}
    products = (
        db.query(Product)
        .filter(Product.id.in_(ids))
        .order_by(Product.id)
        .with_for_update()
        .all()
    )
    return {product.id: product for product in products}


def decrement_stock(db: Session, product_id: int, quantity: int) -> None:
    """Remove ``quantity`` units, refusing to take stock below zero."""
    result = db.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock >= quantity)
        .values(stock=Product.stock - quantity)
    )
    if result.rowcount != 1:
        available = db.query(Product.stock).filter(Product.id == product_id).scalar()
        raise InsufficientStock(product_id, available or 0)


def adjust_stock(db: Session, actor: ActorContext, product_id: int, delta: int) -> Product:
    """
    Apply ``stock += delta`` to a product.

    The current stock is read under lock and validated before anything is
    written, so a rejected adjustment never touches the row.

    Raises:
        AuthorizationError: actor may not adjust stock
        NotFoundError: product does not exist
        NegativeStockError: resulting stock would be negative
    """
    require(actor, Operation.STOCK_ADJUST)

    with store_operation(db, "STOCK_PATCH", product_id=product_id):
        apply_transaction_timeout(db)
        product = lock_products(db, [product_id]).get(product_id)
        if product is None:
            raise NotFoundError(f"Product with ID {product_id} not found")

        new_stock = product.stock + delta
        if new_stock < 0:
            raise NegativeStockError(
                "Stock cannot go below zero.",
                product_id=product_id,
                available=product.stock,
            )
        if new_stock > MAX_DB_INT:
            raise ValidationError(f"Stock cannot exceed {MAX_DB_INT}.", product_id=product_id, available=product.stock)

        product.stock = new_stock
        db.commit()
        db.refresh(product)

    logger.info(
        "[STOCK_PATCH] product=%s delta=%+d stock=%s by user=%s",
        product_id, delta, product.stock, actor.user_id,
    )
    return product
