"""Category and product management."""
import logging
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from backoffice.auth.policy import ActorContext, Operation, require
from backoffice.data.database.order_models import OrderItem
from backoffice.data.database.product_model import Category, Product
from backoffice.data.database.product_schema import (
    CategoryCreate, CategoryResponse, CategoryUpdate, ProductCreate, ProductResponse, ProductUpdate,
)
from backoffice.errors import ConflictError, NotFoundError
from backoffice.services.base import store_operation

logger = logging.getLogger(__name__)


# Categories

def list_categories(db: Session) -> List[Category]:
    with store_operation(db, "CATEGORIES_GET"):
        return db.query(Category).order_by(Category.name.asc()).all()


def get_category(db: Session, category_id: int) -> Category:
    with store_operation(db, "CATEGORY_GET", category_id=category_id):
        category = db.query(Category).filter(Category.id == category_id).first()
    if category is None:
        raise NotFoundError(f"Category with ID {category_id} not found")
    return category


def _ensure_unique_category_name(db: Session, name: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Category).filter(func.lower(Category.name) == name.lower())
    if exclude_id is not None:
        query = query.filter(Category.id != exclude_id)
    if query.first() is not None:
        raise ConflictError(f"Category '{name}' already exists.", code="DuplicateName")


def create_category(db: Session, actor: ActorContext, data: CategoryCreate) -> Category:
    require(actor, Operation.CATEGORY_CREATE)

    with store_operation(db, "CATEGORIES_POST", name=data.name):
        _ensure_unique_category_name(db, data.name)
        category = Category(name=data.name)
        db.add(category)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise ConflictError(f"Category '{data.name}' already exists.", code="DuplicateName") from e
        db.refresh(category)
    return category


def update_category(db: Session, actor: ActorContext, category_id: int, data: CategoryUpdate) -> Category:
    require(actor, Operation.CATEGORY_UPDATE)

    with store_operation(db, "CATEGORY_PATCH", category_id=category_id):
        category = db.query(Category).filter(Category.id == category_id).first()
        if category is None:
            raise NotFoundError(f"Category with ID {category_id} not found")
        _ensure_unique_category_name(db, data.name, exclude_id=category_id)
        category.name = data.name
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise ConflictError(f"Category '{data.name}' already exists.", code="DuplicateName") from e
        db.refresh(category)
    return category


def delete_category(db: Session, actor: ActorContext, category_id: int) -> CategoryResponse:
    """
    Delete a category. Refused while any product still references it.

    Raises:
        NotFoundError: category does not exist
        ConflictError: products are assigned to the category
    """
    require(actor, Operation.CATEGORY_DELETE)

    with store_operation(db, "CATEGORY_DELETE", category_id=category_id):
        category = db.query(Category).filter(Category.id == category_id).first()
        if category is None:
            raise NotFoundError(f"Category with ID {category_id} not found")

        in_use = db.query(Product.id).filter(Product.category_id == category_id).count()
        if in_use:
            raise ConflictError(
                "Category cannot be deleted while products are assigned to it.",
                code="CategoryInUse",
                product_count=in_use,
            )

        deleted = CategoryResponse.model_validate(category)
        db.delete(category)
        try:
            db.commit()
        except IntegrityError as e:
            # A product was assigned concurrently
            db.rollback()
            raise ConflictError(
                "Category cannot be deleted while products are assigned to it.",
                code="CategoryInUse",
            ) from e

    logger.info("[CATEGORY_DELETE] category=%s by user=%s", category_id, actor.user_id)
    return deleted


# Products

def list_products(
    db: Session,
    query: Optional[str] = None,
    category_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[Product]:
    """Products newest first, optionally filtered by search text and category."""
    with store_operation(db, "PRODUCTS_GET"):
        q = db.query(Product).options(joinedload(Product.category))
        if query:
            term = f"%{query.lower()}%"
            q = q.filter(or_(
                func.lower(Product.name).like(term),
                func.lower(Product.description).like(term),
            ))
        if category_id is not None:
            q = q.filter(Product.category_id == category_id)
        return q.order_by(Product.created_at.desc(), Product.id.desc()).offset(skip).limit(limit).all()


def get_product(db: Session, product_id: int) -> Product:
    with store_operation(db, "PRODUCT_GET", product_id=product_id):
        product = (
            db.query(Product)
            .options(joinedload(Product.category))
            .filter(Product.id == product_id)
            .first()
        )
    if product is None:
        raise NotFoundError(f"Product with ID {product_id} not found")
    return product


def get_product_by_barcode(db: Session, barcode: str) -> Product:
    with store_operation(db, "PRODUCT_BARCODE_GET", barcode=barcode):
        product = (
            db.query(Product)
            .options(joinedload(Product.category))
            .filter(Product.barcode == barcode.strip())
            .first()
        )
    if product is None:
        raise NotFoundError(f"Product with barcode '{barcode}' not found")
    return product


def _ensure_category_exists(db: Session, category_id: Optional[int]) -> None:
    if category_id is not None and db.get(Category, category_id) is None:
        raise NotFoundError(f"Category with ID {category_id} not found")


def _ensure_unique_barcode(db: Session, barcode: Optional[str], exclude_id: Optional[int] = None) -> None:
    if not barcode:
        return
    query = db.query(Product.id).filter(Product.barcode == barcode)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    if query.first() is not None:
        raise ConflictError(f"Product with barcode '{barcode}' already exists", code="DuplicateBarcode")


def create_product(db: Session, actor: ActorContext, data: ProductCreate) -> Product:
    require(actor, Operation.PRODUCT_CREATE)

    with store_operation(db, "PRODUCTS_POST", name=data.name):
        _ensure_category_exists(db, data.category_id)
        _ensure_unique_barcode(db, data.barcode)

        product = Product(**data.model_dump())
        db.add(product)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise ConflictError(f"Product with barcode '{data.barcode}' already exists", code="DuplicateBarcode") from e
        product_id = product.id

    logger.info("[PRODUCTS_POST] product=%s by user=%s", product_id, actor.user_id)
    return get_product(db, product_id)


def update_product(db: Session, actor: ActorContext, product_id: int, data: ProductUpdate) -> Product:
    """Partially update catalog fields. Stock is changed only through inventory.adjust_stock."""
    require(actor, Operation.PRODUCT_UPDATE)

    update_data = data.model_dump(exclude_unset=True)
    with store_operation(db, "PRODUCT_PATCH", product_id=product_id):
        product = db.query(Product).filter(Product.id == product_id).first()
        if product is None:
            raise NotFoundError(f"Product with ID {product_id} not found")

        if "category_id" in update_data:
            _ensure_category_exists(db, update_data["category_id"])
        if update_data.get("barcode") and update_data["barcode"] != product.barcode:
            _ensure_unique_barcode(db, update_data["barcode"], exclude_id=product_id)

        for field, value in update_data.items():
            setattr(product, field, value)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            barcode = update_data.get("barcode")
            if barcode:
                raise ConflictError(f"Product with barcode '{barcode}' already exists", code="DuplicateBarcode") from e
            raise

    return get_product(db, product_id)


def delete_product(db: Session, actor: ActorContext, product_id: int) -> ProductResponse:
    """
    Delete a product together with the order lines that reference it.

    Historical order lines for the product are removed in the same
    transaction; order totals are left as recorded.
    """
    require(actor, Operation.PRODUCT_DELETE)

    with store_operation(db, "PRODUCT_DELETE", product_id=product_id):
        product = (
            db.query(Product)
            .options(joinedload(Product.category))
            .filter(Product.id == product_id)
            .first()
        )
        if product is None:
            raise NotFoundError(f"Product with ID {product_id} not found")
        deleted = ProductResponse.model_validate(product)

        removed_lines = (
            db.query(OrderItem)
            .filter(OrderItem.product_id == product_id)
            .delete(synchronize_session=False)
        )
        db.delete(product)
        db.commit()

    if removed_lines:
        logger.warning(
            "[PRODUCT_DELETE] product=%s removed %d order lines", product_id, removed_lines,
        )
    logger.info("[PRODUCT_DELETE] product=%s by user=%s", product_id, actor.user_id)
    return deleted
