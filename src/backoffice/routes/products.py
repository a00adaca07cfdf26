"""Product catalog and stock routes."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from backoffice.auth.policy import ActorContext
from backoffice.auth.sessions import get_optional_actor
from backoffice.data.database.connection import MAX_DB_INT, get_db
from backoffice.data.database.product_schema import (
    ProductCreate, ProductUpdate, ProductResponse, StockAdjustment,
)
from backoffice.routes import RowId
from backoffice.services import catalog, inventory

router = APIRouter(prefix="/products", tags=["products"])


@router.get(
    "",
    response_model=List[ProductResponse],
    summary="Get all products",
    description="Public catalog listing, newest first, with optional search and category filter"
)
def get_products(
    query: Optional[str] = Query(None, description="Search in product name or description"),
    category_id: Optional[int] = Query(None, alias="categoryId", ge=0, le=MAX_DB_INT, description="Filter by category"),
    skip: int = Query(0, ge=0, le=MAX_DB_INT),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db)
):
    """Get all products with optional filters."""
    return catalog.list_products(db, query=query, category_id=category_id, skip=skip, limit=limit)


@router.get(
    "/barcode/{barcode}",
    response_model=ProductResponse,
    summary="Get product by barcode",
    description="Look up a product from a scanned barcode"
)
def get_product_by_barcode(barcode: str, db: Session = Depends(get_db)):
    return catalog.get_product_by_barcode(db, barcode)


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get product by ID"
)
def get_product(product_id: RowId, db: Session = Depends(get_db)):
    """Get a product by ID."""
    return catalog.get_product(db, product_id)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product"
)
def create_product(
    product: ProductCreate,
    db: Session = Depends(get_db),
    actor: Optional[ActorContext] = Depends(get_optional_actor)
):
    """Create a new product (ADMIN or STAFF)."""
    return catalog.create_product(db, actor, product)


@router.patch(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Partially update a product",
    description="Update catalog fields. Stock is changed through the stock endpoint only."
)
def update_product(
    product_id: RowId,
    product_update: ProductUpdate,
    db: Session = Depends(get_db),
    actor: Optional[ActorContext] = Depends(get_optional_actor)
):
    return catalog.update_product(db, actor, product_id, product_update)


@router.delete(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Delete a product",
    description="Admins only. Also removes the order lines that reference the product."
)
def delete_product(
    product_id: RowId,
    db: Session = Depends(get_db),
    actor: Optional[ActorContext] = Depends(get_optional_actor)
):
    return catalog.delete_product(db, actor, product_id)


@router.patch(
    "/{product_id}/stock",
    response_model=ProductResponse,
    summary="Adjust product stock",
    description="Add a signed adjustment to stock. Rejected if stock would go below zero."
)
def adjust_stock(
    product_id: RowId,
    body: StockAdjustment,
    db: Session = Depends(get_db),
    actor: Optional[ActorContext] = Depends(get_optional_actor)
):
    """Restock or correct a product's stock level."""
    inventory.adjust_stock(db, actor, product_id, body.adjustment)
    return catalog.get_product(db, product_id)
