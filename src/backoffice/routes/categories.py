"""Category routes."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional
from backoffice.auth.policy import ActorContext
from backoffice.auth.sessions import get_optional_actor
from backoffice.data.database.connection import get_db
from backoffice.data.database.product_schema import CategoryCreate, CategoryUpdate, CategoryResponse
from backoffice.routes import RowId
from backoffice.services import catalog

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=List[CategoryResponse], summary="Get all categories")
def get_categories(db: Session = Depends(get_db)):
    """Get all categories ordered by name."""
    return catalog.list_categories(db)


@router.get("/{category_id}", response_model=CategoryResponse, summary="Get category by ID")
def get_category(category_id: RowId, db: Session = Depends(get_db)):
    return catalog.get_category(db, category_id)


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a category",
    description="Names are unique regardless of letter case"
)
def create_category(
    category: CategoryCreate,
    db: Session = Depends(get_db),
    actor: Optional[ActorContext] = Depends(get_optional_actor)
):
    return catalog.create_category(db, actor, category)


@router.patch("/{category_id}", response_model=CategoryResponse, summary="Rename a category")
def update_category(
    category_id: RowId,
    category: CategoryUpdate,
    db: Session = Depends(get_db),
    actor: Optional[ActorContext] = Depends(get_optional_actor)
):
    return catalog.update_category(db, actor, category_id, category)


@router.delete(
    "/{category_id}",
    response_model=CategoryResponse,
    summary="Delete a category",
    description="Admins only. Fails with 409 while any product is assigned to the category."
)
def delete_category(
    category_id: RowId,
    db: Session = Depends(get_db),
    actor: Optional[ActorContext] = Depends(get_optional_actor)
):
    return catalog.delete_category(db, actor, category_id)
