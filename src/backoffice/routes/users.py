"""User administration routes."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from backoffice.auth.policy import ActorContext
from backoffice.auth.sessions import get_optional_actor
from backoffice.data.database.connection import get_db
from backoffice.data.database.user_schema import RoleUpdate, UserResponse
from backoffice.routes import RowId
from backoffice.services import users

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[UserResponse], summary="Get all users")
def get_users(
    db: Session = Depends(get_db),
    actor: Optional[ActorContext] = Depends(get_optional_actor)
):
    """List users, newest first. Admins only."""
    return users.list_users(db, actor)


@router.patch(
    "/{user_id}/role",
    response_model=UserResponse,
    summary="Change a user's role",
    description="Admins only. An admin cannot change their own role."
)
def update_user_role(
    user_id: RowId,
    body: RoleUpdate,
    db: Session = Depends(get_db),
    actor: Optional[ActorContext] = Depends(get_optional_actor)
):
    return users.set_user_role(db, actor, user_id, body.role)
