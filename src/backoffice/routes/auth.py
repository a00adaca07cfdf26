"""Registration and login routes."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from backoffice.auth.policy import ActorContext
from backoffice.auth.sessions import get_current_actor, get_current_token
from backoffice.data.database.connection import get_db
from backoffice.data.database.user_schema import (
    LoginRequest, RegisterRequest, TokenResponse, UserResponse,
)
from backoffice.services import users

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="The first registered user becomes ADMIN, everyone after that CUSTOMER."
)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    return users.register_user(db, payload)


@router.post("/login", response_model=TokenResponse, summary="Log in and obtain a bearer token")
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    token, session = users.login(db, payload)
    return TokenResponse(
        access_token=token,
        expires_at=session.expires_at,
        user=UserResponse.model_validate(session.user),
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, summary="Revoke the current token")
def logout(token: str = Depends(get_current_token), db: Session = Depends(get_db)):
    users.logout(db, token)


@router.get("/me", response_model=UserResponse, summary="Get the signed-in user")
def me(actor: ActorContext = Depends(get_current_actor), db: Session = Depends(get_db)):
    return users.get_user(db, actor.user_id)
