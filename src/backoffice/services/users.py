"""User registration, login and role management."""
import logging
from typing import List, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice.auth import sessions
from backoffice.auth.passwords import hash_password, verify_password
from backoffice.auth.policy import ActorContext, Operation, ensure_not_self, require
from backoffice.data.database.user_model import AuthSession, Role, User
from backoffice.data.database.user_schema import LoginRequest, RegisterRequest
from backoffice.errors import AuthorizationError, ConflictError, NotFoundError
from backoffice.services.base import store_operation

logger = logging.getLogger(__name__)


def register_user(db: Session, data: RegisterRequest) -> User:
    """
    Create a user account.

    The very first account becomes ADMIN so a fresh installation can be
    administered; every later account starts as CUSTOMER.
    """
    email = data.email.lower()
    with store_operation(db, "REGISTER_POST", email=email):
        if db.query(User.id).filter(User.email == email).first() is not None:
            raise ConflictError("This email address is already in use.", code="DuplicateEmail")

        is_first = db.query(User.id).first() is None
        user = User(
            name=data.name,
            email=email,
            password_hash=hash_password(data.password),
            role=Role.ADMIN if is_first else Role.CUSTOMER,
        )
        db.add(user)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise ConflictError("This email address is already in use.", code="DuplicateEmail") from e
        db.refresh(user)

    logger.info("[REGISTER_POST] user=%s role=%s", user.id, user.role.value)
    return user


def login(db: Session, data: LoginRequest) -> Tuple[str, AuthSession]:
    """Check credentials and open a session. Returns the bearer token and the session."""
    with store_operation(db, "LOGIN_POST"):
        user = db.query(User).filter(User.email == data.email.lower()).first()
        if user is None or not verify_password(data.password, user.password_hash):
            raise AuthorizationError("Invalid email or password.")
        return sessions.issue_session(db, user)


def logout(db: Session, token: str) -> None:
    with store_operation(db, "LOGOUT_POST"):
        sessions.revoke_session(db, token)


def get_user(db: Session, user_id: int) -> User:
    with store_operation(db, "USER_GET", user_id=user_id):
        user = db.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User with ID {user_id} not found")
    return user


def list_users(db: Session, actor: ActorContext) -> List[User]:
    require(actor, Operation.USER_READ)
    with store_operation(db, "USERS_GET"):
        return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def set_user_role(db: Session, actor: ActorContext, user_id: int, role: Role) -> User:
    """
    Reassign a user's role.

    Raises:
        AuthorizationError: actor is not an admin, or is targeting themselves
        NotFoundError: user does not exist
    """
    require(actor, Operation.USER_ROLE_UPDATE)
    ensure_not_self(actor, user_id)

    with store_operation(db, "USER_PATCH", user_id=user_id):
        user = db.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User with ID {user_id} not found")
        previous = user.role
        user.role = role
        db.commit()
        db.refresh(user)

    logger.info(
        "[USER_PATCH] user=%s role %s -> %s by admin=%s",
        user_id, previous.value, role.value, actor.user_id,
    )
    return user
