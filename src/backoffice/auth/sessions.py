"""Bearer-token sessions and the request identity dependencies."""
import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from backoffice.auth.policy import ActorContext
from backoffice.config import settings
from backoffice.data.database.connection import get_db
from backoffice.data.database.user_model import AuthSession, User
from backoffice.errors import AuthorizationError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def hash_token(token: str) -> str:
    """Tokens are stored hashed so a leaked table cannot be replayed."""
    return hashlib.sha256(token.encode()).hexdigest()


def issue_session(db: Session, user: User) -> Tuple[str, AuthSession]:
    """
    Create a new login session for ``user``.

    Returns:
        The plaintext token (shown to the client once) and the stored session
    """
    token = secrets.token_urlsafe(32)
    session = AuthSession(
        token=hash_token(token),
        user_id=user.id,
        expires_at=_utcnow() + timedelta(hours=settings.session_ttl_hours),
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    return token, session


def revoke_session(db: Session, token: str) -> None:
    db.query(AuthSession).filter(AuthSession.token == hash_token(token)).delete()
    db.commit()


def resolve_actor(db: Session, token: str) -> Optional[ActorContext]:
    """Map a bearer token to the acting user, or None if unknown or expired."""
    row = (
        db.query(AuthSession.user_id, User.role)
        .join(User, User.id == AuthSession.user_id)
        .filter(AuthSession.token == hash_token(token), AuthSession.expires_at > _utcnow())
        .first()
    )
    # Identity lookup is read-only; release the transaction before the request runs
    db.rollback()
    if row is None:
        return None
    return ActorContext(user_id=row.user_id, role=row.role)


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization")
    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_optional_actor(request: Request, db: Session = Depends(get_db)) -> Optional[ActorContext]:
    """Dependency: the current actor, or None for anonymous requests."""
    token = _bearer_token(request)
    if token is None:
        return None
    return resolve_actor(db, token)


def get_current_actor(actor: Optional[ActorContext] = Depends(get_optional_actor)) -> ActorContext:
    """Dependency: the current actor; anonymous requests are rejected."""
    if actor is None:
        raise AuthorizationError("Unauthorized")
    return actor


def get_current_token(request: Request) -> str:
    token = _bearer_token(request)
    if token is None:
        raise AuthorizationError("Unauthorized")
    return token
