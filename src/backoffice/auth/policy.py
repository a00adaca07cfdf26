"""Role-based access policy evaluated before every mutation."""
import enum
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from backoffice.data.database.user_model import Role
from backoffice.errors import AuthorizationError


class Operation(str, enum.Enum):
    CATALOG_READ = "catalog:read"
    CATEGORY_CREATE = "category:create"
    CATEGORY_UPDATE = "category:update"
    CATEGORY_DELETE = "category:delete"
    PRODUCT_CREATE = "product:create"
    PRODUCT_UPDATE = "product:update"
    PRODUCT_DELETE = "product:delete"
    STOCK_ADJUST = "stock:adjust"
    ORDER_CREATE = "order:create"
    ORDER_CHECKOUT = "order:checkout"
    ORDER_READ = "order:read"
    ORDER_STATUS_UPDATE = "order:status"
    USER_READ = "user:read"
    USER_ROLE_UPDATE = "user:role"
    DASHBOARD_READ = "dashboard:read"


@dataclass(frozen=True)
class ActorContext:
    """Authenticated identity performing a request."""
    user_id: int
    role: Role


ANYONE = None  # marker: no authentication required
AUTHENTICATED: FrozenSet[Role] = frozenset(Role)
MANAGERS: FrozenSet[Role] = frozenset({Role.ADMIN, Role.STAFF})
ADMINS: FrozenSet[Role] = frozenset({Role.ADMIN})

POLICY: Dict[Operation, Optional[FrozenSet[Role]]] = {
    Operation.CATALOG_READ: ANYONE,
    Operation.CATEGORY_CREATE: MANAGERS,
    Operation.CATEGORY_UPDATE: MANAGERS,
    Operation.CATEGORY_DELETE: ADMINS,
    Operation.PRODUCT_CREATE: MANAGERS,
    Operation.PRODUCT_UPDATE: MANAGERS,
    Operation.PRODUCT_DELETE: ADMINS,
    Operation.STOCK_ADJUST: MANAGERS,
    Operation.ORDER_CREATE: MANAGERS,
    Operation.ORDER_CHECKOUT: AUTHENTICATED,
    Operation.ORDER_READ: MANAGERS,
    Operation.ORDER_STATUS_UPDATE: MANAGERS,
    Operation.USER_READ: ADMINS,
    Operation.USER_ROLE_UPDATE: ADMINS,
    Operation.DASHBOARD_READ: MANAGERS,
}


def is_allowed(role: Optional[Role], operation: Operation) -> bool:
    """Return True if an actor with ``role`` (None when anonymous) may perform ``operation``."""
    allowed = POLICY[operation]
    if allowed is ANYONE:
        return True
    return role is not None and role in allowed


def require(actor: Optional[ActorContext], operation: Operation) -> ActorContext:
    """Raise AuthorizationError unless ``actor`` may perform ``operation``."""
    role = actor.role if actor is not None else None
    if not is_allowed(role, operation):
        raise AuthorizationError("Unauthorized")
    return actor


def ensure_not_self(actor: ActorContext, user_id: int) -> None:
    """An admin may never change their own role."""
    if actor.user_id == user_id:
        raise AuthorizationError("Admin cannot change their own role.")
