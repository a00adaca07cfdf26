"""Identity, sessions and the access policy."""
from .policy import ActorContext, Operation, is_allowed, require, ensure_not_self
from .sessions import get_current_actor, get_optional_actor

__all__ = [
    "ActorContext",
    "Operation",
    "is_allowed",
    "require",
    "ensure_not_self",
    "get_current_actor",
    "get_optional_actor",
]
