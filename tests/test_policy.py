import pytest

from backoffice.auth.policy import ActorContext, Operation, ensure_not_self, is_allowed, require
from backoffice.data.database.user_model import Role
from backoffice.errors import AuthorizationError


@pytest.mark.parametrize("operation", [
    Operation.CATEGORY_CREATE,
    Operation.CATEGORY_UPDATE,
    Operation.PRODUCT_CREATE,
    Operation.PRODUCT_UPDATE,
    Operation.STOCK_ADJUST,
    Operation.ORDER_CREATE,
    Operation.ORDER_READ,
    Operation.ORDER_STATUS_UPDATE,
    Operation.DASHBOARD_READ,
])
def test_managers_only(operation):
    assert is_allowed(Role.ADMIN, operation)
    assert is_allowed(Role.STAFF, operation)
    assert not is_allowed(Role.CUSTOMER, operation)
    assert not is_allowed(None, operation)


@pytest.mark.parametrize("operation", [
    Operation.CATEGORY_DELETE,
    Operation.PRODUCT_DELETE,
    Operation.USER_READ,
    Operation.USER_ROLE_UPDATE,
])
def test_admin_only(operation):
    assert is_allowed(Role.ADMIN, operation)
    assert not is_allowed(Role.STAFF, operation)
    assert not is_allowed(Role.CUSTOMER, operation)
    assert not is_allowed(None, operation)


def test_catalog_reads_are_public():
    assert is_allowed(None, Operation.CATALOG_READ)
    for role in Role:
        assert is_allowed(role, Operation.CATALOG_READ)


def test_checkout_needs_any_signed_in_user():
    assert not is_allowed(None, Operation.ORDER_CHECKOUT)
    for role in Role:
        assert is_allowed(role, Operation.ORDER_CHECKOUT)


def test_every_operation_has_a_rule():
    for operation in Operation:
        is_allowed(Role.CUSTOMER, operation)


def test_require_rejects_anonymous_and_returns_actor():
    actor = ActorContext(user_id=1, role=Role.STAFF)
    assert require(actor, Operation.ORDER_CREATE) is actor
    with pytest.raises(AuthorizationError):
        require(None, Operation.ORDER_CREATE)
    with pytest.raises(AuthorizationError):
        require(actor, Operation.PRODUCT_DELETE)


def test_admin_cannot_target_themselves():
    admin = ActorContext(user_id=7, role=Role.ADMIN)
    with pytest.raises(AuthorizationError):
        ensure_not_self(admin, 7)
    ensure_not_self(admin, 8)
