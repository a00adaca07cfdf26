"""Transactional guarantees of order placement and stock adjustment."""
import threading

import pytest
from sqlalchemy.exc import OperationalError

from conftest import order_count, order_item_count, seed_product, stock_of
from backoffice.data.database.connection import SessionLocal
from backoffice.data.database.order_schema import OrderItemRequest
from backoffice.errors import InsufficientStock, InternalError, NegativeStockError
from backoffice.services import inventory
from backoffice.services.inventory import adjust_stock
from backoffice.services.orders import place_order


def line(product_id, quantity):
    return OrderItemRequest(product_id=product_id, quantity=quantity)


def test_fault_after_first_decrement_leaves_no_trace(staff, monkeypatch):
    first = seed_product(name="First Item", stock=5)
    second = seed_product(name="Second Item", stock=5)
    real_decrement = inventory.decrement_stock
    calls = []

    def failing_decrement(db, product_id, quantity):
        calls.append(product_id)
        if len(calls) == 2:
            raise OperationalError("UPDATE products", {}, Exception("disk I/O error"))
        return real_decrement(db, product_id, quantity)

    monkeypatch.setattr(inventory, "decrement_stock", failing_decrement)

    with SessionLocal() as db:
        with pytest.raises(InternalError) as excinfo:
            place_order(db, staff.actor, [line(first, 2), line(second, 3)])

    assert calls == [first, second]
    assert excinfo.value.message == "Internal error"
    assert stock_of(first) == 5
    assert stock_of(second) == 5
    assert order_count() == 0
    assert order_item_count() == 0


def test_two_concurrent_orders_for_the_last_unit(staff):
    product = seed_product(name="Last Unit", stock=1)
    barrier = threading.Barrier(2)
    outcomes = []

    def attempt():
        db = SessionLocal()
        try:
            barrier.wait()
            place_order(db, staff.actor, [line(product, 1)])
            outcomes.append("placed")
        except InsufficientStock as e:
            outcomes.append(("insufficient", e.available))
        except Exception as e:  # surfaced through the assertion below
            outcomes.append(repr(e))
        finally:
            db.close()

    threads = [threading.Thread(target=attempt) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert sorted(outcomes, key=str) == sorted(["placed", ("insufficient", 0)], key=str)
    assert stock_of(product) == 0
    assert order_count() == 1


def test_many_concurrent_orders_never_oversell(staff):
    product = seed_product(name="Limited Run", stock=3)
    workers = 6
    barrier = threading.Barrier(workers)
    placed = []
    rejected = []
    errors = []

    def attempt():
        db = SessionLocal()
        try:
            barrier.wait()
            place_order(db, staff.actor, [line(product, 1)])
            placed.append(1)
        except InsufficientStock:
            rejected.append(1)
        except Exception as e:  # surfaced through the assertion below
            errors.append(repr(e))
        finally:
            db.close()

    threads = [threading.Thread(target=attempt) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert errors == []
    assert len(placed) == 3
    assert len(rejected) == 3
    assert stock_of(product) == 0


def test_interleaved_adjustments_and_orders_keep_stock_non_negative(staff):
    product = seed_product(stock=2)
    operations = [
        ("order", 1), ("adjust", -1), ("order", 1), ("adjust", 3),
        ("order", 4), ("adjust", -4), ("order", 2), ("adjust", -1),
    ]

    for kind, amount in operations:
        with SessionLocal() as db:
            try:
                if kind == "order":
                    place_order(db, staff.actor, [line(product, amount)])
                else:
                    adjust_stock(db, staff.actor, product, amount)
            except (InsufficientStock, NegativeStockError):
                pass
        assert stock_of(product) >= 0

    # 2 -1 -1 (rejected) +3 (rejected) (rejected) -2 -1
    assert stock_of(product) == 0


def test_rejected_adjustment_leaves_stock_untouched(staff):
    product = seed_product(stock=2)

    with SessionLocal() as db:
        with pytest.raises(NegativeStockError) as excinfo:
            adjust_stock(db, staff.actor, product, -3)

    assert excinfo.value.extra["available"] == 2
    assert stock_of(product) == 2


def test_guarded_decrement_refuses_to_go_negative(staff):
    product = seed_product(stock=1)

    with SessionLocal() as db:
        with pytest.raises(InsufficientStock):
            inventory.decrement_stock(db, product, 2)
        db.rollback()

    assert stock_of(product) == 1
