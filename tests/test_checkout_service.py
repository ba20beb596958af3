"""Tests for the checkout engine, called directly."""
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from kasir.exceptions import (
    InsufficientStockError,
    InvalidInputError,
    ProductNotFoundError,
    StoreFailureError,
)
from kasir.models.product import Product
from kasir.models.transaction import Transaction, TransactionDetail
from kasir.schemas.checkout import CheckoutItem
from kasir.services.checkout_service import CheckoutService


def basket(*lines):
    return [CheckoutItem(product_id=pid, quantity=qty) for pid, qty in lines]


def ledger_rows(db_session):
    return db_session.query(Transaction).count(), db_session.query(TransactionDetail).count()


def test_checkout_prices_and_decrements(db_session, make_product, stock_of):
    """Test total is the sum of price * quantity and stock drops by quantity."""
    a = make_product("A", price=100, stock=5)
    b = make_product("B", price=200, stock=2)

    transaction = CheckoutService(db_session).checkout(basket((a, 2), (b, 1)))

    assert transaction.id is not None
    assert transaction.total_amount == 400
    assert transaction.created_at is not None
    assert [(d.product_id, d.product_name, d.quantity, d.subtotal) for d in transaction.details] == [
        (a, "A", 2, 200),
        (b, "B", 1, 200),
    ]
    assert stock_of(a) == 3
    assert stock_of(b) == 1


def test_details_keep_basket_order(db_session, make_product):
    """Test details come back in the order the lines were submitted."""
    a = make_product("A", price=1, stock=10)
    b = make_product("B", price=1, stock=10)
    c = make_product("C", price=1, stock=10)

    transaction = CheckoutService(db_session).checkout(basket((c, 1), (a, 2), (b, 3)))

    assert [d.product_id for d in transaction.details] == [c, a, b]


def test_insufficient_stock_rolls_back_everything(db_session, make_product, stock_of):
    """Test a failing last line undoes the decrements of earlier lines."""
    a = make_product("A", price=100, stock=5)
    b = make_product("B", price=200, stock=2)

    with pytest.raises(InsufficientStockError) as exc_info:
        CheckoutService(db_session).checkout(basket((a, 2), (b, 3)))

    assert exc_info.value.product_name == "B"
    assert stock_of(a) == 5
    assert stock_of(b) == 2
    assert ledger_rows(db_session) == (0, 0)


def test_unknown_product_rolls_back(db_session, make_product, stock_of):
    """Test a missing product aborts the whole basket."""
    a = make_product("A", price=100, stock=5)

    with pytest.raises(ProductNotFoundError) as exc_info:
        CheckoutService(db_session).checkout(basket((a, 1), (404, 1)))

    assert exc_info.value.product_id == 404
    assert str(exc_info.value) == "product id 404 not found"
    assert stock_of(a) == 5
    assert ledger_rows(db_session) == (0, 0)


def test_duplicate_lines_deplete_running_stock(db_session, make_product, stock_of):
    """Test the second line for a product is checked against what is left."""
    a = make_product("A", price=100, stock=5)

    with pytest.raises(InsufficientStockError):
        CheckoutService(db_session).checkout(basket((a, 3), (a, 3)))

    assert stock_of(a) == 5
    assert ledger_rows(db_session) == (0, 0)


def test_duplicate_lines_within_stock(db_session, make_product, stock_of):
    """Test duplicate lines are kept as separate details."""
    a = make_product("A", price=100, stock=5)

    transaction = CheckoutService(db_session).checkout(basket((a, 2), (a, 3)))

    assert transaction.total_amount == 500
    assert [d.quantity for d in transaction.details] == [2, 3]
    assert stock_of(a) == 0


def test_non_positive_quantity_is_rejected(db_session, make_product, stock_of):
    """Test the engine refuses lines that bypassed schema validation."""
    a = make_product("A", price=100, stock=5)
    items = [CheckoutItem.model_construct(product_id=a, quantity=0)]

    with pytest.raises(InvalidInputError):
        CheckoutService(db_session).checkout(items)

    assert stock_of(a) == 5


def test_empty_basket_creates_zero_transaction(db_session):
    """Test an empty basket is allowed."""
    transaction = CheckoutService(db_session).checkout([])

    assert transaction.total_amount == 0
    assert transaction.details == []
    assert ledger_rows(db_session) == (1, 0)


def test_store_failure_rolls_back(db_session, make_product, stock_of):
    """Test a database error after the decrements leaves no trace."""
    a = make_product("A", price=100, stock=5)

    with patch(
        "kasir.stores.ledger.LedgerStore.insert_details",
        side_effect=OperationalError("INSERT", {}, Exception("timeout")),
    ):
        with pytest.raises(StoreFailureError) as exc_info:
            CheckoutService(db_session).checkout(basket((a, 2)))

    assert isinstance(exc_info.value.__cause__, OperationalError)
    assert stock_of(a) == 5
    assert ledger_rows(db_session) == (0, 0)


def test_lost_race_on_decrement(db_session, make_product, stock_of):
    """Test a decrement that matches no row fails the checkout."""
    a = make_product("A", price=100, stock=5)

    with patch("kasir.stores.catalog.CatalogStore.decrement_stock", return_value=False):
        with pytest.raises(InsufficientStockError):
            CheckoutService(db_session).checkout(basket((a, 1)))

    assert stock_of(a) == 5
    assert ledger_rows(db_session) == (0, 0)


def test_details_snapshot_product_name(db_session, make_product):
    """Test renaming or repricing a product does not rewrite past details."""
    a = make_product("Old Name", price=100, stock=5)
    transaction = CheckoutService(db_session).checkout(basket((a, 1)))

    product = db_session.get(Product, a)
    product.name = "New Name"
    product.price = 999
    db_session.commit()

    detail = db_session.query(TransactionDetail).filter_by(transaction_id=transaction.id).one()
    assert detail.product_name == "Old Name"
    assert detail.subtotal == 100


def test_unexpected_error_rolls_back(db_session, make_product, stock_of):
    """Test a non-database error mid-checkout leaves nothing for a later commit."""
    a = make_product("A", price=100, stock=5)

    with patch(
        "kasir.stores.ledger.LedgerStore.insert_transaction",
        side_effect=RuntimeError("boom"),
    ):
        with pytest.raises(RuntimeError):
            CheckoutService(db_session).checkout(basket((a, 2)))

    db_session.commit()
    assert stock_of(a) == 5
    assert ledger_rows(db_session) == (0, 0)


def test_non_integer_product_id_is_rejected(db_session, make_product, stock_of):
    """Test a malformed product id is invalid input, not a store failure."""
    a = make_product("A", price=100, stock=5)
    items = [
        CheckoutItem(product_id=a, quantity=1),
        CheckoutItem.model_construct(product_id="abc", quantity=1),
    ]

    with pytest.raises(InvalidInputError):
        CheckoutService(db_session).checkout(items)

    assert stock_of(a) == 5
    assert ledger_rows(db_session) == (0, 0)
