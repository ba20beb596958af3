from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional, Sequence

from kasir.config import get_settings
from kasir.database import apply_timeouts
from kasir.exceptions import (
    InsufficientStockError,
    InvalidInputError,
    ProductNotFoundError,
    StoreFailureError,
)
from kasir.models.transaction import Transaction, TransactionDetail
from kasir.schemas.checkout import CheckoutItem
from kasir.stores.catalog import CatalogStore
from kasir.stores.ledger import LedgerStore


class CheckoutService:
    """
    Turns a basket into a committed transaction, all or nothing.

    CONSISTENCY STRATEGY:
    =====================
    Every basket line is handled inside one database transaction:

    1. SELECT the product FOR UPDATE (locks the row until commit)
    2. Check the running stock against the requested quantity
    3. Decrement stock with a conditional UPDATE (stock >= quantity)
    4. Snapshot name and subtotal into a detail row

    Lines are processed one by one in basket order. Two lines for the same
    product therefore deplete the stock sequentially, and the second line
    is checked against what the first one left.

    Any failure rolls the whole transaction back, so neither stock nor the
    ledger changes. Concurrent checkouts on the same product serialize on
    the row lock; the loser sees the reduced stock after the winner commits.
    """

    def __init__(self, db: Session, timeout_ms: Optional[int] = None):
        self.db = db
        self.catalog = CatalogStore(db)
        self.ledger = LedgerStore(db)
        self.timeout_ms = timeout_ms if timeout_ms is not None else get_settings().STATEMENT_TIMEOUT_MS

    def checkout(self, items: Sequence[CheckoutItem]) -> Transaction:
        """
        Validate, price and commit a basket.

        Args:
            items: Basket lines in the order they should appear on the receipt

        Returns:
            The committed transaction with its details

        Raises:
            InvalidInputError: If a line has a bad product id or a non-positive quantity
            ProductNotFoundError: If a product doesn't exist
            InsufficientStockError: If a line asks for more than is left
            StoreFailureError: If the database fails or times out
        """
        self._validate(items)

        try:
            apply_timeouts(self.db, self.timeout_ms)

            total_amount = 0
            details = []

            for item in items:
                product = self.catalog.get_product(item.product_id)
                if product is None:
                    raise ProductNotFoundError(item.product_id)

                if product.stock < item.quantity:
                    raise InsufficientStockError(product.name)

                subtotal = product.price * item.quantity
                total_amount += subtotal

                if not self.catalog.decrement_stock(product.id, item.quantity):
                    raise InsufficientStockError(product.name)

                details.append(
                    TransactionDetail(
                        product_id=product.id,
                        product_name=product.name,
                        quantity=item.quantity,
                        subtotal=subtotal,
                    )
                )

            transaction = self.ledger.insert_transaction(total_amount)
            self.ledger.insert_details(transaction.id, details)

            self.db.commit()
            return transaction

        except (ProductNotFoundError, InsufficientStockError):
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreFailureError(f"checkout failed: {e}") from e
        except Exception:
            self.db.rollback()
            raise

    @staticmethod
    def _validate(items: Sequence[CheckoutItem]) -> None:
        for position, item in enumerate(items):
            product_id = item.product_id
            if isinstance(product_id, bool) or not isinstance(product_id, int):
                raise InvalidInputError(
                    f"item {position}: product_id must be an integer, got {product_id!r}"
                )
            quantity = item.quantity
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
                raise InvalidInputError(
                    f"item {position}: quantity must be a positive integer, got {quantity!r}"
                )
