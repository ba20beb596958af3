from sqlalchemy import update
from sqlalchemy.orm import Session
from typing import Optional

from kasir.models.product import Product


class CatalogStore:
    """
    Product lookups and stock writes used by checkout.

    The store never commits. All writes join the caller's transaction and
    are discarded by a rollback.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> Optional[Product]:
        """
        Read a product row and lock it until the transaction ends.

        The row is always re-read from the database, so a second basket
        line for the same product sees the stock left by the first one.
        """
        return (
            self.db.query(Product)
            .filter(Product.id == product_id)
            .populate_existing()
            .with_for_update()  # Pessimistic locking
            .first()
        )

    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        """
        Take `quantity` units off the product's stock.

        The UPDATE only matches while enough stock remains, so it can never
        drive stock negative even without the row lock.

        Returns:
            True if the stock was decremented, False otherwise
        """
        result = self.db.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
