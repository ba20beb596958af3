from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from kasir.database import Base


class Transaction(Base):
    """
    A committed sale. Never updated or deleted once written.

    Attributes:
        id: Unique identifier for the transaction
        total_amount: Sum of the detail subtotals
        created_at: Timestamp when the transaction was committed
        details: Line items in basket order
    """
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    total_amount = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    details = relationship(
        "TransactionDetail",
        back_populates="transaction",
        order_by="TransactionDetail.id",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Transaction(id={self.id}, total_amount={self.total_amount})>"


class TransactionDetail(Base):
    """
    One basket line of a transaction.

    `product_name` and `subtotal` are snapshots taken at the time of sale,
    so later changes to the product do not alter history.
    """
    __tablename__ = "transaction_details"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    subtotal = Column(Integer, nullable=False)

    transaction = relationship("Transaction", back_populates="details")

    def __repr__(self):
        return (
            f"<TransactionDetail(transaction_id={self.transaction_id}, "
            f"product_id={self.product_id}, quantity={self.quantity})>"
        )
