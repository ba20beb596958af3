"""Errors raised by the checkout and reporting engines."""


class KasirError(Exception):
    """Base class for all engine errors."""
    pass


class InvalidInputError(KasirError):
    """Exception raised for a malformed basket or date range."""
    pass


class ProductNotFoundError(KasirError):
    """Exception raised when a basket line references an unknown product."""

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"product id {product_id} not found")


class InsufficientStockError(KasirError):
    """Exception raised when there's not enough stock to fulfill a line."""

    def __init__(self, product_name: str):
        self.product_name = product_name
        super().__init__(f"insufficient stock for product {product_name}")


class StoreFailureError(KasirError):
    """Exception raised when the database fails during checkout."""
    pass


class ReportUnavailableError(KasirError):
    """Exception raised when a report aggregate query fails."""
    pass
