from pydantic import BaseModel, Field, ConfigDict


class BestSellingProduct(BaseModel):
    """Product with the highest sold quantity in the report window."""
    name: str = Field(..., alias="nama")
    total_sold: int = Field(..., alias="qty_terjual")

    model_config = ConfigDict(populate_by_name=True)


class SalesReport(BaseModel):
    """Aggregated sales over a closed time interval."""
    total_revenue: int = 0
    total_transaction: int = Field(0, alias="total_transaksi")
    top_product: BestSellingProduct = Field(..., alias="produk_terlaris")

    model_config = ConfigDict(populate_by_name=True)
