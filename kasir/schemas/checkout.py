from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional


class CheckoutItem(BaseModel):
    """One basket line: which product and how many."""
    product_id: int = Field(..., description="ID of the product to sell")
    quantity: int = Field(..., ge=1, description="Quantity to sell (must be positive)")


class CheckoutRequest(BaseModel):
    """Schema for a checkout request. Line order is preserved."""
    items: list[CheckoutItem] = Field(default_factory=list, description="Basket lines")


class TransactionDetailResponse(BaseModel):
    """Schema for a transaction line item."""
    product_id: int
    product_name: str
    quantity: int
    subtotal: int

    model_config = ConfigDict(from_attributes=True)


class TransactionResponse(BaseModel):
    """Schema for a committed transaction."""
    id: int
    total_amount: int
    created_at: Optional[datetime] = None
    details: list[TransactionDetailResponse]

    model_config = ConfigDict(from_attributes=True)
