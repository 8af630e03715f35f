from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal

class CommissionBase(BaseModel):
    order_id: int
    product_id: int
    seller_id: int
    buyer_id: int
    amount: Decimal = Field(..., ge=0)
    status: str = Field(default="pending", pattern="^(pending|completed|refunded|cancelled)$")

class CommissionCreate(CommissionBase):
    """Schema for creating a commission record. Used internally by the ledger."""
    pass

class Commission(CommissionBase):
    """Full schema for returning commission data to the client."""
    id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
