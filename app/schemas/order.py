from pydantic import BaseModel, Field, AliasChoices
from typing import Optional, List, Dict, Any
from datetime import datetime
from decimal import Decimal

ORDER_STATUSES = ("pending", "processing", "on-hold", "completed", "cancelled", "refunded", "failed")

class OrderLineIn(BaseModel):
    product_id: int = Field(validation_alias=AliasChoices("product_id", "id"))
    quantity: int = Field(default=1, ge=1)

class OrderCreate(BaseModel):
    """
    Cart-like request from the client. The buyer is the authenticated principal;
    prices and seller attribution are taken from the catalog, never from the client.
    """
    line_items: List[OrderLineIn] = Field(default=[], validation_alias=AliasChoices("line_items", "products"))
    billing: Optional[Dict[str, Any]] = None
    shipping: Optional[Dict[str, Any]] = None
    payment_method: Optional[str] = Field(default=None, max_length=100)

class OrderStatusUpdate(BaseModel):
    status: str = Field(..., pattern="^(pending|processing|on-hold|completed|cancelled|refunded|failed)$")

class OrderItem(BaseModel):
    id: int
    product_id: Optional[int] = None
    name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    total: Decimal
    seller_id: Optional[int] = None

    class Config:
        from_attributes = True

class Order(BaseModel): # Full schema for returning order data to the client
    id: int
    customer_id: int
    status: str
    currency: str
    subtotal: Decimal
    total: Decimal
    payment_method: Optional[str] = None
    billing: Optional[Dict[str, Any]] = None
    shipping: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime

    line_items: List[OrderItem] = Field(default=[], validation_alias=AliasChoices("items", "line_items"))

    class Config:
        from_attributes = True
