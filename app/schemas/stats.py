from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from app.schemas.product import Product
from app.schemas.order import Order

class SellerStats(BaseModel):
    total_sales: Decimal = Decimal("0")
    order_count: int = 0
    commission: Decimal = Decimal("0")
    net_earnings: Decimal = Decimal("0")
    product_count: int = 0
    average_order_value: Decimal = Decimal("0")
    order_frequency: float = 0.0

class UserStats(SellerStats):
    products_count: int = 0 # All of the seller's products, whatever their status

class SellerWithStats(SellerStats):
    id: int
    name: Optional[str] = None
    email: str

class PlatformStats(BaseModel):
    total_sales: Decimal = Decimal("0")
    total_orders: int = 0
    total_commission: Decimal = Decimal("0")
    active_sellers: int = 0
    total_products: int = 0

class AdminUserDetail(BaseModel):
    id: int
    name: Optional[str] = None
    email: str
    registered: datetime
    stats: SellerStats
    products: List[Product] = []
    orders: List[Order] = []
