from .token import TokenData
from .common import SuccessResponse, ErrorResponse, success
from .user import UserBase, UserCreate, User, SellerInfo
from .product import (
    ProductAttributeIn,
    ProductCreate,
    ProductUpdate,
    Category,
    ProductAttribute,
    Product,
    ProductListing
)
from .order import (
    OrderLineIn,
    OrderCreate,
    OrderStatusUpdate,
    OrderItem,
    Order
)
from .commission import (
    CommissionBase,
    CommissionCreate,
    Commission as CommissionSchema, # Alias to avoid clash with the Commission model
)
from .stats import SellerStats, UserStats, SellerWithStats, PlatformStats, AdminUserDetail
