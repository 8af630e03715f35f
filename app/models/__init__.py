from .user import User
from .taxonomy import AttributeTaxonomy, AttributeTerm
from .product import Product, ProductCategory, ProductAttribute
from .order import Order, OrderItem
from .commission import Commission
