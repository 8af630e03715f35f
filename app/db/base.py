# Import all the models so that Base.metadata knows about every table
from app.db.base_class import Base # noqa: F401
from app.models.user import User # noqa: F401
from app.models.taxonomy import AttributeTaxonomy, AttributeTerm # noqa: F401
from app.models.product import Product, ProductCategory, ProductAttribute # noqa: F401
from app.models.order import Order, OrderItem # noqa: F401
from app.models.commission import Commission # noqa: F401
