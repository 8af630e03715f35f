from decimal import Decimal
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from app.core.config import DEFAULT_PER_PAGE
from app.core.context import AppContext
from app.core.dependencies import get_context, get_current_principal
from app.core.principal import Principal
from app.db.session import get_db
from app.schemas.common import SuccessResponse, success
from app.schemas.order import Order as OrderSchema, OrderCreate
from app.schemas.product import Product as ProductSchema, ProductListing

router = APIRouter()

@router.get("/products", response_model=SuccessResponse[ProductListing])
def read_products(
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
    per_page: int = Query(DEFAULT_PER_PAGE, ge=1, le=100),
    page: int = Query(1, ge=1),
    category: Optional[str] = Query(None, description="Category slug"),
    search: Optional[str] = Query(None, description="Matches product name and description"),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    orderby: str = Query("date", description="date, price, name or id"),
    order: str = Query("desc"),
):
    """
    Public catalog listing. Only published products are returned.
    Unknown orderby values sort by date; any order other than "asc" sorts descending.
    """
    listing = context.catalog.search(
        db,
        page=page,
        per_page=per_page,
        category=category,
        search=search,
        min_price=min_price,
        max_price=max_price,
        orderby=orderby,
        order="asc" if order.lower() == "asc" else "desc",
    )
    return success(listing)

@router.get("/products/{product_id}", response_model=SuccessResponse[ProductSchema])
def read_product(
    product_id: int,
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
):
    return success(context.catalog.get(db, product_id, published_only=True))

@router.post("/orders", response_model=SuccessResponse[OrderSchema], status_code=status.HTTP_201_CREATED)
def create_order(
    order_in: OrderCreate,
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
    principal: Optional[Principal] = Depends(get_current_principal), # the order service rejects anonymous buyers
):
    """
    Place an order for the authenticated buyer.
    Prices and seller attribution come from the catalog; buying your own product is rejected.
    """
    return success(context.orders.create(db, principal, order_in))
