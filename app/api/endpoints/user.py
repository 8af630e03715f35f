from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from app.core.context import AppContext
from app.core.dependencies import get_context, get_current_active_principal
from app.core.periods import normalize_period
from app.core.principal import Principal
from app.db.session import get_db
from app.schemas.commission import Commission
from app.schemas.common import SuccessResponse, success
from app.schemas.product import Product, ProductCreate, ProductUpdate
from app.schemas.stats import UserStats

router = APIRouter()

@router.get("/products", response_model=SuccessResponse[List[Product]])
def read_user_products(
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
    principal: Principal = Depends(get_current_active_principal),
    status: Optional[str] = Query(None, pattern="^(published|draft|pending|private)$"),
    per_page: Optional[int] = Query(None, ge=1, le=100),
    page: int = Query(1, ge=1),
):
    """Products the current user sells, in every status unless one is requested."""
    skip = (page - 1) * per_page if per_page else 0
    return success(context.catalog.list_for_seller(db, principal.user_id, status=status, skip=skip, limit=per_page))

@router.post("/products", response_model=SuccessResponse[Product], status_code=status.HTTP_201_CREATED)
def create_user_product(
    product_in: ProductCreate,
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
    principal: Principal = Depends(get_current_active_principal),
):
    return success(context.catalog.create(db, principal, product_in))

@router.put("/products/{product_id}", response_model=SuccessResponse[Product])
@router.patch("/products/{product_id}", response_model=SuccessResponse[Product])
def update_user_product(
    product_id: int,
    product_in: ProductUpdate,
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
    principal: Principal = Depends(get_current_active_principal),
):
    """
    Partial update: fields left out of the body keep their current value.
    Only the product's seller or an administrator may change it.
    """
    return success(context.catalog.update(db, principal, product_id, product_in))

@router.delete("/products/{product_id}", response_model=SuccessResponse[dict])
def delete_user_product(
    product_id: int,
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
    principal: Principal = Depends(get_current_active_principal),
):
    deleted_id = context.catalog.delete(db, principal, product_id)
    return success({"deleted": True, "id": deleted_id})

@router.get("/stats", response_model=SuccessResponse[UserStats])
def read_user_stats(
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
    principal: Principal = Depends(get_current_active_principal),
    period: Optional[str] = Query(None, description="day, week, month, year or all (defaults to month)"),
):
    stats = context.stats.seller_stats(db, principal.user_id, normalize_period(period))
    stats["products_count"] = context.catalog.count_for_seller(db, principal.user_id)
    return success(stats)

@router.get("/commissions", response_model=SuccessResponse[List[Commission]])
def read_user_commissions(
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
    principal: Principal = Depends(get_current_active_principal),
    status: Optional[str] = Query(None, pattern="^(pending|completed|refunded|cancelled)$"),
    per_page: int = Query(100, ge=1, le=200),
    page: int = Query(1, ge=1),
    orderby: str = Query("created_at"),
    order: str = Query("desc"),
):
    """Commission entries charged to the current user as seller."""
    return success(context.ledger.list(
        db,
        seller_id=principal.user_id,
        status=status,
        limit=per_page,
        offset=(page - 1) * per_page,
        orderby=orderby,
        order=order,
    ))
