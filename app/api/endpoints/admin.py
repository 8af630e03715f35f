from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from app.core.context import AppContext
from app.core.dependencies import get_context, get_current_admin
from app.core.periods import normalize_period
from app.core.principal import Principal
from app.db.session import get_db
from app.schemas.commission import Commission
from app.schemas.common import SuccessResponse, success
from app.schemas.stats import PlatformStats, SellerWithStats, AdminUserDetail

router = APIRouter()

@router.get("/stats", response_model=SuccessResponse[PlatformStats])
def read_platform_stats(
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
    principal: Principal = Depends(get_current_admin),
    period: Optional[str] = Query(None, description="day, week, month, year or all (defaults to month)"),
):
    return success(context.stats.platform_stats(db, normalize_period(period)))

@router.get("/users", response_model=SuccessResponse[List[SellerWithStats]])
def read_sellers(
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
    principal: Principal = Depends(get_current_admin),
    period: Optional[str] = Query(None),
):
    """Sellers with sales in the period; users without sales are left out."""
    return success(context.stats.all_sellers_with_stats(db, normalize_period(period)))

@router.get("/users/{user_id}", response_model=SuccessResponse[AdminUserDetail])
def read_seller_detail(
    user_id: int,
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
    principal: Principal = Depends(get_current_admin),
    period: Optional[str] = Query(None),
):
    """Stats, listed products and the ten most recent orders of one seller."""
    return success(context.stats.seller_detail(db, user_id, normalize_period(period)))

@router.get("/commissions", response_model=SuccessResponse[List[Commission]])
def read_commissions(
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
    principal: Principal = Depends(get_current_admin),
    order_id: Optional[int] = Query(None),
    seller_id: Optional[int] = Query(None),
    buyer_id: Optional[int] = Query(None),
    status: Optional[str] = Query(None, pattern="^(pending|completed|refunded|cancelled)$"),
    per_page: int = Query(100, ge=1, le=200),
    page: int = Query(1, ge=1),
    orderby: str = Query("created_at"),
    order: str = Query("desc"),
):
    return success(context.ledger.list(
        db,
        order_id=order_id,
        seller_id=seller_id,
        buyer_id=buyer_id,
        status=status,
        limit=per_page,
        offset=(page - 1) * per_page,
        orderby=orderby,
        order=order,
    ))
