from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from app.core.context import AppContext
from app.core.dependencies import get_context, get_current_active_principal, get_current_admin
from app.core.principal import Principal
from app.db.session import get_db
from app.schemas.common import SuccessResponse, success
from app.schemas.order import Order, OrderStatusUpdate

router = APIRouter()

@router.get("/", response_model=SuccessResponse[List[Order]])
async def read_orders(
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
    principal: Principal = Depends(get_current_active_principal),
    role: str = Query("all", description="buyer, seller or all"),
    status: Optional[str] = Query(None),
    per_page: int = Query(100, ge=1, le=200),
    page: int = Query(1, ge=1),
):
    """
    Orders visible to the current user.
    role=buyer lists the user's purchases, role=seller the orders containing a line they sell.
    With role=all administrators see every order; everyone else sees the union of both.
    """
    skip = (page - 1) * per_page
    if role == "all" and principal.is_admin:
        orders = context.orders.list_visible(db, principal, status=status, limit=per_page, skip=skip)
    else:
        orders = context.orders.list_for_user(db, principal.user_id, role=role, status=status, limit=per_page, skip=skip)
    return success(orders)

@router.get("/{order_id}", response_model=SuccessResponse[Order])
async def read_order_details(
    order_id: int,
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
    principal: Principal = Depends(get_current_active_principal),
):
    """
    Retrieve details for a specific order.
    Buyers, sellers of at least one line, and administrators may view it.
    """
    return success(context.orders.get_for_principal(db, principal, order_id))

@router.patch("/{order_id}/status", response_model=SuccessResponse[Order], tags=["Admin Orders"])
async def update_order_status(
    order_id: int,
    status_in: OrderStatusUpdate,
    db: Session = Depends(get_db),
    context: AppContext = Depends(get_context),
    principal: Principal = Depends(get_current_admin), # Only administrators drive the lifecycle
):
    """
    Move an order through its lifecycle. Completing an order records the commissions;
    refunding or cancelling it reconciles them.
    """
    return success(context.orders.change_status(db, order_id, status_in.status))
