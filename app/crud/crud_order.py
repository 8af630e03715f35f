from datetime import datetime
from sqlalchemy import func, select
from sqlalchemy.orm import Session, Query, selectinload
from typing import Optional, List, Dict, Any, Iterable, Set

from app.models.order import Order, OrderItem

def query_orders(db: Session) -> Query:
    return db.query(Order).options(selectinload(Order.items))

def create_order(
    db: Session, *, customer_id: int, items: List[Dict[str, Any]], order_data: Optional[Dict[str, Any]] = None
) -> Order:
    """
    Create a new order with its line items.
    Each item dict holds the OrderItem columns; order totals are computed here
    from the line totals, the way the host checkout calculates them.
    """
    db_obj = Order(customer_id=customer_id, status="pending", **(order_data or {}))
    for item in items:
        db_obj.items.append(OrderItem(**item))
    calculate_totals(db_obj)
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj

def calculate_totals(order: Order) -> Order:
    order.subtotal = sum((item.subtotal for item in order.items), 0)
    order.total = sum((item.total for item in order.items), 0)
    return order

def get_order(db: Session, order_id: int) -> Optional[Order]:
    """
    Get a single order by ID, with its line items eagerly loaded.
    """
    return query_orders(db).filter(Order.id == order_id).first()

def get_orders_by_ids(
    db: Session, *, order_ids: Iterable[int], status: Optional[str] = None, skip: int = 0, limit: Optional[int] = None
) -> List[Order]:
    """
    Orders whose id is in order_ids, newest first. An empty id set returns no rows.
    """
    ids = list(order_ids)
    if not ids:
        return []
    query = query_orders(db).filter(Order.id.in_(ids))
    if status is not None:
        query = query.filter(Order.status == status)
    query = query.order_by(Order.created_at.desc(), Order.id.desc()).offset(skip)
    if limit is not None:
        query = query.limit(limit)
    return query.all()

def get_seller_order_ids(db: Session, *, seller_id: int) -> Set[int]:
    """Ids of orders containing at least one line attributed to the seller."""
    rows = db.query(OrderItem.order_id).filter(OrderItem.seller_id == seller_id).distinct().all()
    return {row[0] for row in rows}

def get_buyer_order_ids(db: Session, *, customer_id: int) -> Set[int]:
    rows = db.query(Order.id).filter(Order.customer_id == customer_id).all()
    return {row[0] for row in rows}

def set_order_status(db: Session, *, db_obj: Order, status: str) -> Order:
    """
    Change the order status without committing; the caller commits once the
    lifecycle handlers have run so both land in the same transaction.
    """
    db_obj.status = status
    db.add(db_obj)
    db.flush()
    return db_obj

def get_seller_sales(
    db: Session, *, seller_id: int, status: str = "completed", created_after: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    Aggregate a seller's lines on orders in the given status:
    distinct order count and the sum of their line totals.
    """
    query = (
        db.query(
            func.count(func.distinct(Order.id)),
            func.sum(OrderItem.total),
        )
        .select_from(Order)
        .join(OrderItem, OrderItem.order_id == Order.id)
        .filter(OrderItem.seller_id == seller_id, Order.status == status)
    )
    if created_after is not None:
        query = query.filter(Order.created_at >= created_after)
    order_count, total_sales = query.one()
    return {"order_count": order_count or 0, "total_sales": total_sales or 0}

def get_seller_order_dates(db: Session, *, seller_id: int, status: str = "completed") -> List[datetime]:
    """Creation dates of the seller's orders in the given status, oldest first."""
    rows = (
        db.query(Order.created_at)
        .filter(Order.status == status, Order.id.in_(
            select(OrderItem.order_id).where(OrderItem.seller_id == seller_id)
        ))
        .order_by(Order.created_at.asc())
        .all()
    )
    return [row[0] for row in rows]

def get_platform_sales(db: Session, *, status: str = "completed", created_after: Optional[datetime] = None) -> Dict[str, Any]:
    query = db.query(func.count(Order.id), func.sum(Order.total)).filter(Order.status == status)
    if created_after is not None:
        query = query.filter(Order.created_at >= created_after)
    order_count, total_sales = query.one()
    return {"order_count": order_count or 0, "total_sales": total_sales or 0}

def count_active_sellers(db: Session, *, status: str = "completed", created_after: Optional[datetime] = None) -> int:
    """Distinct sellers with at least one line on an order in the given status."""
    query = (
        db.query(func.count(func.distinct(OrderItem.seller_id)))
        .select_from(OrderItem)
        .join(Order, Order.id == OrderItem.order_id)
        .filter(Order.status == status, OrderItem.seller_id.isnot(None))
    )
    if created_after is not None:
        query = query.filter(Order.created_at >= created_after)
    return query.scalar() or 0
