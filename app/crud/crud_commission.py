from datetime import datetime
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Optional, List

from app.core.errors import PersistenceError
from app.models.commission import Commission
from app.schemas.commission import CommissionCreate

ORDERABLE_COLUMNS = {
    "id": Commission.id,
    "order_id": Commission.order_id,
    "product_id": Commission.product_id,
    "seller_id": Commission.seller_id,
    "buyer_id": Commission.buyer_id,
    "amount": Commission.amount,
    "status": Commission.status,
    "created_at": Commission.created_at,
    "updated_at": Commission.updated_at,
}

def create_commission(db: Session, *, obj_in: CommissionCreate, commit: bool = True) -> Commission:
    """
    Create a new commission record.
    With commit=False the row is only flushed so it joins the caller's transaction.
    """
    db_obj = Commission(**obj_in.model_dump())
    db.add(db_obj)
    try:
        if commit:
            db.commit()
            db.refresh(db_obj)
        else:
            db.flush()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError("Failed to create commission record.") from exc
    return db_obj

def get_commission(db: Session, commission_id: int) -> Optional[Commission]:
    return db.query(Commission).filter(Commission.id == commission_id).first()

def get_commissions(
    db: Session,
    *,
    order_id: Optional[int] = None,
    seller_id: Optional[int] = None,
    buyer_id: Optional[int] = None,
    status: Optional[str] = None,
    limit: Optional[int] = None,
    offset: int = 0,
    orderby: str = "created_at",
    order: str = "desc",
) -> List[Commission]:
    """
    Commissions matching every supplied filter.
    Unknown orderby columns fall back to created_at; ties are broken by id.
    """
    query = db.query(Commission)
    if order_id is not None:
        query = query.filter(Commission.order_id == order_id)
    if seller_id is not None:
        query = query.filter(Commission.seller_id == seller_id)
    if buyer_id is not None:
        query = query.filter(Commission.buyer_id == buyer_id)
    if status:
        query = query.filter(Commission.status == status)

    column = ORDERABLE_COLUMNS.get(orderby, Commission.created_at)
    if order.lower() == "asc":
        query = query.order_by(column.asc(), Commission.id.asc())
    else:
        query = query.order_by(column.desc(), Commission.id.desc())

    query = query.offset(offset)
    if limit is not None:
        query = query.limit(limit)
    return query.all()

def get_commissions_by_order_id(db: Session, *, order_id: int) -> List[Commission]:
    """
    Get all commissions associated with a specific order ID.
    """
    return db.query(Commission).filter(Commission.order_id == order_id).order_by(Commission.id).all()

def get_commission_by_order_and_product(db: Session, *, order_id: int, product_id: int) -> Optional[Commission]:
    return (
        db.query(Commission)
        .filter(Commission.order_id == order_id, Commission.product_id == product_id)
        .first()
    )

def update_commission_status(db: Session, *, db_obj: Commission, status: str) -> Commission:
    """
    Set the status of a commission. updated_at is stamped explicitly so that
    re-applying the current status still records the touch.
    Flushes only; the ledger decides when to commit.
    """
    db_obj.status = status
    db_obj.updated_at = func.now()
    db.add(db_obj)
    db.flush()
    return db_obj

def sum_amount(
    db: Session, *, seller_id: Optional[int] = None, status: Optional[str] = "completed", created_after: Optional[datetime] = None
):
    query = db.query(func.sum(Commission.amount))
    if seller_id is not None:
        query = query.filter(Commission.seller_id == seller_id)
    if status:
        query = query.filter(Commission.status == status)
    if created_after is not None:
        query = query.filter(Commission.created_at >= created_after)
    return query.scalar()
