from datetime import datetime
from decimal import Decimal
from sqlalchemy import or_
from sqlalchemy.orm import Session, Query, selectinload
from typing import Optional, List, Tuple, Dict, Any

from app.models.product import Product, ProductAttribute, ProductCategory

SORTABLE_COLUMNS = {
    "date": Product.created_at,
    "price": Product.price,
    "name": Product.name,
    "title": Product.name,
    "id": Product.id,
}

def query_products(db: Session) -> Query:
    """Base product query with the relations every response needs eagerly loaded."""
    return db.query(Product).options(
        selectinload(Product.seller),
        selectinload(Product.categories),
        selectinload(Product.attributes).selectinload(ProductAttribute.terms),
        selectinload(Product.attributes).selectinload(ProductAttribute.taxonomy),
    )

def get_product(db: Session, product_id: int, *, status: Optional[str] = None) -> Optional[Product]:
    """
    Get a single product by ID.
    When status is given, products in any other status are treated as missing.
    """
    query = query_products(db).filter(Product.id == product_id)
    if status is not None:
        query = query.filter(Product.status == status)
    return query.first()

def get_products_by_seller(
    db: Session, *, seller_id: int, status: Optional[str] = None, skip: int = 0, limit: Optional[int] = None
) -> List[Product]:
    """Products listed by a seller, newest first. Unfiltered by status unless one is given."""
    query = query_products(db).filter(Product.seller_id == seller_id)
    if status is not None:
        query = query.filter(Product.status == status)
    query = query.order_by(Product.created_at.desc(), Product.id.desc()).offset(skip)
    if limit is not None:
        query = query.limit(limit)
    return query.all()

def count_products(
    db: Session, *, seller_id: Optional[int] = None, status: Optional[str] = None, created_after: Optional[datetime] = None
) -> int:
    query = db.query(Product)
    if seller_id is not None:
        query = query.filter(Product.seller_id == seller_id)
    if status is not None:
        query = query.filter(Product.status == status)
    if created_after is not None:
        query = query.filter(Product.created_at >= created_after)
    return query.count()

def search_products(
    db: Session,
    *,
    status: str = "published",
    category: Optional[str] = None,
    search: Optional[str] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    orderby: str = "date",
    order: str = "desc",
    skip: int = 0,
    limit: int = 10,
) -> Tuple[List[Product], int]:
    """
    Public catalog query. Returns the requested page and the total number of matches.
    category is a category slug; search matches name and description.
    """
    query = db.query(Product).filter(Product.status == status)
    if category:
        query = query.filter(Product.categories.any(ProductCategory.slug == category))
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
    if min_price is not None:
        query = query.filter(Product.price >= min_price)
    if max_price is not None:
        query = query.filter(Product.price <= max_price)

    total = query.count()

    column = SORTABLE_COLUMNS.get(orderby, Product.created_at)
    ordering = column.asc() if order == "asc" else column.desc()
    ids = [row[0] for row in query.with_entities(Product.id).order_by(ordering, Product.id.desc()).offset(skip).limit(limit).all()]
    if not ids:
        return [], total

    products = {p.id: p for p in query_products(db).filter(Product.id.in_(ids)).all()}
    return [products[i] for i in ids if i in products], total

def create_product(db: Session, *, obj_in: Dict[str, Any], commit: bool = True) -> Product:
    """
    Create a new product from plain column values.
    The catalog adapter validates input and resolves categories/attributes beforehand.
    """
    db_obj = Product(**obj_in)
    db.add(db_obj)
    if commit:
        db.commit()
        db.refresh(db_obj)
    else:
        db.flush()
    return db_obj

def update_product(db: Session, *, db_obj: Product, update_data: Dict[str, Any], commit: bool = True) -> Product:
    """
    Update an existing product with only the supplied fields (partial update).
    """
    for field, value in update_data.items():
        setattr(db_obj, field, value)

    db.add(db_obj)
    if commit:
        db.commit()
        db.refresh(db_obj)
    else:
        db.flush()
    return db_obj

def hard_delete_product(db: Session, *, product_id: int) -> Optional[Product]:
    """
    Permanently delete a product from the database.
    Returns the deleted product object if found and deleted, otherwise None.
    Order lines keep their product_id; commission rows are never touched.
    """
    db_obj = db.query(Product).filter(Product.id == product_id).first()
    if db_obj:
        db.delete(db_obj)
        db.commit()
        return db_obj
    return None
