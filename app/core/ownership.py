"""
Visibility and mutation rules for seller-attributed records.

Administrators see and may change everything. Everyone else sees the products
they sell, and the orders they bought or that contain a line they sell.
"""
from sqlalchemy import or_, select
from sqlalchemy.orm import Session, Query
from typing import Set

from app.core.errors import AuthorizationError
from app.core.principal import Principal
from app.crud import crud_order
from app.models.order import Order, OrderItem
from app.models.product import Product


def filter_products(query: Query, principal: Principal) -> Query:
    if principal.is_admin:
        return query
    return query.filter(Product.seller_id == principal.user_id)


def filter_orders(query: Query, principal: Principal) -> Query:
    if principal.is_admin:
        return query
    sold = select(OrderItem.order_id).where(OrderItem.seller_id == principal.user_id)
    return query.filter(or_(Order.customer_id == principal.user_id, Order.id.in_(sold)))


def visible_order_ids(db: Session, principal: Principal) -> Set[int]:
    """
    Explicit id set of the orders a non-admin principal may see.
    Callers pass it to an IN clause, so an empty set matches nothing.
    """
    return crud_order.get_buyer_order_ids(db, customer_id=principal.user_id) | crud_order.get_seller_order_ids(
        db, seller_id=principal.user_id
    )


def ensure_can_modify_product(principal: Principal, product: Product) -> None:
    if principal.is_admin:
        return
    if product.seller_id is None or product.seller_id != principal.user_id:
        raise AuthorizationError("You can only modify your own products.")


def ensure_can_view_order(principal: Principal, order: Order) -> None:
    if principal.is_admin or order.customer_id == principal.user_id:
        return
    if any(item.seller_id == principal.user_id for item in order.items):
        return
    raise AuthorizationError("You are not allowed to view this order.")


def ensure_can_modify_order_line(principal: Principal, item: OrderItem) -> None:
    """
    Guard for callers that edit or remove a single order line. No route mutates
    lines yet: order lines are written once at checkout and changed only through
    the order status.
    """
    if principal.is_admin:
        return
    seller_id = item.seller_id
    if seller_id is None and item.product is not None:
        seller_id = item.product.seller_id
    if seller_id is None or seller_id != principal.user_id:
        raise AuthorizationError("You can only modify order lines you sell.")
