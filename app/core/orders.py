import logging
from decimal import Decimal
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Optional, List, Dict, Any, Union

from app.core.errors import AuthenticationError, NotFoundError, ValidationError, SelfPurchaseError, PersistenceError
from app.core.events import EventDispatcher, OrderStatusChanged
from app.core.ownership import ensure_can_view_order, filter_orders, visible_order_ids
from app.core.principal import Principal
from app.crud import crud_order, crud_product
from app.models.order import Order
from app.schemas.order import ORDER_STATUSES

logger = logging.getLogger(__name__)

ORDER_ROLES = ("buyer", "seller", "all")
ORDER_DETAIL_FIELDS = ("billing", "shipping", "payment_method")
INVALID_QUANTITY = "Quantity must be a whole number of at least 1."


def _line_quantity(value) -> int:
    """A missing quantity means one item; anything else must be a whole number of at least 1."""
    if value is None or value == "":
        return 1
    if isinstance(value, bool):
        raise ValidationError(INVALID_QUANTITY)
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        raise ValidationError(INVALID_QUANTITY)
    if quantity != value and str(quantity) != str(value).strip():
        raise ValidationError(INVALID_QUANTITY)
    if quantity < 1:
        raise ValidationError(INVALID_QUANTITY)
    return quantity


class OrderService:
    """
    Builds orders from cart-like requests and drives their lifecycle.
    Status changes are announced through the dispatcher before the single commit.
    """

    def __init__(self, events: EventDispatcher):
        self.events = events

    def create(self, db: Session, principal: Optional[Principal], payload: Union[BaseModel, Dict[str, Any]]) -> Order:
        if principal is None:
            raise AuthenticationError("You must be logged in to create orders.")
        data = payload.model_dump() if isinstance(payload, BaseModel) else dict(payload or {})

        lines = data.get("line_items") or data.get("products") or []
        if not lines:
            raise ValidationError("Products are required.", code="poleplace_missing_products")

        # product_id -> line values; repeated products are merged into one line
        merged: Dict[int, Dict[str, Any]] = {}
        for line in lines:
            product_id = line.get("product_id") or line.get("id")
            quantity = _line_quantity(line.get("quantity"))
            product = crud_product.get_product(db, product_id) if product_id else None
            if product is None:
                logger.info(f"Order request by user {principal.user_id}: unknown product {product_id} skipped")
                continue
            if product.seller_id is not None and product.seller_id == principal.user_id:
                raise SelfPurchaseError()

            if product.id in merged:
                merged[product.id]["quantity"] += quantity
                continue
            merged[product.id] = {
                "product_id": product.id,
                "name": product.name,
                "quantity": quantity,
                "unit_price": Decimal(product.price),
                "seller_id": product.seller_id,
            }

        items = []
        for line in merged.values():
            line_total = line["unit_price"] * line["quantity"]
            items.append(dict(line, subtotal=line_total, total=line_total))
        if not items:
            logger.warning(f"Order request by user {principal.user_id} has no purchasable lines, creating an empty order")

        order_data = {field: data[field] for field in ORDER_DETAIL_FIELDS if data.get(field) is not None}
        try:
            order = crud_order.create_order(db, customer_id=principal.user_id, items=items, order_data=order_data)
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError("Failed to create order.") from exc

        logger.info(f"Order {order.id} created for user {principal.user_id} with {len(items)} line(s), total {order.total}")
        return order

    def list_for_user(
        self, db: Session, user_id: int, role: str = "all", status: Optional[str] = None, limit: Optional[int] = None, skip: int = 0
    ) -> List[Order]:
        """Orders the user bought (buyer), sold a line of (seller), or both (all), newest first."""
        if role not in ORDER_ROLES:
            raise ValidationError(f"Invalid role '{role}'. Expected one of {', '.join(ORDER_ROLES)}.")
        if role == "buyer":
            order_ids = crud_order.get_buyer_order_ids(db, customer_id=user_id)
        elif role == "seller":
            order_ids = crud_order.get_seller_order_ids(db, seller_id=user_id)
        else:
            order_ids = visible_order_ids(db, Principal(user_id=user_id))
        return crud_order.get_orders_by_ids(db, order_ids=order_ids, status=status, skip=skip, limit=limit)

    def list_visible(
        self, db: Session, principal: Principal, status: Optional[str] = None, limit: Optional[int] = None, skip: int = 0
    ) -> List[Order]:
        """Every order the principal may see: all of them for administrators."""
        query = filter_orders(crud_order.query_orders(db), principal)
        if status is not None:
            query = query.filter(Order.status == status)
        query = query.order_by(Order.created_at.desc(), Order.id.desc()).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def get_for_principal(self, db: Session, principal: Optional[Principal], order_id: int) -> Order:
        if principal is None:
            raise AuthenticationError()
        order = crud_order.get_order(db, order_id)
        if order is None:
            raise NotFoundError("Invalid order.", code="poleplace_invalid_order")
        ensure_can_view_order(principal, order)
        return order

    def change_status(self, db: Session, order_id: int, new_status: str) -> Order:
        if new_status not in ORDER_STATUSES:
            raise ValidationError(f"Invalid order status '{new_status}'.")
        order = crud_order.get_order(db, order_id)
        if order is None:
            raise NotFoundError("Invalid order.", code="poleplace_invalid_order")

        from_status = order.status
        if from_status == new_status:
            return order

        try:
            crud_order.set_order_status(db, db_obj=order, status=new_status)
            self.events.dispatch(db, OrderStatusChanged(order_id=order.id, from_status=from_status, to_status=new_status))
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError("Failed to update order status.") from exc
        except Exception:
            db.rollback()
            raise

        logger.info(f"Order {order_id} status changed from '{from_status}' to '{new_status}'")
        db.refresh(order)
        return order
