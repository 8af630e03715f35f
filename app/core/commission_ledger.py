import logging
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Optional, List

from app.core.config import COMMISSION_RATE
from app.core.errors import ValidationError, PersistenceError
from app.core.events import OrderStatusChanged
from app.core.periods import period_cutoff
from app.crud import crud_commission, crud_order, crud_product
from app.models.commission import Commission, COMMISSION_STATUSES
from app.schemas.commission import CommissionCreate

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

# Statuses an entry may move to from each status. Re-applying the current status is always allowed.
ALLOWED_TRANSITIONS = {
    "pending": {"completed", "cancelled", "refunded"},
    "completed": {"refunded", "cancelled"},
    "refunded": set(),
    "cancelled": set(),
}

# Order statuses that reconcile existing entries
TERMINAL_ORDER_STATUSES = ("refunded", "cancelled")


def compute_commission(line_total, rate: Decimal) -> Decimal:
    """line_total x rate, rounded half-up to whole cents."""
    return (Decimal(str(line_total)) * rate).quantize(CENT, rounding=ROUND_HALF_UP)


class CommissionLedger:
    """
    Append-only record of the platform's commission on each seller-attributed order line.
    Entries are created when an order completes and only ever change status afterwards.
    """

    def __init__(self, rate: Decimal = COMMISSION_RATE):
        self.rate = Decimal(str(rate))

    def record(
        self,
        db: Session,
        *,
        order_id: Optional[int],
        product_id: Optional[int],
        seller_id: Optional[int],
        buyer_id: Optional[int],
        amount,
        status: str = "pending",
        commit: bool = True,
    ) -> int:
        if not order_id:
            raise ValidationError("Order ID is required.")
        if not product_id:
            raise ValidationError("Product ID is required.")
        if not seller_id:
            raise ValidationError("Seller ID is required.")
        if not buyer_id:
            raise ValidationError("Buyer ID is required.")
        if amount is None or amount == "":
            raise ValidationError("Amount is required.")
        try:
            amount = Decimal(str(amount))
        except InvalidOperation:
            raise ValidationError("Amount must be a decimal value.")
        if not amount.is_finite():
            raise ValidationError("Amount must be a decimal value.")
        if amount < 0:
            raise ValidationError("Amount cannot be negative.")
        if status not in COMMISSION_STATUSES:
            raise ValidationError(f"Invalid commission status '{status}'.")

        commission = crud_commission.create_commission(
            db,
            obj_in=CommissionCreate(
                order_id=order_id,
                product_id=product_id,
                seller_id=seller_id,
                buyer_id=buyer_id,
                amount=amount,
                status=status,
            ),
            commit=commit,
        )
        logger.info(
            f"Recorded commission {commission.id} for order {order_id}, product {product_id}, "
            f"seller {seller_id}: {amount} ({status})"
        )
        return commission.id

    def set_status(self, db: Session, order_id: int, status: str, commit: bool = True) -> int:
        """
        Move every entry of the order to status where the transition is allowed.
        Returns the number of entries touched; an order without entries is a no-op.
        """
        if status not in COMMISSION_STATUSES:
            raise ValidationError(f"Invalid commission status '{status}'.")

        touched = 0
        try:
            for entry in crud_commission.get_commissions_by_order_id(db, order_id=order_id):
                if entry.status != status and status not in ALLOWED_TRANSITIONS.get(entry.status, set()):
                    logger.warning(
                        f"Commission {entry.id} of order {order_id} cannot move from '{entry.status}' to '{status}', skipped"
                    )
                    continue
                crud_commission.update_commission_status(db, db_obj=entry, status=status)
                touched += 1
            if commit:
                db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError("Failed to update commission status.") from exc

        if touched:
            logger.info(f"Set {touched} commission(s) of order {order_id} to '{status}'")
        return touched

    def total(
        self, db: Session, *, seller_id: Optional[int] = None, status: Optional[str] = "completed", period: str = "all"
    ) -> Decimal:
        cutoff = period_cutoff(period)
        value = crud_commission.sum_amount(db, seller_id=seller_id, status=status, created_after=cutoff)
        return Decimal(value) if value is not None else Decimal("0")

    def list(
        self,
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
        return crud_commission.get_commissions(
            db,
            order_id=order_id,
            seller_id=seller_id,
            buyer_id=buyer_id,
            status=status,
            limit=limit,
            offset=offset,
            orderby=orderby,
            order=order,
        )

    def get(self, db: Session, commission_id: int) -> Optional[Commission]:
        return crud_commission.get_commission(db, commission_id)

    def handle_order_status_changed(self, db: Session, event: OrderStatusChanged) -> None:
        """
        Lifecycle subscriber. Runs inside the order's transaction and never commits;
        the order adapter commits the status change and the ledger writes together.
        """
        if event.to_status == "completed":
            self._record_completed_order(db, event.order_id)
        elif event.to_status in TERMINAL_ORDER_STATUSES:
            self.set_status(db, event.order_id, event.to_status, commit=False)

    def _record_completed_order(self, db: Session, order_id: int) -> int:
        order = crud_order.get_order(db, order_id)
        if order is None:
            logger.warning(f"Order {order_id} completed but could not be loaded, no commissions recorded")
            return 0

        logger.info(f"Starting commission calculation for order ID: {order.id}")
        created = 0
        for item in order.items:
            seller_id = self._resolve_seller(db, item)
            if not seller_id:
                logger.info(f"Order {order.id} line {item.id} (product {item.product_id}) has no seller, skipped")
                continue
            if crud_commission.get_commission_by_order_and_product(db, order_id=order.id, product_id=item.product_id):
                logger.info(f"Order {order.id} product {item.product_id} already has a commission, skipped")
                continue
            self.record(
                db,
                order_id=order.id,
                product_id=item.product_id,
                seller_id=seller_id,
                buyer_id=order.customer_id,
                amount=compute_commission(item.total, self.rate),
                status="completed",
                commit=False,
            )
            created += 1

        logger.info(f"Commission calculation finished for order ID: {order.id}, {created} entr(ies) recorded")
        return created

    @staticmethod
    def _resolve_seller(db: Session, item) -> Optional[int]:
        """Line-level seller attribution first, then the product's current seller."""
        if item.seller_id:
            return item.seller_id
        if item.product_id is None:
            return None
        product = crud_product.get_product(db, item.product_id)
        return product.seller_id if product is not None else None
