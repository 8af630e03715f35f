import logging
from decimal import Decimal, ROUND_HALF_UP
from sqlalchemy.orm import Session
from typing import Dict, Any, List

from app.core.commission_ledger import CommissionLedger
from app.core.errors import NotFoundError
from app.core.periods import period_cutoff, months_between, utcnow
from app.crud import crud_order, crud_product, crud_user

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
RECENT_ORDERS_LIMIT = 10


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENT, rounding=ROUND_HALF_UP)


class StatsAggregator:
    """
    Seller and platform figures, always recomputed from orders, products and the ledger.
    Callers pass a canonical period token; the REST layer normalizes user input first.
    """

    def __init__(self, ledger: CommissionLedger):
        self.ledger = ledger

    def seller_stats(self, db: Session, seller_id: int, period: str = "month") -> Dict[str, Any]:
        cutoff = period_cutoff(period)
        sales = crud_order.get_seller_sales(db, seller_id=seller_id, created_after=cutoff)
        order_count = sales["order_count"]
        total_sales = _money(sales["total_sales"])
        commission = _money(total_sales * self.ledger.rate)

        return {
            "total_sales": total_sales,
            "order_count": order_count,
            "commission": commission,
            "net_earnings": total_sales - commission,
            "product_count": crud_product.count_products(db, seller_id=seller_id, status="published"),
            "average_order_value": _money(total_sales / order_count) if order_count else Decimal("0.00"),
            "order_frequency": self.order_frequency(db, seller_id),
        }

    def order_frequency(self, db: Session, seller_id: int) -> float:
        """
        Completed orders per elapsed month since the seller's first completed order.
        Within the first month the count is returned undivided.
        """
        dates = crud_order.get_seller_order_dates(db, seller_id=seller_id)
        if not dates:
            return 0.0
        months = months_between(dates[0], utcnow())
        if months == 0:
            return float(len(dates))
        return round(len(dates) / months, 2)

    def platform_stats(self, db: Session, period: str = "month") -> Dict[str, Any]:
        cutoff = period_cutoff(period)
        sales = crud_order.get_platform_sales(db, created_after=cutoff)
        return {
            "total_sales": _money(sales["total_sales"]),
            "total_orders": sales["order_count"],
            "total_commission": _money(self.ledger.total(db, status="completed", period=period)),
            "active_sellers": crud_order.count_active_sellers(db, created_after=cutoff),
            "total_products": crud_product.count_products(db, status="published", created_after=cutoff),
        }

    def all_sellers_with_stats(self, db: Session, period: str = "month") -> List[Dict[str, Any]]:
        """Non-admin users with sales in the window, each with their stats."""
        sellers = []
        for user in crud_user.get_users(db, include_admins=False):
            stats = self.seller_stats(db, user.id, period)
            if stats["total_sales"] <= 0:
                continue
            sellers.append({"id": user.id, "name": user.display_name, "email": user.email, **stats})
        logger.debug(f"{len(sellers)} seller(s) with sales for period '{period}'")
        return sellers

    def seller_detail(self, db: Session, user_id: int, period: str = "month") -> Dict[str, Any]:
        user = crud_user.get_user(db, user_id)
        if user is None:
            raise NotFoundError("Invalid user.", code="poleplace_invalid_user")

        order_ids = crud_order.get_seller_order_ids(db, seller_id=user_id)
        return {
            "id": user.id,
            "name": user.display_name,
            "email": user.email,
            "registered": user.created_at,
            "stats": self.seller_stats(db, user_id, period),
            "products": crud_product.get_products_by_seller(db, seller_id=user_id),
            "orders": crud_order.get_orders_by_ids(db, order_ids=order_ids, limit=RECENT_ORDERS_LIMIT),
        }
