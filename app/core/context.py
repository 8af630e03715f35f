from decimal import Decimal

from app.core.catalog import ProductCatalog
from app.core.commission_ledger import CommissionLedger
from app.core.config import COMMISSION_RATE
from app.core.events import EventDispatcher, OrderStatusChanged
from app.core.orders import OrderService
from app.core.stats import StatsAggregator


class AppContext:
    """
    The marketplace services of one application instance.
    Built once by create_app() and handed to endpoints through a dependency.
    """

    def __init__(self, commission_rate: Decimal = COMMISSION_RATE):
        self.events = EventDispatcher()
        self.ledger = CommissionLedger(rate=commission_rate)
        self.catalog = ProductCatalog()
        self.orders = OrderService(self.events)
        self.stats = StatsAggregator(self.ledger)

        self.events.subscribe(OrderStatusChanged, self.ledger.handle_order_status_changed)
