import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, List, Type

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderStatusChanged:
    """Emitted by the order adapter after an order's status was changed (not yet committed)."""
    order_id: int
    from_status: str
    to_status: str


Handler = Callable[[Session, object], None]


class EventDispatcher:
    """
    Synchronous in-process event dispatch.
    Handlers run inside the caller's session/transaction; an exception from a
    handler propagates to the code that dispatched the event.
    """

    def __init__(self):
        self._handlers: Dict[Type, List[Handler]] = defaultdict(list)

    def subscribe(self, event_type: Type, handler: Handler) -> None:
        self._handlers[event_type].append(handler)

    def dispatch(self, db: Session, event) -> None:
        handlers = self._handlers.get(type(event), [])
        logger.debug(f"Dispatching {event} to {len(handlers)} handler(s)")
        for handler in handlers:
            handler(db, event)
