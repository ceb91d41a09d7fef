"""Cargotrack Notifications - tell the user when an order changes status."""

import logging
from typing import Protocol, Tuple, runtime_checkable

from .models import Order, OrderStatus

logger = logging.getLogger(__name__)


@runtime_checkable
class StatusChangeNotifier(Protocol):
    """Port called by the orchestrator after a refresh changed an order's status."""

    async def notify(self, order: Order, old_status: OrderStatus) -> bool:
        ...


def format_status_change(order: Order, old_status: OrderStatus) -> Tuple[str, str]:
    """Return (title, body) for a status change notification."""
    body = f"Status mudou de {old_status.display_name} para {order.status.display_name}"
    return order.title, body


class LoggingNotifier:
    """Notifier that writes status changes to the log.

    Args:
        enabled: When False, notify() is a no-op returning False
    """

    def __init__(self, enabled: bool = True):
        self._enabled = enabled

    async def notify(self, order: Order, old_status: OrderStatus) -> bool:
        if not self._enabled:
            return False
        title, body = format_status_change(order, old_status)
        logger.info(f"[order {order.id}] {title}: {body}")
        return True
