"""Tests for cargotrack.notifications"""

import logging

from cargotrack.models import Order, OrderStatus
from cargotrack.notifications import LoggingNotifier, StatusChangeNotifier, format_status_change


class TestNotifications:

    def test_format(self):
        order = Order(title="Fone", status=OrderStatus.DELIVERED)
        title, body = format_status_change(order, OrderStatus.OUT_FOR_DELIVERY)
        assert title == "Fone"
        assert body == "Status mudou de Saiu para Entrega para Entregue"

    async def test_logging_notifier(self, caplog):
        notifier = LoggingNotifier()
        order = Order(title="Fone", status=OrderStatus.IN_TRANSIT)

        with caplog.at_level(logging.INFO, logger="cargotrack.notifications"):
            assert await notifier.notify(order, OrderStatus.CREATED)

        assert "Status mudou de Criado para Em Trânsito" in caplog.text

    async def test_disabled_notifier(self):
        notifier = LoggingNotifier(enabled=False)
        assert not await notifier.notify(Order(title="x"), OrderStatus.CREATED)

    def test_protocol(self):
        assert isinstance(LoggingNotifier(), StatusChangeNotifier)
