"""Tests for cargotrack.providers.status_map"""

import pytest

from cargotrack.models import OrderStatus
from cargotrack.providers.status_map import (
    AFTERSHIP_STATUS_MAP,
    CORREIOS_STATUS_MAP,
    TRACK17_STATUS_MAP,
    map_status,
    parse_unified_status,
)


class TestMapStatus:

    @pytest.mark.parametrize("tag,expected", [
        ("Delivered", OrderStatus.DELIVERED),
        ("OutForDelivery", OrderStatus.OUT_FOR_DELIVERY),
        ("Exception", OrderStatus.EXCEPTION),
        ("AttemptFail", OrderStatus.EXCEPTION),
        ("InTransit", OrderStatus.IN_TRANSIT),
        ("InfoReceived", OrderStatus.IN_TRANSIT),
        ("Pending", OrderStatus.CREATED),
    ])
    def test_aftership_tags(self, tag, expected):
        assert map_status(AFTERSHIP_STATUS_MAP, tag) == expected

    @pytest.mark.parametrize("status,expected", [
        ("Delivered", OrderStatus.DELIVERED),
        ("OutForDelivery", OrderStatus.OUT_FOR_DELIVERY),
        ("DeliveryFailure", OrderStatus.EXCEPTION),
        ("InTransit", OrderStatus.IN_TRANSIT),
        ("NotFound", OrderStatus.CREATED),
    ])
    def test_track17_statuses(self, status, expected):
        assert map_status(TRACK17_STATUS_MAP, status) == expected

    @pytest.mark.parametrize("status,expected", [
        ("objeto_entregue", OrderStatus.DELIVERED),
        ("OBJETO_SAIU_PARA_ENTREGA", OrderStatus.OUT_FOR_DELIVERY),
        ("objeto_em_transito", OrderStatus.IN_TRANSIT),
        ("objeto_postado", OrderStatus.CREATED),
    ])
    def test_correios_vocabulary(self, status, expected):
        assert map_status(CORREIOS_STATUS_MAP, status) == expected

    @pytest.mark.parametrize("value", ["Teleported", "", "   ", None, 42, {"a": 1}])
    def test_unrecognized_falls_back_to_in_transit(self, value):
        for table in (AFTERSHIP_STATUS_MAP, TRACK17_STATUS_MAP, CORREIOS_STATUS_MAP):
            assert map_status(table, value) == OrderStatus.IN_TRANSIT

    def test_tables_cover_every_bucket(self):
        for table in (AFTERSHIP_STATUS_MAP, TRACK17_STATUS_MAP, CORREIOS_STATUS_MAP):
            assert set(table.values()) == set(OrderStatus)


class TestParseUnifiedStatus:

    def test_unified_values(self):
        for status in OrderStatus:
            assert parse_unified_status(status.value) == status

    def test_unknown_defaults_to_in_transit(self):
        assert parse_unified_status("whatever") == OrderStatus.IN_TRANSIT
        assert parse_unified_status(None) == OrderStatus.IN_TRANSIT

    def test_fallback_table(self):
        assert parse_unified_status("objeto_entregue", fallback=CORREIOS_STATUS_MAP) == OrderStatus.DELIVERED
