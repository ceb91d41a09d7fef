"""Tests for cargotrack.snapshots"""

import json
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from cargotrack.models import Order, OrderStatus, TrackingEvent
from cargotrack.snapshots import (
    CatalogEntry,
    JsonFileSnapshotStore,
    MemorySnapshotStore,
    Snapshot,
    SnapshotSink,
    catalog_for_orders,
    snapshot_for_order,
    snapshot_subtitle,
)

NOW = datetime(2024, 5, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store(tmp_path):
    return JsonFileSnapshotStore(str(tmp_path / "widget"))


def _make_order(title="Fone", events=None, updated=NOW) -> Order:
    return Order(title=title, tracking_code="LB123456789BR", events=events or [], last_updated=updated)


class TestSubtitle:

    def test_latest_event_with_location(self):
        order = _make_order(events=[
            TrackingEvent(NOW - timedelta(days=2), OrderStatus.IN_TRANSIT, "Em trânsito", "São Paulo, SP"),
            TrackingEvent(datetime(2024, 5, 10, 9, 5, tzinfo=timezone.utc), OrderStatus.OUT_FOR_DELIVERY,
                          "Saiu para entrega", "Curitiba, PR"),
        ])
        assert snapshot_subtitle(order) == "Saiu para entrega · Curitiba, PR · 10/05/2024 09:05"

    def test_without_location(self):
        order = _make_order(events=[
            TrackingEvent(datetime(2024, 5, 10, 9, 5, tzinfo=timezone.utc), OrderStatus.DELIVERED, "Entregue"),
        ])
        assert snapshot_subtitle(order) == "Entregue · 10/05/2024 09:05"

    def test_no_events(self):
        assert snapshot_subtitle(_make_order()) == "Sem eventos"


class TestSnapshotBuilding:

    def test_snapshot_for_order(self):
        order = _make_order()
        snapshot = snapshot_for_order(order, NOW)
        assert snapshot.order_id == order.id
        assert snapshot.status == "created"
        assert snapshot.date == NOW

    def test_catalog_newest_first(self):
        old = _make_order("old", updated=NOW - timedelta(days=1))
        new = _make_order("new", updated=NOW)
        assert [e.title for e in catalog_for_orders([old, new])] == ["new", "old"]

    def test_snapshot_wire_keys(self):
        order_id = uuid.uuid4()
        data = Snapshot(NOW, order_id, "t", "delivered", "s").to_dict()
        assert data["orderId"] == str(order_id)
        assert Snapshot.from_dict(data) == Snapshot(NOW, order_id, "t", "delivered", "s")

    def test_sinks_satisfy_protocol(self, store):
        assert isinstance(MemorySnapshotStore(), SnapshotSink)
        assert isinstance(store, SnapshotSink)


class TestJsonFileSnapshotStore:

    def test_save_and_load_snapshot(self, store):
        order = _make_order()
        store.save_snapshot(snapshot_for_order(order, NOW))

        assert store.snapshot_path(order.id).name == f"snap_{order.id}.json"
        loaded = store.load_snapshot(order.id)
        assert loaded.title == "Fone"
        assert loaded.subtitle == "Sem eventos"

    def test_missing_snapshot(self, store):
        assert store.load_snapshot(uuid.uuid4()) is None

    def test_corrupt_snapshot(self, store):
        order_id = uuid.uuid4()
        store.directory.mkdir(parents=True)
        store.snapshot_path(order_id).write_text("{not json")
        assert store.load_snapshot(order_id) is None

    def test_catalog_roundtrip(self, store):
        orders = [_make_order("a"), _make_order("b", updated=NOW - timedelta(hours=1))]
        store.save_catalog(catalog_for_orders(orders))

        raw = json.loads(store.catalog_path.read_text())
        assert raw[0]["lastUpdated"] == NOW.isoformat()
        assert store.load_catalog() == [CatalogEntry(o.id, o.title, o.last_updated) for o in orders]

    def test_overwrite_leaves_no_temp_files(self, store):
        order = _make_order()
        store.save_snapshot(snapshot_for_order(order, NOW))
        store.save_snapshot(snapshot_for_order(order, NOW + timedelta(minutes=5)))

        assert sorted(p.name for p in store.directory.iterdir()) == [f"snap_{order.id}.json"]
        assert store.load_snapshot(order.id).date == NOW + timedelta(minutes=5)

    def test_captured_codes(self, store):
        assert store.load_captured_codes() == []
        store.save_captured_codes(["LB123456789BR", "TBA123456789000"])
        assert store.load_captured_codes() == ["LB123456789BR", "TBA123456789000"]

        store.clear_captured_codes()
        assert store.load_captured_codes() == []
        # clearing twice is fine
        store.clear_captured_codes()
