"""
Order Book - In-memory order collection with JSON file persistence

Stands in for the app's persistence layer: creates orders from tracking
codes (guessing the carrier), turns captured codes into orders and
exposes the catalog the widget needs.
"""

import json
import logging
import os
import uuid
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from .classifier import classify
from .errors import OrderStoreError
from .models import Carrier, Order
from .snapshots import CatalogEntry, JsonFileSnapshotStore, catalog_for_orders

logger = logging.getLogger(__name__)

STORE_VERSION = 1

_STORE_NAMES = {
    Carrier.CORREIOS: "Correios",
    Carrier.AMAZON_LOGISTICS: "Amazon",
    Carrier.SHOPEE_EXPRESS: "Shopee",
}
DEFAULT_STORE_NAME = "Loja"


class OrderBook:
    """
    Holds orders keyed by id.

    Example:
        book = OrderBook()
        order = book.add_order("Fone", "Loja X", tracking_code="lb123456789br")
        report = await orchestrator.refresh_many(book.with_tracking_codes())
    """

    def __init__(
        self,
        orders: Optional[List[Order]] = None,
        captured_codes: Optional[JsonFileSnapshotStore] = None,
    ):
        self._orders: Dict[uuid.UUID, Order] = {}
        self._captured_codes = captured_codes
        for order in orders or []:
            self._orders[order.id] = order

    def __len__(self) -> int:
        return len(self._orders)

    def add_order(
        self,
        title: str,
        store: str,
        tracking_code: Optional[str] = None,
        order_link: Optional[str] = None,
    ) -> Order:
        """Create and store an order, guessing the carrier from its code."""
        code = (tracking_code or "").strip() or None
        carrier = Carrier.UNKNOWN
        if code:
            carrier = classify(code).carrier
            if carrier is Carrier.UNKNOWN:
                carrier = Carrier.OTHER

        order = Order(title=title, store=store, carrier=carrier, tracking_code=code, order_link=order_link)
        self._orders[order.id] = order
        logger.info(f"Order created: {title} ({carrier.value})")
        return order

    def create_from_captured_code(self, code: str) -> Order:
        """
        Create an order for a code mined from shared text.

        The code is consumed: it is removed from the captured-codes list
        and the list is persisted, so the same code is not offered twice.
        """
        code = code.strip().upper()
        store = _STORE_NAMES.get(classify(code).carrier, DEFAULT_STORE_NAME)
        order = self.add_order(title=f"Rastreamento {code[-6:]}", store=store, tracking_code=code)
        self._consume_captured_code(code)
        return order

    # ── Captured codes ──

    def captured_codes(self) -> List[str]:
        if self._captured_codes is None:
            return []
        return self._captured_codes.load_captured_codes()

    def capture_codes(self, codes: Iterable[str]) -> List[str]:
        """
        Record codes found in shared text for later import.

        Codes already captured or already tracked by an order are skipped.

        Returns:
            The codes newly added to the list
        """
        if self._captured_codes is None:
            raise OrderStoreError("No captured-codes store configured")

        pending = self._captured_codes.load_captured_codes()
        known = {c.strip().upper() for c in pending} | self._tracked_codes()
        added = []
        for code in codes:
            code = code.strip().upper()
            if code and code not in known:
                known.add(code)
                added.append(code)

        if added:
            self._captured_codes.save_captured_codes(pending + added)
            logger.info(f"Captured {len(added)} tracking codes")
        return added

    def import_captured_codes(self) -> List[Order]:
        """Turn every captured code into an order, emptying the list."""
        created = []
        tracked = self._tracked_codes()
        for code in self.captured_codes():
            code = code.strip().upper()
            if code in tracked:
                self._consume_captured_code(code)
                continue
            created.append(self.create_from_captured_code(code))
            tracked.add(code)
        return created

    def _tracked_codes(self) -> Set[str]:
        return {o.tracking_code.strip().upper() for o in self._orders.values() if o.has_tracking_code}

    def _consume_captured_code(self, code: str) -> None:
        if self._captured_codes is None:
            return
        pending = self._captured_codes.load_captured_codes()
        remaining = [c for c in pending if c.strip().upper() != code]
        if len(remaining) != len(pending):
            self._captured_codes.save_captured_codes(remaining)
            logger.debug(f"Captured code {code} consumed, {len(remaining)} left")

    def remove(self, order_id: uuid.UUID) -> bool:
        removed = self._orders.pop(order_id, None)
        if removed:
            logger.info(f"Order removed: {removed.title}")
        return removed is not None

    def get(self, order_id: uuid.UUID) -> Optional[Order]:
        return self._orders.get(order_id)

    def list(self) -> List[Order]:
        """All orders, newest first."""
        return sorted(self._orders.values(), key=lambda o: o.created_at, reverse=True)

    def with_tracking_codes(self) -> List[Order]:
        return [o for o in self._orders.values() if o.has_tracking_code]

    def catalog(self) -> List[CatalogEntry]:
        return catalog_for_orders(list(self._orders.values()))

    # ── Persistence ──

    @classmethod
    def load(cls, path: str, captured_codes: Optional[JsonFileSnapshotStore] = None) -> "OrderBook":
        """
        Load orders from a JSON file. A missing file gives an empty book.

        Raises:
            OrderStoreError: If the file cannot be read or is not an order book
        """
        file_path = Path(os.path.expanduser(path))
        if not file_path.exists():
            logger.info(f"Order file not found at {file_path}, starting empty")
            return cls(captured_codes=captured_codes)

        try:
            data = json.loads(file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read order file {file_path}: {e}")
            raise OrderStoreError(f"Cannot read order file {file_path}: {e}") from e
        if not isinstance(data, dict) or not isinstance(data.get("orders", []), list):
            raise OrderStoreError(f"Order file {file_path} is not an order book")

        version = data.get("version", 1)
        if version != STORE_VERSION:
            logger.warning(f"Order file version mismatch: expected {STORE_VERSION}, got {version}")

        orders = []
        for raw in data.get("orders", []):
            try:
                orders.append(Order.from_dict(raw))
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping invalid order entry: {e}")
        logger.info(f"Loaded {len(orders)} orders from {file_path}")
        return cls(orders, captured_codes=captured_codes)

    def save(self, path: str) -> None:
        file_path = Path(os.path.expanduser(path))
        file_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"version": STORE_VERSION, "orders": [o.to_dict() for o in self.list()]}
        tmp_path = file_path.with_suffix(file_path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp_path, file_path)
