"""Widget snapshot store - per-order snapshots and the order catalog as JSON files."""

import json
import logging
import os
import tempfile
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from .models import Order, parse_iso8601, utcnow

logger = logging.getLogger(__name__)

CATALOG_FILE = "orders_catalog.json"
CAPTURED_CODES_FILE = "captured_codes.json"
NO_EVENTS_SUBTITLE = "Sem eventos"


@dataclass(frozen=True)
class Snapshot:
    """Latest state of one order, as shown by the widget."""
    date: datetime
    order_id: uuid.UUID
    title: str
    status: str
    subtitle: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "orderId": str(self.order_id),
            "title": self.title,
            "status": self.status,
            "subtitle": self.subtitle,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Snapshot":
        return cls(
            date=parse_iso8601(d.get("date")) or utcnow(),
            order_id=uuid.UUID(d["orderId"]),
            title=d.get("title", ""),
            status=d.get("status", ""),
            subtitle=d.get("subtitle", ""),
        )


@dataclass(frozen=True)
class CatalogEntry:
    """Lightweight order listing for widget configuration."""
    id: uuid.UUID
    title: str
    last_updated: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {"id": str(self.id), "title": self.title, "lastUpdated": self.last_updated.isoformat()}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CatalogEntry":
        return cls(
            id=uuid.UUID(d["id"]),
            title=d.get("title", ""),
            last_updated=parse_iso8601(d.get("lastUpdated")) or utcnow(),
        )


@runtime_checkable
class SnapshotSink(Protocol):
    """Write-only port the orchestrator hands widget data to."""

    def save_snapshot(self, snapshot: Snapshot) -> None:
        ...

    def save_catalog(self, entries: List[CatalogEntry]) -> None:
        ...


def snapshot_subtitle(order: Order) -> str:
    """'<description> · <location> · <date>' for the latest event."""
    event = order.latest_event
    if event is None:
        return NO_EVENTS_SUBTITLE
    location = f" · {event.location}" if event.location else ""
    return f"{event.description}{location} · {event.date.strftime('%d/%m/%Y %H:%M')}"


def snapshot_for_order(order: Order, now: Optional[datetime] = None) -> Snapshot:
    return Snapshot(
        date=now or utcnow(),
        order_id=order.id,
        title=order.title,
        status=order.status.value,
        subtitle=snapshot_subtitle(order),
    )


def catalog_for_orders(orders: List[Order]) -> List[CatalogEntry]:
    """Catalog entries, most recently updated first."""
    ordered = sorted(orders, key=lambda o: o.last_updated, reverse=True)
    return [CatalogEntry(id=o.id, title=o.title, last_updated=o.last_updated) for o in ordered]


class MemorySnapshotStore:
    """In-process SnapshotSink, useful for tests and embedding."""

    def __init__(self):
        self.snapshots: Dict[uuid.UUID, Snapshot] = {}
        self.catalog: List[CatalogEntry] = []

    def save_snapshot(self, snapshot: Snapshot) -> None:
        self.snapshots[snapshot.order_id] = snapshot

    def save_catalog(self, entries: List[CatalogEntry]) -> None:
        self.catalog = list(entries)


class JsonFileSnapshotStore:
    """JSON file SnapshotSink shared with an external widget.

    Writes ``snap_<uuid>.json`` per order and ``orders_catalog.json`` with
    atomic writes (temp file + rename), so a reader never sees a partial
    file. Also keeps the list of codes captured from shared text.
    """

    def __init__(self, directory: str = "~/.cargotrack/widget"):
        self._directory = Path(os.path.expanduser(directory))

    @property
    def directory(self) -> Path:
        return self._directory

    def snapshot_path(self, order_id: uuid.UUID) -> Path:
        return self._directory / f"snap_{order_id}.json"

    @property
    def catalog_path(self) -> Path:
        return self._directory / CATALOG_FILE

    @property
    def captured_codes_path(self) -> Path:
        return self._directory / CAPTURED_CODES_FILE

    def save_snapshot(self, snapshot: Snapshot) -> None:
        self._write_json(self.snapshot_path(snapshot.order_id), snapshot.to_dict())
        logger.debug(f"Snapshot saved: {snapshot.title}")

    def load_snapshot(self, order_id: uuid.UUID) -> Optional[Snapshot]:
        data = self._read_json(self.snapshot_path(order_id))
        if data is None:
            return None
        try:
            return Snapshot.from_dict(data)
        except (KeyError, ValueError) as e:
            logger.warning(f"Invalid snapshot for {order_id}: {e}")
            return None

    def save_catalog(self, entries: List[CatalogEntry]) -> None:
        self._write_json(self.catalog_path, [e.to_dict() for e in entries])
        logger.debug(f"Catalog saved with {len(entries)} orders")

    def load_catalog(self) -> List[CatalogEntry]:
        data = self._read_json(self.catalog_path)
        if not isinstance(data, list):
            return []
        entries = []
        for raw in data:
            try:
                entries.append(CatalogEntry.from_dict(raw))
            except (KeyError, ValueError) as e:
                logger.warning(f"Skipping invalid catalog entry: {e}")
        return entries

    # ── Captured codes ──

    def save_captured_codes(self, codes: List[str]) -> None:
        self._write_json(self.captured_codes_path, list(codes))

    def load_captured_codes(self) -> List[str]:
        data = self._read_json(self.captured_codes_path)
        if not isinstance(data, list):
            return []
        return [c for c in data if isinstance(c, str)]

    def clear_captured_codes(self) -> None:
        try:
            self.captured_codes_path.unlink()
        except FileNotFoundError:
            pass

    # ── File helpers ──

    def _read_json(self, path: Path) -> Any:
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read {path}: {e}")
            return None

    def _write_json(self, path: Path, payload: Any) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(payload, indent=2, ensure_ascii=False)

        # Atomic write: temp file in same directory, then rename
        fd, tmp_path = tempfile.mkstemp(prefix=".snap-", suffix=".tmp", dir=str(path.parent))
        try:
            try:
                os.write(fd, content.encode("utf-8"))
            finally:
                os.close(fd)
            os.replace(tmp_path, str(path))
        except OSError:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
