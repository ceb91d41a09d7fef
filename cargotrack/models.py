"""
Cargotrack Models - Carriers, unified statuses, events, results and orders

This module defines:
- Carrier: the logistics company moving a shipment
- OrderStatus: the closed set of unified delivery statuses
- TrackingEvent: one entry of a shipment timeline
- TrackingResult: what every tracking provider returns
- Order: the tracked order record the orchestrator updates
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class Carrier(str, Enum):
    """Carrier guessed from a tracking code or reported by a provider."""
    UNKNOWN = "unknown"
    CORREIOS = "correios"
    AMAZON_LOGISTICS = "amazonLogistics"
    SHOPEE_EXPRESS = "shopeeExpress"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        return _CARRIER_NAMES[self]


_CARRIER_NAMES = {
    Carrier.UNKNOWN: "Desconhecido",
    Carrier.CORREIOS: "Correios",
    Carrier.AMAZON_LOGISTICS: "Amazon Logistics",
    Carrier.SHOPEE_EXPRESS: "Shopee Express",
    Carrier.OTHER: "Outro",
}


class OrderStatus(str, Enum):
    """
    Unified delivery status.

    Declaration order carries no meaning. Use ``progress`` to order statuses
    for display; transitions between statuses are never validated, so a
    shipment may legally go from IN_TRANSIT back to EXCEPTION.
    """
    CREATED = "created"
    IN_TRANSIT = "inTransit"
    OUT_FOR_DELIVERY = "outForDelivery"
    DELIVERED = "delivered"
    EXCEPTION = "exception"

    @property
    def display_name(self) -> str:
        return _STATUS_NAMES[self]

    @property
    def progress(self) -> int:
        """Rank along the delivery lifecycle (display only)."""
        return _STATUS_PROGRESS[self]

    @property
    def is_terminal(self) -> bool:
        return self is OrderStatus.DELIVERED


_STATUS_NAMES = {
    OrderStatus.CREATED: "Criado",
    OrderStatus.IN_TRANSIT: "Em Trânsito",
    OrderStatus.OUT_FOR_DELIVERY: "Saiu para Entrega",
    OrderStatus.DELIVERED: "Entregue",
    OrderStatus.EXCEPTION: "Exceção",
}

_STATUS_PROGRESS = {
    OrderStatus.CREATED: 0,
    OrderStatus.IN_TRANSIT: 1,
    OrderStatus.EXCEPTION: 2,
    OrderStatus.OUT_FOR_DELIVERY: 3,
    OrderStatus.DELIVERED: 4,
}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_iso8601(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp into an aware datetime.

    Accepts a trailing ``Z``. Naive values are taken as UTC.
    Returns None when the value cannot be parsed.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class TrackingEvent:
    """A single timeline entry."""
    date: datetime
    status: OrderStatus
    description: str
    location: Optional[str] = None

    @property
    def id(self) -> str:
        return f"{self.date.isoformat()}{self.location or ''}{self.status.value}"

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "date": self.date.isoformat(),
            "status": self.status.value,
            "description": self.description,
        }
        if self.location is not None:
            d["location"] = self.location
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TrackingEvent":
        date = parse_iso8601(d.get("date"))
        if date is None:
            raise ValueError(f"Invalid event date: {d.get('date')!r}")
        return cls(
            date=date,
            status=OrderStatus(d.get("status", OrderStatus.IN_TRANSIT.value)),
            description=d.get("description", ""),
            location=d.get("location"),
        )


def sort_events(events: List[TrackingEvent]) -> List[TrackingEvent]:
    """Return a new list with the newest event first."""
    return sorted(events, key=lambda e: e.date, reverse=True)


def latest_event(events: List[TrackingEvent]) -> Optional[TrackingEvent]:
    if not events:
        return None
    return max(events, key=lambda e: e.date)


@dataclass(frozen=True)
class TrackingResult:
    """
    Normalized answer of a tracking provider.

    ``status`` is expected to match the status of the newest event. The type
    does not check it; use ``from_events`` to derive it.
    """
    status: OrderStatus
    carrier: Carrier
    events: List[TrackingEvent] = field(default_factory=list)

    @property
    def latest_event(self) -> Optional[TrackingEvent]:
        return latest_event(self.events)

    @classmethod
    def from_events(
        cls,
        events: List[TrackingEvent],
        carrier: Carrier,
        default_status: OrderStatus = OrderStatus.CREATED,
    ) -> "TrackingResult":
        """Build a result whose status is the newest event's status."""
        ordered = sort_events(events)
        status = ordered[0].status if ordered else default_status
        return cls(status=status, carrier=carrier, events=ordered)


@dataclass
class Order:
    """
    A tracked order.

    Owned by the storage collaborator. The orchestrator only rewrites
    carrier, status, events and last_updated, always through apply_result.
    """
    title: str
    store: str = ""
    carrier: Carrier = Carrier.UNKNOWN
    tracking_code: Optional[str] = None
    order_link: Optional[str] = None
    status: OrderStatus = OrderStatus.CREATED
    last_updated: datetime = field(default_factory=utcnow)
    events: List[TrackingEvent] = field(default_factory=list)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    created_at: datetime = field(default_factory=utcnow)

    @property
    def has_tracking_code(self) -> bool:
        return bool(self.tracking_code and self.tracking_code.strip())

    @property
    def latest_event(self) -> Optional[TrackingEvent]:
        return latest_event(self.events)

    def apply_result(self, result: TrackingResult, now: Optional[datetime] = None) -> None:
        """Overwrite the tracking fields from a provider result in one step."""
        self.carrier, self.status, self.events, self.last_updated = (
            result.carrier,
            result.status,
            list(result.events),
            now or utcnow(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "title": self.title,
            "store": self.store,
            "carrier": self.carrier.value,
            "tracking_code": self.tracking_code,
            "order_link": self.order_link,
            "status": self.status.value,
            "last_updated": self.last_updated.isoformat(),
            "events": [e.to_dict() for e in self.events],
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Order":
        events = []
        for raw in d.get("events", []):
            try:
                events.append(TrackingEvent.from_dict(raw))
            except ValueError:
                # Same as the stored blob failing to decode: drop the entry
                continue
        return cls(
            id=uuid.UUID(d["id"]) if d.get("id") else uuid.uuid4(),
            title=d.get("title", ""),
            store=d.get("store", ""),
            carrier=Carrier(d.get("carrier", Carrier.UNKNOWN.value)),
            tracking_code=d.get("tracking_code"),
            order_link=d.get("order_link"),
            status=OrderStatus(d.get("status", OrderStatus.CREATED.value)),
            last_updated=parse_iso8601(d.get("last_updated")) or utcnow(),
            events=events,
            created_at=parse_iso8601(d.get("created_at")) or utcnow(),
        )
