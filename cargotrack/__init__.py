"""
Cargotrack - Package tracking normalization

Cargotrack turns whatever a tracking backend says about a parcel into one
unified shape: a carrier, a status from a small closed set, and a timeline
sorted newest first.

Key Features:
- Carrier guessing and tracking code extraction from free text
- Interchangeable tracking providers (simulated, AfterShip, 17TRACK, carrier relay)
- Vendor status vocabularies mapped onto one OrderStatus
- Concurrent order refresh with per-order error reporting
- Widget snapshots, status change notifications and deep links

Quick Start:
    from cargotrack import OrderBook, TrackingOrchestrator, TrackingProviderFactory, load_settings

    settings = load_settings("cargotrack.yaml")
    book = OrderBook()
    book.add_order("Fone de ouvido", "Loja X", tracking_code="LB123456789BR")

    orchestrator = TrackingOrchestrator(TrackingProviderFactory.create_provider(settings))
    report = await orchestrator.refresh_many(book.list())
"""

__version__ = "0.1.0"

# Models
from .models import (
    Carrier,
    OrderStatus,
    TrackingEvent,
    TrackingResult,
    Order,
    sort_events,
    latest_event,
)

# Classification
from .classifier import CarrierGuess, classify, extract_candidates, normalize_tracking_code

# Errors
from .errors import (
    TrackingError,
    NetworkError,
    InvalidResponseError,
    ServerError,
    DecodeError,
    ConfigurationError,
    OrderRefreshError,
    ProviderAPIError,
    OrderStoreError,
)

# Configuration
from .config import ProviderMode, Settings, load_settings

# Providers
from .providers import (
    BaseTrackingProvider,
    SimulatedTrackingProvider,
    AfterShipProvider,
    Track17Provider,
    CarrierRelayProvider,
    TrackingProviderFactory,
)

# Orchestration
from .orchestrator import TrackingOrchestrator, RefreshOutcome, BatchRefreshReport

# Widget, notifications, deep links, orders
from .snapshots import Snapshot, CatalogEntry, MemorySnapshotStore, JsonFileSnapshotStore
from .notifications import LoggingNotifier
from .deeplinks import DeepLinkAction, DeepLinkKind, parse_deep_link
from .orders import OrderBook

__all__ = [
    "__version__",
    # Models
    "Carrier", "OrderStatus", "TrackingEvent", "TrackingResult", "Order",
    "sort_events", "latest_event",
    # Classification
    "CarrierGuess", "classify", "extract_candidates", "normalize_tracking_code",
    # Errors
    "TrackingError", "NetworkError", "InvalidResponseError", "ServerError",
    "DecodeError", "ConfigurationError", "OrderRefreshError", "ProviderAPIError", "OrderStoreError",
    # Configuration
    "ProviderMode", "Settings", "load_settings",
    # Providers
    "BaseTrackingProvider", "SimulatedTrackingProvider", "AfterShipProvider",
    "Track17Provider", "CarrierRelayProvider", "TrackingProviderFactory",
    # Orchestration
    "TrackingOrchestrator", "RefreshOutcome", "BatchRefreshReport",
    # Widget / notifications / deep links / orders
    "Snapshot", "CatalogEntry", "MemorySnapshotStore", "JsonFileSnapshotStore",
    "LoggingNotifier", "DeepLinkAction", "DeepLinkKind", "parse_deep_link",
    "OrderBook",
]
