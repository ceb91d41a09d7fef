"""
Simulated tracking provider - synthetic "live" timelines for development

The timeline for a code is fixed by a SHA-256 seed of the code, so the same
code always produces the same number of events and the same status
progression. Only events whose time has already come are returned.
"""

import asyncio
import hashlib
import logging
import random
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

from ..classifier import classify
from ..models import Carrier, OrderStatus, TrackingEvent, TrackingResult, utcnow
from .base import BaseTrackingProvider

logger = logging.getLogger(__name__)

DEFAULT_LATENCY = 1.0

ORIGIN = "São Paulo, SP"
DESTINATION = "Curitiba, PR"

# (status, description, location) for each step after posting, one day apart
_STEPS: List[Tuple[OrderStatus, str, str]] = [
    (OrderStatus.IN_TRANSIT, "Objeto em trânsito - origem", ORIGIN),
    (OrderStatus.IN_TRANSIT, "Objeto em trânsito - destino", DESTINATION),
    (OrderStatus.OUT_FOR_DELIVERY, "Objeto saiu para entrega", DESTINATION),
    (OrderStatus.DELIVERED, "Objeto entregue ao destinatário", DESTINATION),
]


def stable_seed(code: str) -> int:
    """Platform-independent seed: first 8 bytes of SHA-256 over the code."""
    digest = hashlib.sha256(code.strip().upper().encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


class SimulatedTrackingProvider(BaseTrackingProvider):
    """
    Tracking provider that fabricates a plausible Correios-style timeline.

    Args:
        latency: Seconds to sleep before answering, standing in for the network
        clock: Callable returning the current aware datetime
    """

    def __init__(self, latency: float = DEFAULT_LATENCY, clock: Optional[Callable[[], datetime]] = None):
        super().__init__()
        self.latency = latency
        self.clock = clock or utcnow

    async def fetch_tracking(self, code: str, carrier_hint: Optional[Carrier] = None) -> TrackingResult:
        if self.latency > 0:
            await asyncio.sleep(self.latency)

        events = self.build_timeline(code, self.clock())
        carrier = self._guess_carrier(code, carrier_hint)
        result = TrackingResult.from_events(events, carrier)
        logger.debug(f"Simulated {len(result.events)} events for {code} ({result.status.value})")
        return result

    def build_timeline(self, code: str, now: datetime) -> List[TrackingEvent]:
        """Synthesize the events of ``code`` that are not in the future of ``now``."""
        rng = random.Random(stable_seed(code))
        # Posted somewhere between 1 and 7 days ago
        age = timedelta(seconds=rng.uniform(1 * 86400, 7 * 86400))
        posted_at = now - age
        step_count = 2 + rng.randrange(4)

        events = [TrackingEvent(date=posted_at, status=OrderStatus.CREATED, description="Objeto postado", location=ORIGIN)]
        for i in range(1, step_count + 1):
            at = posted_at + timedelta(days=i)
            if at > now:
                break
            # Steps past the end of the route repeat the delivery scan
            status, description, location = _STEPS[min(i - 1, len(_STEPS) - 1)]
            events.append(TrackingEvent(date=at, status=status, description=description, location=location))
        return events

    def _guess_carrier(self, code: str, carrier_hint: Optional[Carrier]) -> Carrier:
        carrier = classify(code).carrier
        if carrier in (Carrier.OTHER, Carrier.UNKNOWN):
            if carrier_hint and carrier_hint is not Carrier.UNKNOWN:
                return carrier_hint
            return Carrier.OTHER
        return carrier
