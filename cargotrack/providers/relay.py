"""
Carrier relay provider - talks to an operator-run backend

GET {base}/{code}. The relay has already normalized the payload to
``{carrier, status, events: [{date, status, description, location?}]}``.
"""

import logging
from typing import Any, List, Optional

import httpx

from ..classifier import carrier_from_slug
from ..constants import is_placeholder_url
from ..errors import DecodeError
from ..models import Carrier, TrackingEvent, TrackingResult, parse_iso8601
from .base import BaseTrackingProvider, DEFAULT_TIMEOUT, HTTPTrackingProvider, optional_str
from .simulated import SimulatedTrackingProvider
from .status_map import CORREIOS_STATUS_MAP, parse_unified_status

logger = logging.getLogger(__name__)


class CarrierRelayProvider(HTTPTrackingProvider):
    """
    Tracking provider backed by a carrier relay.

    When the relay URL is unset or a placeholder, requests are answered by
    a simulated provider instead.

    Args:
        base_url: Relay base URL
        default_carrier: Carrier reported when the relay omits one
        fallback: Provider used for placeholder URLs
    """

    def __init__(
        self,
        base_url: str,
        default_carrier: Carrier = Carrier.CORREIOS,
        fallback: Optional[BaseTrackingProvider] = None,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(base_url or "", timeout=timeout, client=client)
        self.default_carrier = default_carrier
        self.fallback = fallback or SimulatedTrackingProvider()

    @property
    def uses_fallback(self) -> bool:
        return is_placeholder_url(self.base_url)

    async def fetch_tracking(self, code: str, carrier_hint: Optional[Carrier] = None) -> TrackingResult:
        if self.uses_fallback:
            logger.info(f"Relay URL is a placeholder, simulating {code}")
            return await self.fallback.fetch_tracking(code, carrier_hint=self.default_carrier)

        url = f"{self.base_url}/{code}"
        logger.info(f"Tracking {code} via relay {self.base_url}")
        data = await self._request("GET", url, headers={"Accept": "application/json"})
        return self._parse_relay(data)

    def _parse_relay(self, data: Any) -> TrackingResult:
        if not isinstance(data, dict):
            raise DecodeError("Relay response is not an object")
        try:
            status = data["status"]
            raw_events = data["events"]
        except KeyError as e:
            raise DecodeError(f"Relay response missing field: {e}") from e
        if not isinstance(raw_events, list):
            raise DecodeError("Relay events is not a list")

        events: List[TrackingEvent] = []
        for raw in raw_events:
            if not isinstance(raw, dict) or "description" not in raw:
                raise DecodeError("Relay event malformed")
            date = parse_iso8601(raw.get("date"))
            if date is None:
                continue
            events.append(TrackingEvent(
                date=date,
                status=parse_unified_status(raw.get("status"), fallback=CORREIOS_STATUS_MAP),
                description=optional_str(raw["description"], "description") or "",
                location=optional_str(raw.get("location"), "location"),
            ))

        slug = optional_str(data.get("carrier"), "carrier")
        carrier = carrier_from_slug(slug) if slug else self.default_carrier
        return TrackingResult.from_events(
            events, carrier, default_status=parse_unified_status(status, fallback=CORREIOS_STATUS_MAP)
        )
