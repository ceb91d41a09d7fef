"""
AfterShip tracking provider

GET {base}/trackings/{code} with an ``api-key`` header.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..classifier import carrier_from_slug
from ..constants import AFTERSHIP_BASE_URL
from ..errors import DecodeError
from ..models import Carrier, TrackingEvent, TrackingResult, parse_iso8601
from .base import DEFAULT_TIMEOUT, HTTPTrackingProvider, optional_str
from .status_map import AFTERSHIP_STATUS_MAP, map_status

logger = logging.getLogger(__name__)


class AfterShipProvider(HTTPTrackingProvider):
    """
    Tracking provider backed by the AfterShip trackings API.

    Requires configuration:
    - api_key: AfterShip API key
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = AFTERSHIP_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(base_url, timeout=timeout, client=client)
        self.api_key = api_key

    @property
    def _headers(self) -> Dict[str, str]:
        return {"api-key": self.api_key, "Content-Type": "application/json"}

    async def fetch_tracking(self, code: str, carrier_hint: Optional[Carrier] = None) -> TrackingResult:
        url = f"{self.base_url}/trackings/{code}"
        logger.info(f"Tracking {code} via AfterShip")
        data = await self._request("GET", url, headers=self._headers)
        return self._parse_tracking(data)

    def _parse_tracking(self, data: Any) -> TrackingResult:
        """Parse an AfterShip trackings response into a TrackingResult."""
        try:
            tracking = data["data"]["tracking"]
            tag = tracking["tag"]
            checkpoints = tracking["checkpoints"]
        except (KeyError, TypeError) as e:
            raise DecodeError(f"AfterShip response missing field: {e}") from e
        if not isinstance(checkpoints, list):
            raise DecodeError("AfterShip checkpoints is not a list")

        events: List[TrackingEvent] = []
        for checkpoint in checkpoints:
            if not isinstance(checkpoint, dict):
                raise DecodeError("AfterShip checkpoint is not an object")
            date = parse_iso8601(checkpoint.get("created_at"))
            if date is None:
                continue
            events.append(TrackingEvent(
                date=date,
                status=map_status(AFTERSHIP_STATUS_MAP, checkpoint.get("tag")),
                description=optional_str(checkpoint.get("message"), "message") or "",
                location=optional_str(checkpoint.get("location"), "location"),
            ))

        carrier = carrier_from_slug(optional_str(tracking.get("slug"), "slug"))
        return TrackingResult.from_events(events, carrier, default_status=map_status(AFTERSHIP_STATUS_MAP, tag))
