"""
17TRACK-style tracking provider

POST {base}/gettrackinfo with a ``token`` header and ``[{"number": code}]``.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from ..classifier import carrier_from_slug
from ..constants import TRACK17_BASE_URL
from ..errors import DecodeError, ProviderAPIError
from ..models import Carrier, OrderStatus, TrackingEvent, TrackingResult, parse_iso8601, sort_events
from .base import DEFAULT_TIMEOUT, HTTPTrackingProvider, optional_str
from .status_map import TRACK17_STATUS_MAP, map_status

logger = logging.getLogger(__name__)


class Track17Provider(HTTPTrackingProvider):
    """
    Tracking provider backed by a 17TRACK-compatible gettrackinfo endpoint.

    Requires configuration:
    - api_key: account token
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = TRACK17_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ):
        super().__init__(base_url, timeout=timeout, client=client)
        self.api_key = api_key

    @property
    def _headers(self) -> Dict[str, str]:
        return {"token": self.api_key, "Content-Type": "application/json"}

    async def fetch_tracking(self, code: str, carrier_hint: Optional[Carrier] = None) -> TrackingResult:
        url = f"{self.base_url}/gettrackinfo"
        logger.info(f"Tracking {code} via 17TRACK")
        data = await self._request("POST", url, headers=self._headers, json_body=[{"number": code}])
        return self._parse_track_info(data, code)

    def _parse_track_info(self, data: Any, code: str) -> TrackingResult:
        """Parse a gettrackinfo response into a TrackingResult."""
        if isinstance(data, dict) and data.get("code", 0) != 0:
            raise ProviderAPIError(data["code"], f"17TRACK API error: {data['code']}")

        try:
            body = data["data"]
            accepted = body.get("accepted") or []
            rejected = body.get("rejected") or []
        except (KeyError, TypeError, AttributeError) as e:
            raise DecodeError(f"17TRACK response missing field: {e}") from e
        if not isinstance(accepted, list) or not isinstance(rejected, list):
            raise DecodeError("17TRACK accepted/rejected is not a list")

        if not accepted:
            if rejected:
                entry = rejected[0] if isinstance(rejected[0], dict) else {}
                error = entry.get("error") if isinstance(entry.get("error"), dict) else {}
                raise DecodeError(f"17TRACK rejected {code}: {error.get('message', 'unknown error')}")
            raise DecodeError(f"17TRACK returned no tracking info for {code}")

        try:
            track_info = accepted[0].get("track_info") or {}
            latest = (track_info.get("latest_status") or {}).get("status")
            providers = (track_info.get("tracking") or {}).get("providers") or []
        except AttributeError as e:
            raise DecodeError(f"17TRACK track_info malformed: {e}") from e
        if not isinstance(providers, list):
            raise DecodeError("17TRACK providers is not a list")

        latest_status = map_status(TRACK17_STATUS_MAP, latest) if latest else OrderStatus.CREATED

        carrier = Carrier.OTHER
        events: List[TrackingEvent] = []
        for index, entry in enumerate(providers):
            if not isinstance(entry, dict):
                raise DecodeError("17TRACK provider entry is not an object")
            if index == 0:
                provider = entry.get("provider") or {}
                if not isinstance(provider, dict):
                    raise DecodeError("17TRACK provider is not an object")
                carrier = carrier_from_slug(optional_str(provider.get("name"), "provider.name"))
            raw_events = entry.get("events") or []
            if not isinstance(raw_events, list):
                raise DecodeError("17TRACK events is not a list")
            for event in raw_events:
                if not isinstance(event, dict):
                    raise DecodeError("17TRACK event is not an object")
                date = parse_iso8601(event.get("time_utc") or event.get("time_iso"))
                if date is None:
                    continue
                events.append(TrackingEvent(
                    date=date,
                    status=self._event_status(event),
                    description=optional_str(event.get("description"), "description") or "",
                    location=optional_str(event.get("location"), "location") or None,
                ))

        # The vendor's latest status describes the newest event
        events = sort_events(events)
        if events:
            newest = events[0]
            events[0] = TrackingEvent(newest.date, latest_status, newest.description, newest.location)

        return TrackingResult.from_events(events, carrier, default_status=latest_status)

    def _event_status(self, event: Dict[str, Any]) -> OrderStatus:
        stage = event.get("stage")
        if not stage:
            # sub_status looks like "InTransit_PickedUp"
            sub_status = event.get("sub_status")
            stage = sub_status.split("_")[0] if isinstance(sub_status, str) else None
        return map_status(TRACK17_STATUS_MAP, stage)
