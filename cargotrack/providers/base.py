"""
Base Tracking Provider - Abstract base class for all tracking providers
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from ..classifier import normalize_tracking_code
from ..errors import DecodeError, InvalidResponseError, ServerError
from ..models import Carrier, TrackingResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class BaseTrackingProvider(ABC):
    """
    Abstract base class for tracking providers.

    All tracking providers must implement:
    - fetch_tracking(code, carrier_hint) - Fetch and normalize a timeline

    Results always carry events sorted newest first.
    """

    def __init__(self):
        self.provider_name = self.__class__.__name__

    @abstractmethod
    async def fetch_tracking(self, code: str, carrier_hint: Optional[Carrier] = None) -> TrackingResult:
        """
        Fetch tracking info for a code.

        Args:
            code: Tracking code
            carrier_hint: Carrier the caller believes in (advisory only)

        Returns:
            TrackingResult with events sorted newest first

        Raises:
            NetworkError: HTTP exchange failed or returned non-200
            DecodeError: Payload did not match the vendor schema
        """
        pass

    def normalize_tracking_code(self, text: str) -> Optional[str]:
        """Normalize user input into a code this provider accepts."""
        return normalize_tracking_code(text)


class HTTPTrackingProvider(BaseTrackingProvider):
    """
    Shared HTTP plumbing for vendor-backed providers.

    A client may be injected to share a connection pool; otherwise a
    short-lived AsyncClient is opened per request.
    """

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT, client: Optional[httpx.AsyncClient] = None):
        super().__init__()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def _request(self, method: str, url: str, headers: Dict[str, str], json_body: Any = None) -> Any:
        """Send a request and return the decoded JSON body of a 200 response."""
        try:
            if self._client is not None:
                response = await self._client.request(method, url, headers=headers, json=json_body, timeout=self.timeout)
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.request(method, url, headers=headers, json=json_body, timeout=self.timeout)
        except httpx.TransportError as e:
            logger.error(f"[{self.provider_name}] {method} {url} transport error: {e}")
            raise InvalidResponseError(f"{type(e).__name__}: {e}") from e

        if response.status_code != 200:
            logger.warning(f"[{self.provider_name}] {method} {url} returned HTTP {response.status_code}")
            raise ServerError(response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"{self.provider_name}: response body is not JSON") from e


def optional_str(value: Any, field: str) -> Optional[str]:
    """Return ``value`` if it is a string or None; a DecodeError otherwise."""
    if value is None or isinstance(value, str):
        return value
    raise DecodeError(f"Expected a string for '{field}', got {type(value).__name__}")
