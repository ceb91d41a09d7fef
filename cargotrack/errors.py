"""
Cargotrack Errors

Classification never fails (an unrecognized code is Carrier.UNKNOWN), so
every exception here comes from fetching or configuring a provider.
"""

import uuid
from typing import Optional


class TrackingError(Exception):
    """Base class for all cargotrack errors."""
    pass


class NetworkError(TrackingError):
    """Raised when a provider's HTTP exchange fails."""
    pass


class InvalidResponseError(NetworkError):
    """Raised when the transport produced nothing usable as an HTTP response."""

    def __init__(self, message: str = "Invalid response from server"):
        super().__init__(message)


class ServerError(NetworkError):
    """Raised on any non-200 HTTP status. The status code is kept for diagnostics."""

    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        super().__init__(message or f"Server error: {status_code}")


class DecodeError(TrackingError):
    """Raised when a payload does not match the vendor schema."""
    pass


class ConfigurationError(TrackingError):
    """Raised when the selected provider lacks credentials or a URL."""
    pass


class OrderRefreshError(TrackingError):
    """A provider failure tied to the order whose refresh it broke."""

    def __init__(self, order_id: uuid.UUID, cause: Exception, message: Optional[str] = None):
        self.order_id = order_id
        self.cause = cause
        super().__init__(message or f"Failed to refresh order {order_id}: {cause}")


class ProviderAPIError(NetworkError):
    """Raised when a vendor answers HTTP 200 but reports an API-level error code."""

    def __init__(self, code, message: str = ""):
        self.code = code
        super().__init__(message or f"API error: {code}")


class OrderStoreError(TrackingError):
    """Raised when the order book file exists but cannot be read."""
    pass
