"""
Shared constants for cargotrack.

Centralizes values needed by both the settings model and the providers
to avoid circular imports.
"""

from typing import Optional, Tuple

# ── Vendor endpoints ──
AFTERSHIP_BASE_URL = "https://api.aftership.com/v4"
TRACK17_BASE_URL = "https://api.17track.net/track/v2.2"

# ── Relay ──
# A relay URL containing any of these is a stand-in, not a real backend
PLACEHOLDER_MARKERS: Tuple[str, ...] = ("mock", "example.com", "localhost.invalid")

# ── Deep links ──
DEEP_LINK_SCHEME = "rastreamento"


def is_placeholder_url(url: Optional[str]) -> bool:
    """True for an unset relay URL or one that is obviously a stand-in."""
    if not url or not url.strip():
        return True
    lowered = url.lower()
    return any(marker in lowered for marker in PLACEHOLDER_MARKERS)
