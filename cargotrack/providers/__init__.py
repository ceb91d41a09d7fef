"""
Tracking providers - simulated, AfterShip, 17TRACK and carrier relay
"""

from .base import BaseTrackingProvider
from .simulated import SimulatedTrackingProvider
from .aftership import AfterShipProvider
from .track17 import Track17Provider
from .relay import CarrierRelayProvider
from .factory import TrackingProviderFactory

__all__ = [
    "BaseTrackingProvider",
    "SimulatedTrackingProvider",
    "AfterShipProvider",
    "Track17Provider",
    "CarrierRelayProvider",
    "TrackingProviderFactory",
]
