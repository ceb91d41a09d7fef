"""
Tracking Provider Factory - Creates tracking providers based on settings
"""

import logging
from typing import Optional

import httpx

from ..config import ProviderMode, Settings
from ..errors import ConfigurationError
from .base import BaseTrackingProvider
from .simulated import SimulatedTrackingProvider

logger = logging.getLogger(__name__)


class TrackingProviderFactory:
    """
    Factory for creating tracking providers.

    Supported modes:
    - mock: SimulatedTrackingProvider
    - afterShip: AfterShipProvider
    - t17: Track17Provider
    - correiosBackend: CarrierRelayProvider

    A mode whose credentials are missing degrades to the simulated provider
    unless strict=True, in which case ConfigurationError is raised.
    """

    @staticmethod
    def create_provider(
        settings: Settings,
        strict: bool = False,
        client: Optional[httpx.AsyncClient] = None,
    ) -> BaseTrackingProvider:
        """
        Create a tracking provider.

        Args:
            settings: Settings selecting the mode and holding credentials
            strict: Raise instead of falling back when misconfigured
            client: Optional shared AsyncClient for HTTP providers

        Returns:
            Tracking provider instance

        Examples:
            provider = TrackingProviderFactory.create_provider(
                Settings(provider_mode="afterShip", aftership_api_key="xxx"),
            )
        """
        mode = settings.provider_mode
        simulated = SimulatedTrackingProvider(latency=settings.simulated_latency)

        if mode == ProviderMode.MOCK:
            return simulated

        if not settings.is_configuration_valid:
            message = f"{mode.display_name} is not configured"
            if strict:
                raise ConfigurationError(message)
            logger.warning(f"{message}, using simulated provider")
            return simulated

        if mode == ProviderMode.AFTERSHIP:
            from .aftership import AfterShipProvider
            return AfterShipProvider(
                api_key=settings.aftership_api_key.strip(),
                base_url=settings.aftership_base_url,
                timeout=settings.request_timeout,
                client=client,
            )

        elif mode == ProviderMode.TRACK17:
            from .track17 import Track17Provider
            return Track17Provider(
                api_key=settings.track17_api_key.strip(),
                base_url=settings.track17_base_url,
                timeout=settings.request_timeout,
                client=client,
            )

        elif mode == ProviderMode.CORREIOS_BACKEND:
            from .relay import CarrierRelayProvider
            return CarrierRelayProvider(
                base_url=settings.relay_base_url.strip(),
                fallback=simulated,
                timeout=settings.request_timeout,
                client=client,
            )

        raise ConfigurationError(f"Unknown provider mode: {mode}")
