# services/bootstrap.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional

from adapters.online.mapbox_client import MapboxClient
from config import Settings, get_settings
from core.cache import TTLCache
from core.interfaces import RoutingProvider
from services.emissions.calculator import EmissionsCalculator
from services.emissions.gas_prices import GasPriceTable

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything the routers need, built once per application."""

    settings: Settings
    gas_prices: GasPriceTable
    calculator: EmissionsCalculator
    geocoding_cache: TTLCache
    directions_cache: TTLCache
    provider: RoutingProvider

    def cache_stats(self) -> dict:
        return {
            "geocoding": self.geocoding_cache.stats(),
            "directions": self.directions_cache.stats(),
        }

    def clear_caches(self) -> None:
        self.geocoding_cache.clear()
        self.directions_cache.clear()
        self.geocoding_cache.reset_stats()
        self.directions_cache.reset_stats()
        logger.info("All caches cleared")


def build_services(
    settings: Optional[Settings] = None,
    provider: Optional[RoutingProvider] = None,
) -> Services:
    settings = settings or get_settings()
    settings.validate()

    gas_prices = GasPriceTable()
    geocoding_cache = TTLCache(
        "geocoding",
        ttl_seconds=settings.GEOCODING_CACHE.ttl_seconds,
        enabled=settings.GEOCODING_CACHE.enabled,
    )
    directions_cache = TTLCache(
        "directions",
        ttl_seconds=settings.DIRECTIONS_CACHE.ttl_seconds,
        enabled=settings.DIRECTIONS_CACHE.enabled,
    )
    provider = provider or MapboxClient(
        settings, geocoding_cache, directions_cache, gas_prices
    )
    return Services(
        settings=settings,
        gas_prices=gas_prices,
        calculator=EmissionsCalculator(gas_prices),
        geocoding_cache=geocoding_cache,
        directions_cache=directions_cache,
        provider=provider,
    )
