# services/emissions/gas_prices.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from core.rounding import round_half_up
from models.metrics import LocationContext

logger = logging.getLogger(__name__)

KM_PER_MILE = 1.60934

# Global average (USD per gallon) used when nothing in the table matches
DEFAULT_GAS_PRICE = 3.80

# Miles per gallon across the vehicle fleet
VEHICLE_EFFICIENCY: Dict[str, float] = {
    "efficient": 35,  # hybrids, compact cars
    "average": 25,  # sedans / crossovers
    "inefficient": 18,  # SUVs, trucks, older vehicles
}


@dataclass(frozen=True)
class GasPriceEntry:
    country: str
    region: Optional[str]
    price_per_gallon: float  # USD per gallon
    currency: str = "USD"


def _e(country: str, price: float, region: Optional[str] = None) -> GasPriceEntry:
    return GasPriceEntry(country=country, region=region, price_per_gallon=price)


# EIA state averages and national figures (2024), converted to USD per gallon.
GAS_PRICES: Tuple[GasPriceEntry, ...] = (
    # United States, by state
    _e("US", 4.80, "California"),
    _e("US", 3.65, "New York"),
    _e("US", 3.10, "Texas"),
    _e("US", 3.35, "Florida"),
    _e("US", 3.75, "Illinois"),
    _e("US", 3.60, "Pennsylvania"),
    _e("US", 3.40, "Ohio"),
    _e("US", 3.25, "Georgia"),
    _e("US", 3.30, "North Carolina"),
    _e("US", 3.55, "Michigan"),
    _e("US", 3.45, "New Jersey"),
    _e("US", 3.35, "Virginia"),
    _e("US", 4.50, "Washington"),
    _e("US", 3.60, "Arizona"),
    _e("US", 3.55, "Massachusetts"),
    _e("US", 3.20, "Tennessee"),
    _e("US", 3.45, "Indiana"),
    _e("US", 3.15, "Missouri"),
    _e("US", 3.50, "Maryland"),
    _e("US", 3.35, "Wisconsin"),
    _e("US", 3.55, "Colorado"),
    _e("US", 3.40, "Minnesota"),
    _e("US", 3.50),  # national average
    # Canada
    _e("CA", 4.20, "Ontario"),
    _e("CA", 4.35, "Quebec"),
    _e("CA", 4.65, "British Columbia"),
    _e("CA", 3.85, "Alberta"),
    _e("CA", 4.25),
    # Europe
    _e("GB", 6.80),
    _e("DE", 6.50),
    _e("FR", 6.90),
    _e("IT", 7.10),
    _e("ES", 6.20),
    _e("NL", 7.50),
    # Rest of world
    _e("AU", 5.20),
    _e("NZ", 5.50),
    _e("MX", 3.80),
    _e("JP", 5.40),
    _e("KR", 5.60),
)


def _as_context(ctx: Any) -> Tuple[Optional[str], Optional[str]]:
    if ctx is None:
        return None, None
    if isinstance(ctx, LocationContext):
        return ctx.country, ctx.region
    if isinstance(ctx, Mapping):
        return ctx.get("country"), ctx.get("region")
    return getattr(ctx, "country", None), getattr(ctx, "region", None)


class GasPriceTable:
    """
    Static fuel-price lookup. Resolution order is (country, region), then the
    country-level aggregate, then DEFAULT_GAS_PRICE. Lookups never raise.
    """

    def __init__(
        self,
        entries: Iterable[GasPriceEntry] = GAS_PRICES,
        default_price: float = DEFAULT_GAS_PRICE,
        efficiency: Optional[Mapping[str, float]] = None,
    ) -> None:
        self.default_price = default_price
        self.efficiency = dict(efficiency or VEHICLE_EFFICIENCY)
        self._by_region: Dict[Tuple[str, str], float] = {}
        self._by_country: Dict[str, float] = {}
        for entry in entries:
            if entry.region:
                self._by_region.setdefault((entry.country, entry.region), entry.price_per_gallon)
            else:
                self._by_country.setdefault(entry.country, entry.price_per_gallon)

    def get_gas_price_for_location(self, location_context: Any = None) -> float:
        country, region = _as_context(location_context)
        if not country:
            logger.debug("No location context provided, using default gas price")
            return self.default_price

        if region:
            price = self._by_region.get((country, region))
            if price is not None:
                logger.debug(
                    "Found exact gas price match",
                    extra={"country": country, "region": region, "price": price},
                )
                return price

        price = self._by_country.get(country)
        if price is not None:
            logger.debug(
                "Found country-level gas price match",
                extra={"country": country, "price": price},
            )
            return price

        logger.debug(
            "No gas price match found, using default",
            extra={"country": country, "region": region, "price": self.default_price},
        )
        return self.default_price

    @staticmethod
    def calculate_cost_per_km(price_per_gallon: float, miles_per_gallon: float) -> float:
        km_per_gallon = miles_per_gallon * KM_PER_MILE
        return price_per_gallon / km_per_gallon

    def get_cost_range(self, location_context: Any = None) -> Dict[str, float]:
        """Per-km driving cost at efficient / average / inefficient mpg."""
        price = self.get_gas_price_for_location(location_context)
        min_cost = self.calculate_cost_per_km(price, self.efficiency["efficient"])
        max_cost = self.calculate_cost_per_km(price, self.efficiency["inefficient"])
        avg_cost = self.calculate_cost_per_km(price, self.efficiency["average"])
        return {
            "min": round_half_up(min_cost, 2),
            "max": round_half_up(max_cost, 2),
            "average": round_half_up(avg_cost, 2),
            "price_per_gallon": price,
        }

    @staticmethod
    def parse_location_context(
        items: Optional[Iterable[Any]],
    ) -> Optional[LocationContext]:
        """
        Best-effort extraction of {country, region} from a Mapbox feature
        `context` array (items like {"id": "region.123", "text": "Texas",
        "short_code": "US-TX"}). Returns None when no country is found.
        """
        if not items:
            return None

        country: Optional[str] = None
        region: Optional[str] = None

        for item in items:
            if not isinstance(item, Mapping):
                continue
            item_id = item.get("id")
            item_id = item_id if isinstance(item_id, str) else ""
            text = item.get("text") if isinstance(item.get("text"), str) else None
            short_code = item.get("short_code")
            short_code = short_code if isinstance(short_code, str) else None

            if item_id.startswith("country."):
                if short_code:
                    country = short_code.upper().replace("US-", "").replace("GB-", "")
                else:
                    suffix = item_id.split(".", 1)[1]
                    country = suffix[:2].upper() or None
            elif item_id.startswith("region."):
                region = text
            elif short_code and "-" in short_code:
                parts: List[str] = short_code.split("-")
                if len(parts) == 2:
                    country = parts[0].upper()
                    if not region:
                        region = text

        if not country:
            return None
        return LocationContext(country=country, region=region)
