# services/emissions/calculator.py
from __future__ import annotations
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from core.exceptions import UnknownModeError, ValidationError
from core.rounding import round_half_up
from models.metrics import (
    ComparisonResult,
    ComparisonSummary,
    CostRange,
    LocationContext,
    Methodology,
    MetricsDetails,
    ModeMetrics,
    Recommendations,
    RouteMetrics,
)
from models.transport import TRANSPORT_MODES, TransportMode

from .gas_prices import GasPriceTable

logger = logging.getLogger(__name__)

# (inclusive upper bound of kg CO2 per km, rating), checked in ascending order
RATING_THRESHOLDS = (
    (0.0, "A"),
    (0.05, "A"),
    (0.10, "B"),
    (0.15, "C"),
    (0.25, "D"),
)


class EmissionsCalculator:
    """Rule-based carbon / cost / calorie metrics for a single route."""

    def __init__(
        self,
        gas_prices: GasPriceTable,
        modes: Optional[Mapping[str, TransportMode]] = None,
    ) -> None:
        self.gas_prices = gas_prices
        self.modes: Mapping[str, TransportMode] = modes or TRANSPORT_MODES

    def get_mode(self, mode: str) -> TransportMode:
        try:
            return self.modes[mode]
        except (KeyError, TypeError):
            raise UnknownModeError(mode) from None

    def calculate_metrics(
        self,
        distance: float,
        mode: str,
        duration: Optional[float] = None,
        location_context: Optional[LocationContext] = None,
    ) -> RouteMetrics:
        transport = self.get_mode(mode)
        if distance is None or distance < 0:
            raise ValidationError("Distance must be a non-negative number")
        if duration is not None and duration < 0:
            raise ValidationError("Duration must be a non-negative number")

        distance_km = distance / 1000.0

        carbon = self.carbon_emissions(distance_km, transport)

        cost_range: Optional[CostRange] = None
        if transport.id == "driving" and location_context is not None:
            cost_range = self.driving_cost_range(distance_km, location_context)
            estimated_cost = cost_range.average
        else:
            estimated_cost = round_half_up(distance_km * transport.cost_factor, 2)

        calories = (
            int(round_half_up(distance_km * transport.calories_factor))
            if transport.calories_factor
            else None
        )
        rating = self.environmental_rating(carbon, distance_km)

        metrics = RouteMetrics(
            carbon_emissions=carbon,
            estimated_cost=estimated_cost,
            cost_range=cost_range,
            calories=calories,
            health_impact=self.health_impact(transport.id, distance_km, calories),
            environmental_rating=rating,
            details=MetricsDetails(
                emissions_factor=transport.emissions_factor,
                distance_km=distance_km,
                breakdown=self.emissions_breakdown(transport, distance_km, carbon),
            ),
        )

        logger.info(
            "Calculated route metrics",
            extra={
                "mode": transport.id,
                "distance": distance,
                "carbon_emissions": carbon,
                "estimated_cost": estimated_cost,
                "environmental_rating": rating,
                "calories": calories,
            },
        )
        return metrics

    @staticmethod
    def carbon_emissions(distance_km: float, transport: TransportMode) -> float:
        return round_half_up(distance_km * transport.emissions_factor, 3)

    def driving_cost_range(
        self, distance_km: float, location_context: Any
    ) -> CostRange:
        per_km = self.gas_prices.get_cost_range(location_context)
        return CostRange(
            min=round_half_up(distance_km * per_km["min"], 2),
            max=round_half_up(distance_km * per_km["max"], 2),
            average=round_half_up(distance_km * per_km["average"], 2),
        )

    @staticmethod
    def environmental_rating(carbon_emissions: float, distance_km: float) -> str:
        # Rated from the already-rounded emissions, not the raw product
        if distance_km == 0:
            return "A"
        per_km = carbon_emissions / distance_km
        for bound, rating in RATING_THRESHOLDS:
            if per_km <= bound:
                return rating
        return "E"

    @staticmethod
    def health_impact(mode: str, distance_km: float, calories: Optional[int]) -> str:
        if mode == "walking":
            if distance_km < 1:
                return f"Great choice! You'll burn ~{calories} calories and get fresh air."
            if distance_km < 3:
                return (
                    f"Excellent exercise! You'll burn ~{calories} calories "
                    "and improve cardiovascular health."
                )
            return f"Fantastic workout! You'll burn ~{calories} calories, about a gym session."

        if mode == "cycling":
            if distance_km < 2:
                return f"Good exercise! You'll burn ~{calories} calories and reduce air pollution."
            if distance_km < 10:
                return f"Great workout! You'll burn ~{calories} calories and strengthen your muscles."
            return f"Amazing exercise! You'll burn ~{calories} calories, excellent for fitness."

        if mode == "transit":
            if distance_km < 5:
                return "Eco-friendly choice! Consider walking part of the way for added health benefits."
            return "Smart sustainable choice! You're reducing traffic and emissions."

        if mode == "driving":
            if distance_km < 2:
                return "Consider walking or cycling for short distances, better for health and environment."
            if distance_km < 5:
                return "For regular trips, consider cycling or public transport alternatives."
            return "For long trips, consider carpooling or public transport when possible."

        return "Consider the environmental and health impacts of your transport choice."

    @staticmethod
    def emissions_breakdown(
        transport: TransportMode, distance_km: float, total: float
    ) -> str:
        ef = transport.emissions_factor
        if transport.id == "walking":
            return "Zero direct emissions. Walking is the most sustainable transport option."
        if transport.id == "cycling":
            return f"Minimal emissions from bike manufacturing and maintenance ({ef} kg CO2/km)."
        if transport.id == "driving":
            return (
                f"Emissions from fuel combustion ({ef} kg CO2/km). "
                f"Total: {total} kg CO2 for {distance_km:.1f} km."
            )
        if transport.id == "transit":
            return (
                f"Shared emissions per passenger ({ef} kg CO2/km). "
                f"Total: {total} kg CO2, much lower per person than individual car travel."
            )
        return f"Emissions calculated using factor of {ef} kg CO2/km."

    # ---- multi-mode ----
    def compare_transport_modes(
        self,
        distance: float,
        modes: Sequence[str],
        location_context: Optional[LocationContext] = None,
    ) -> List[ModeMetrics]:
        rows = [
            ModeMetrics(
                mode=m,
                **self.calculate_metrics(
                    distance, m, location_context=location_context
                ).model_dump(),
            )
            for m in modes
        ]
        # sorted() is stable: equal emissions keep input order
        return sorted(rows, key=lambda r: r.carbon_emissions)

    def compare_summary(
        self,
        distance: float,
        modes: Sequence[str],
        location_context: Optional[LocationContext] = None,
    ) -> ComparisonResult:
        if not modes:
            raise ValidationError("Modes must be a non-empty array")
        comparison = self.compare_transport_modes(distance, modes, location_context)
        best, worst = comparison[0], comparison[-1]
        return ComparisonResult(
            comparison=comparison,
            summary=ComparisonSummary(
                best_option=best,
                worst_option=worst,
                carbon_savings=round_half_up(worst.carbon_emissions - best.carbon_emissions, 3),
                cost_savings=round_half_up(worst.estimated_cost - best.estimated_cost, 2),
                recommendations=self.get_recommendations(distance / 1000.0),
            ),
        )

    @staticmethod
    def get_recommendations(distance_km: float) -> Recommendations:
        if distance_km < 1:
            return Recommendations(
                recommended=["walking"],
                avoid=["driving"],
                message="For short distances under 1km, walking is fastest and healthiest!",
            )
        if distance_km < 3:
            return Recommendations(
                recommended=["walking", "cycling"],
                avoid=["driving"],
                message="Perfect distance for walking or cycling, great for health and environment.",
            )
        if distance_km < 8:
            return Recommendations(
                recommended=["cycling", "transit"],
                avoid=[],
                message="Cycling or public transport are efficient and sustainable for this distance.",
            )
        return Recommendations(
            recommended=["transit", "driving"],
            avoid=[],
            message="For longer distances, public transport is more sustainable than driving alone.",
        )

    # ---- display helpers ----
    def describe_modes(self) -> List[Dict[str, Any]]:
        out = []
        for mode in self.modes.values():
            d = mode.to_dict()
            d["emissionsDescription"] = (
                "Zero emissions"
                if mode.emissions_factor == 0
                else f"{mode.emissions_factor} kg CO2 per km"
            )
            d["costDescription"] = (
                "Free" if mode.cost_factor == 0 else f"~${mode.cost_factor:.2f} per km"
            )
            if mode.calories_factor:
                d["healthBenefits"] = f"Burns ~{mode.calories_factor} calories per km"
            out.append(d)
        return out

    def get_methodology(self, mode: str) -> Methodology:
        transport = self.get_mode(mode)
        info = METHODOLOGY[transport.id]
        return Methodology(emissions_factor=transport.emissions_factor, **info)


METHODOLOGY: Dict[str, Dict[str, Any]] = {
    "driving": {
        "methodology": "Weighted average from EPA, DEFRA, and EEA data",
        "sources": [
            "US EPA (2023): 0.404 kg CO2/km for average passenger vehicle",
            "UK DEFRA (2023): 0.171 kg CO2/km for average petrol/diesel car",
            "EU EEA (2023): ~0.108 kg CO2/km for new cars (WLTP standard)",
        ],
        "factors": [
            "Fleet mix including older vehicles (higher emissions)",
            "Real-world driving vs laboratory conditions",
            "Mix of vehicle types from compact cars to SUVs",
            "Regional fuel efficiency standards",
        ],
        "note": "Actual emissions vary significantly by vehicle age, type, and driving conditions.",
    },
    "cycling": {
        "methodology": "Zero direct emissions, minimal lifecycle emissions",
        "sources": ["Lifecycle assessment studies for bicycle manufacturing"],
        "factors": [
            "Manufacturing emissions (spread over bicycle lifetime)",
            "Maintenance and replacement parts",
        ],
        "note": (
            "Lifecycle emissions from manufacturing are approximately 0.021 kg CO2/km "
            "but not included in direct transport emissions."
        ),
    },
    "walking": {
        "methodology": "Zero emissions",
        "sources": ["Direct measurement, no fossil fuel combustion"],
        "factors": ["No direct emissions", "Minimal infrastructure requirements"],
        "note": "Most sustainable transport option with additional health benefits.",
    },
    "transit": {
        "methodology": "Per-passenger emissions for typical public transport mix",
        "sources": ["Various transit agency data and government transport statistics"],
        "factors": ["Vehicle occupancy rates", "Mix of bus, rail, and metro transport"],
        "note": (
            "Includes buses, trains, and metro systems. Varies by occupancy rates "
            "and regional energy mix."
        ),
    },
}
